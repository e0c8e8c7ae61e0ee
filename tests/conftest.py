"""
Pytest configuration and fixtures
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from prometheus_client import CollectorRegistry
from core.metrics import ImportMetrics


@pytest.fixture
def metrics():
    """Metrics on a private registry so tests never collide"""
    return ImportMetrics(CollectorRegistry())


@pytest.fixture
def mock_session():
    """AsyncSession stand-in; add() is synchronous on the real session"""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_export_xml():
    """A small planning export with one valid, one foreign and one noise record"""
    return b"""<?xml version="1.0" encoding="utf-8"?>
<TrainFormationPlanning>
  <Header created="2024-05-01T01:00:00" />
  <TrainFormation trainNumber="101" startDate="2024-05-01">
    <Train trainNumber="101" startDate="2024-05-01" tripType="PassengerTrip" canceled="false"
           origin="KH" destination="AR" departure="2024-05-01T06:00:00" arrival="2024-05-01T09:10:00">
      <TrainSections>
        <TrainSection division="STOG" position="1" />
        <TrainSection division="stog" position="2" />
      </TrainSections>
    </Train>
  </TrainFormation>
  <TrainFormation trainNumber="305" startDate="2024-05-01">
    <Train trainNumber="305" startDate="2024-05-01" tripType="PassengerTrip" canceled="false">
      <TrainSections>
        <TrainSection division="REGIONAL" position="1" />
      </TrainSections>
    </Train>
  </TrainFormation>
  <TrainFormation trainNumber="9001" startDate="2024-05-01">
    <Train trainNumber="9001" startDate="2024-05-01" tripType="EmptyTrip" canceled="false" />
  </TrainFormation>
</TrainFormationPlanning>
"""
