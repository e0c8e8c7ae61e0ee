"""
Pydantic schemas for data validation and serialization.

Schemas:
    planning: Planned trains from the export, scheduled train rows to write,
        file references
    events: Domain events emitted after commits
    api: API endpoint response models

Usage:
    from schemas.planning import PlannedTrain, ScheduledTrainCreate
    from schemas.events import DomainEvent, EventType
    from schemas.api import HealthCheckResponse, StatsResponse

Example:
    train = PlannedTrain(
        train_number="101",
        start_date="2024-05-01",
        source_file="train-formation-planning/2024-05-01.xml",
        trips=[{"train_number": "101", "start_date": "2024-05-01", "trip_type": "PassengerTrip"}]
    )
    assert train.trips[0].is_passenger_trip
"""

__all__ = [
    "TrainSection",
    "PlannedTrip",
    "PlannedTrain",
    "ScheduledTrainCreate",
    "PlanningFileRef",
    "PlanningFileData",
    "DomainEvent",
    "EventType",
    "HealthCheckResponse",
    "TrainsResponse",
    "StatsResponse",
]
