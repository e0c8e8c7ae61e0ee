"""
Map parsed planning records into PlannedTrain candidates with Pydantic validation
"""

from typing import Dict, Any, List, Iterable
from pydantic import ValidationError
from schemas.planning import PlannedTrain
from ingestion.parsers.formation_parser import FORMATION_RECORD
from core.exceptions import MappingError
import logging

logger = logging.getLogger(__name__)


class TrainFormationMapper:
    """
    Convert parsed train formation records into PlannedTrain candidates.

    Handles:
    - Dropping records that are not train formations
    - Dropping formations without trips
    - Defaulting the formation key from its first trip
    - Skipping malformed records without failing the batch
    """

    def map(self, records: Iterable[Dict[str, Any]], source_identifier: str) -> List[PlannedTrain]:
        """
        Map raw records from one file.

        Args:
            records: Records produced by the parser
            source_identifier: Name of the file the records came from

        Returns:
            Planned trains in file order
        """
        planned_trains = []
        noise = 0
        malformed = 0

        for index, record in enumerate(records):
            if record.get("record_type") != FORMATION_RECORD or not record.get("trips"):
                noise += 1
                continue

            try:
                planned_trains.append(self._map_record(record, source_identifier))
            except (ValidationError, ValueError, TypeError) as e:
                malformed += 1
                error = MappingError(
                    "Skipping malformed train formation record",
                    context={
                        "source_file": source_identifier,
                        "record_index": index,
                        "train_number": record.get("train_number"),
                        "field_errors": e.errors() if isinstance(e, ValidationError) else str(e)
                    },
                    original_exception=e
                )
                logger.warning(str(error), extra={"error_context": error.to_dict()})

        logger.info(
            f"Mapped {len(planned_trains)} train formations from {source_identifier} "
            f"({noise} non-trip records, {malformed} malformed)"
        )
        return planned_trains

    def _map_record(self, record: Dict[str, Any], source_identifier: str) -> PlannedTrain:
        trips = record["trips"]
        first_trip = trips[0]

        return PlannedTrain(
            train_number=record.get("train_number", first_trip.get("train_number")),
            start_date=record.get("start_date", first_trip.get("start_date")),
            source_file=source_identifier,
            trips=trips,
        )
