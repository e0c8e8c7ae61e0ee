"""
Reconcile planned trains from one export against the scheduled train store.

Decides, for a batch of candidates and the stored trains for the same
dates, which planning rows to write and which to withdraw:

- candidates whose formation uses rolling stock from another division are
  dropped
- candidates without a passenger or cancelled trip are dropped
- candidates for a slot already owned by dispatch or manual data are
  dropped; those sources always win over planning
- planning rows for a covered date that no surviving candidate speaks for
  any more are cancelled

The reconciler is pure: it reads its inputs and returns a result, all
writes happen in the loader.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple
from pydantic import ValidationError
from schemas.planning import PlannedTrain, PlannedTrip, ScheduledTrainCreate
from models.base import SourceType
from models.scheduled_train import ScheduledTrain
from core.config import settings
from core.metrics import ImportMetrics
import logging

logger = logging.getLogger(__name__)

SKIP_INVALID_DIVISION = "invalid_division"
SKIP_NO_RELEVANT_TRIP = "no_relevant_trip"
SKIP_MANAGED_ELSEWHERE = "managed_elsewhere"
SKIP_UNMAPPABLE = "unmappable"
SKIP_SUPERSEDED = "superseded_in_batch"

TrainKey = Tuple[str, date, int]


@dataclass
class SkippedTrain:
    candidate: PlannedTrain
    reason: str


@dataclass
class ReconciliationResult:
    """Decisions for one batch of planned trains"""
    to_persist: List[ScheduledTrainCreate] = field(default_factory=list)
    to_cancel: List[ScheduledTrain] = field(default_factory=list)
    skipped: List[SkippedTrain] = field(default_factory=list)
    covered_dates: Set[date] = field(default_factory=set)


class PlanningReconciler:
    """
    Diff planned trains against stored scheduled trains.

    Args:
        division_code: Only formations made up entirely of this division are kept
        operator_id: Operator all planning rows are recorded under
        metrics: Optional metrics sink for skip counters
    """

    def __init__(
        self,
        division_code: Optional[str] = None,
        operator_id: Optional[int] = None,
        metrics: Optional[ImportMetrics] = None
    ):
        self.division_code = (division_code or settings.PLANNING_DIVISION_CODE).upper()
        self.operator_id = operator_id if operator_id is not None else settings.PLANNING_OPERATOR_ID
        self.metrics = metrics

    def reconcile(
        self,
        candidates: Iterable[PlannedTrain],
        existing: Iterable[ScheduledTrain]
    ) -> ReconciliationResult:
        """
        Decide what to persist and what to cancel.

        Args:
            candidates: Planned trains from one file, in file order
            existing: Stored scheduled trains for the dates the file covers

        Returns:
            ReconciliationResult with rows to persist, rows to cancel and
            the candidates that were dropped
        """
        candidates = list(candidates)
        existing = list(existing)
        result = ReconciliationResult(covered_dates=self.covered_dates(candidates))

        managed_elsewhere = self._index_managed_elsewhere(existing)
        survivors: Dict[TrainKey, Tuple[PlannedTrain, ScheduledTrainCreate]] = {}

        for candidate in candidates:
            reason = None
            train = None

            if not self._is_valid(candidate):
                reason = SKIP_INVALID_DIVISION
                logger.info(
                    f"Train formation planning for {candidate.log_label()} has sections "
                    f"outside division {self.division_code}, skipping"
                )
            else:
                relevant = self._select_relevant_trip(candidate)
                if relevant is None:
                    reason = SKIP_NO_RELEVANT_TRIP
                    logger.info(
                        f"Train formation planning for {candidate.log_label()} has no "
                        f"passenger or cancelled trips, skipping"
                    )
                elif self._key_for(relevant) in managed_elsewhere:
                    reason = SKIP_MANAGED_ELSEWHERE
                    logger.info(
                        f"Train {managed_elsewhere[self._key_for(relevant)].log_label()} already exists "
                        f"and is not managed by planning, skipping {candidate.log_label()}"
                    )
                else:
                    try:
                        train = self._to_scheduled_train(relevant, candidate)
                    except (ValidationError, ValueError) as e:
                        reason = SKIP_UNMAPPABLE
                        logger.error(f"Failed processing train formation {candidate.log_label()}: {e}")

            if reason:
                self._skip(result, candidate, reason)
                continue

            if train.key in survivors:
                previous, _ = survivors[train.key]
                logger.warning(
                    f"Ambiguous planning input: {candidate.log_label()} replaces "
                    f"{previous.log_label()} for the same train and date"
                )
                self._skip(result, previous, SKIP_SUPERSEDED)

            survivors[train.key] = (candidate, train)

        result.to_persist = [train for _, train in survivors.values()]
        result.to_cancel = self.find_trains_to_cancel(existing, set(survivors), result.covered_dates)

        if self.metrics:
            self.metrics.record_trains_to_save(len(result.to_persist))

        logger.info(
            f"Reconciled {len(candidates)} planned trains: {len(result.to_persist)} to persist, "
            f"{len(result.to_cancel)} to cancel, {len(result.skipped)} skipped"
        )
        return result

    @staticmethod
    def covered_dates(candidates: Iterable[PlannedTrain]) -> Set[date]:
        """Dates the batch speaks for; only these may see cancellations"""
        dates = set()
        for candidate in candidates:
            dates |= candidate.start_dates()
        return dates

    def find_trains_to_cancel(
        self,
        existing: Iterable[ScheduledTrain],
        surviving_keys: Set[TrainKey],
        covered_dates: Set[date]
    ) -> List[ScheduledTrain]:
        """
        Planning rows on a covered date that the batch no longer contains.
        """
        to_cancel = []

        for train in existing:
            if train.source_type != SourceType.PLANNING:
                continue
            if train.operator_id != self.operator_id:
                continue
            if train.is_deleted or train.is_canceled:
                continue
            if train.scheduled_date not in covered_dates:
                continue
            if train.key in surviving_keys:
                continue
            to_cancel.append(train)

        return to_cancel

    def _is_valid(self, candidate: PlannedTrain) -> bool:
        for trip in candidate.trips:
            if trip.sections is None:
                continue
            if any(section.division.upper() != self.division_code for section in trip.sections):
                return False
        return True

    @staticmethod
    def _select_relevant_trip(candidate: PlannedTrain) -> Optional[PlannedTrip]:
        for trip in candidate.trips:
            if trip.is_passenger_trip or trip.is_canceled:
                return trip
        return None

    def _index_managed_elsewhere(self, existing: List[ScheduledTrain]) -> Dict[TrainKey, ScheduledTrain]:
        return {
            train.key: train
            for train in existing
            if train.source_type != SourceType.PLANNING and not train.is_deleted
        }

    def _key_for(self, trip: PlannedTrip) -> TrainKey:
        return (trip.train_number, trip.start_date, self.operator_id)

    def _to_scheduled_train(self, trip: PlannedTrip, candidate: PlannedTrain) -> ScheduledTrainCreate:
        return ScheduledTrainCreate(
            train_number=trip.train_number,
            scheduled_date=trip.start_date,
            operator_id=self.operator_id,
            source_type=SourceType.PLANNING,
            source=candidate.source_file,
            trip_type=trip.trip_type,
            origin=trip.origin,
            destination=trip.destination,
            planned_departure=trip.departure,
            planned_arrival=trip.arrival,
            is_canceled=trip.is_canceled,
        )

    def _skip(self, result: ReconciliationResult, candidate: PlannedTrain, reason: str) -> None:
        result.skipped.append(SkippedTrain(candidate=candidate, reason=reason))
        if self.metrics:
            self.metrics.record_skip(reason)
