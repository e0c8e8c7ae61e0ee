"""
Commit reconciliation results to PostgreSQL and publish the matching events
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, update
from sqlalchemy.dialects.postgresql import insert
from models.base import SourceType
from models.scheduled_train import ScheduledTrain
from schemas.planning import ScheduledTrainCreate
from schemas.events import DomainEvent, EventType
from ingestion.publishers.base import EventPublisher
from core.metrics import ImportMetrics
from core.exceptions import CommitError, CancellationCommitError, EventPublishError
import logging

logger = logging.getLogger(__name__)

KEY_COLUMNS = ["train_number", "scheduled_date", "operator_id"]

UPDATABLE_COLUMNS = [
    "source",
    "trip_type",
    "origin",
    "destination",
    "planned_departure",
    "planned_arrival",
    "is_canceled",
    "modified",
]


class ScheduleLoader:
    """
    Write planning trains with upsert logic and emit events after commit.

    Ensures:
    - All inserts and updates of a batch land in one transaction or not at all
    - Cancellations run in a second, independent transaction
    - Rows owned by dispatch or manual data are never touched
    - Events are only published for writes that committed
    """

    def __init__(
        self,
        db_session: AsyncSession,
        publisher: EventPublisher,
        metrics: Optional[ImportMetrics] = None
    ):
        self.db = db_session
        self.publisher = publisher
        self.metrics = metrics

    async def commit(
        self,
        to_persist: List[ScheduledTrainCreate],
        existing_snapshot: Iterable[ScheduledTrain],
        to_cancel: List[ScheduledTrain],
        source_file: Optional[str] = None
    ) -> List[DomainEvent]:
        """
        Apply one reconciliation result.

        Args:
            to_persist: Planning rows to insert or update
            existing_snapshot: Stored trains the result was computed against
            to_cancel: Planning rows that left the export
            source_file: Export the result was computed from

        Returns:
            Events produced by both transactions, in commit order

        Raises:
            CommitError: If the insert/update transaction failed
            CancellationCommitError: If the cancellation transaction failed;
                the insert/update batch stays committed
        """
        events = await self.persist(to_persist, existing_snapshot)
        events += await self.cancel(to_cancel, source_file)
        return events

    async def persist(
        self,
        trains: List[ScheduledTrainCreate],
        existing_snapshot: Iterable[ScheduledTrain]
    ) -> List[DomainEvent]:
        """
        Upsert planning trains in a single transaction (INSERT ON CONFLICT UPDATE).
        """
        prepared = []
        for train in trains:
            try:
                prepared.append((train, self._prepare_row(train)))
            except Exception as e:
                logger.error(f"Failed preparing train {train.log_label()} for persistence: {e}")

        if not prepared:
            return []

        planning_keys = {
            train.key for train in existing_snapshot
            if train.source_type == SourceType.PLANNING
        }

        events = []
        try:
            for train, values in prepared:
                stmt = insert(ScheduledTrain).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=KEY_COLUMNS,
                    set_={column: stmt.excluded[column] for column in UPDATABLE_COLUMNS},
                    where=and_(
                        ScheduledTrain.source_type == SourceType.PLANNING,
                        ScheduledTrain.is_deleted.is_(False)
                    )
                ).returning(ScheduledTrain.id)

                result = await self.db.execute(stmt)
                if result.scalar_one_or_none() is None:
                    # Slot is held by a non-planning row or was deleted by its owner
                    logger.info(f"Train {train.log_label()} is held by a foreign or deleted row, not written")
                    continue

                event_type = EventType.TRAIN_UPDATED if train.key in planning_keys else EventType.TRAIN_CREATED
                events.append(DomainEvent.for_train(event_type, train))

            await self.db.commit()

        except Exception as e:
            await self.db.rollback()
            raise CommitError(
                "Failed to save planning trains",
                context={
                    "operation": "UPSERT",
                    "table_name": ScheduledTrain.__tablename__,
                    "batch_size": len(prepared)
                },
                original_exception=e
            )

        logger.info(f"Saving {len(prepared)} trains complete, {len(events)} written")

        await self._publish(events, phase="upsert")
        return events

    async def cancel(
        self,
        trains: List[ScheduledTrain],
        source_file: Optional[str] = None
    ) -> List[DomainEvent]:
        """
        Mark planning trains cancelled in a single transaction.

        Cancelled events name source_file, the export that withdrew the
        train, when it is given; otherwise the file stored on the row.
        """
        if not trains:
            return []

        now = datetime.utcnow()
        events = []

        try:
            for train in trains:
                stmt = (
                    update(ScheduledTrain)
                    .where(
                        ScheduledTrain.id == train.id,
                        ScheduledTrain.source_type == SourceType.PLANNING
                    )
                    .values(is_canceled=True, modified=now)
                    .returning(ScheduledTrain.id)
                    .execution_options(synchronize_session=False)
                )

                result = await self.db.execute(stmt)
                if result.scalar_one_or_none() is None:
                    logger.warning(f"Train {train.log_label()} is no longer a planning row, not cancelled")
                    continue

                events.append(DomainEvent.for_train(
                    EventType.TRAIN_CANCELLED,
                    train,
                    is_canceled=True,
                    source=source_file or train.source
                ))
                logger.info(f"Cancel train {train.log_label()}")

            await self.db.commit()

        except Exception as e:
            await self.db.rollback()
            raise CancellationCommitError(
                "Failed cancelling planning trains",
                context={
                    "operation": "CANCEL",
                    "table_name": ScheduledTrain.__tablename__,
                    "batch_size": len(trains)
                },
                original_exception=e
            )

        if self.metrics:
            self.metrics.record_cancelled(len(events))

        await self._publish(events, phase="cancel")
        return events

    def _prepare_row(self, train: ScheduledTrainCreate) -> Dict[str, Any]:
        if train.source_type != SourceType.PLANNING:
            raise ValueError(f"Refusing to write {train.source_type.value} row from planning data")

        now = datetime.utcnow()
        values = train.dict()
        values["created_at"] = now
        values["modified"] = now
        values["is_deleted"] = False
        return values

    async def _publish(self, events: List[DomainEvent], phase: str) -> None:
        """
        Hand committed events to the message bus.

        A failure here is not rolled back: the store is already correct and
        downstream consumers have to be reconciled out of band.
        """
        if not events:
            return

        try:
            await self.publisher.publish(events)
        except Exception as e:
            error = e if isinstance(e, EventPublishError) else EventPublishError(
                "Failed to publish events for committed batch",
                context={"event_count": len(events)},
                original_exception=e
            )
            error.context["phase"] = phase
            logger.critical(
                f"Committed {phase} batch but {len(events)} events were not published; "
                f"downstream consumers are out of sync: {error}",
                extra={"error_context": error.to_dict()}
            )
            if self.metrics:
                self.metrics.record_publish_failure(phase)
            return

        if self.metrics:
            self.metrics.record_events_published(len(events))

        logger.info(f"Sending {len(events)} {phase} events complete")
