# ==== BOX STORE ==== #

"""
Box store: the persistence boundary of the shipping engine.

The store assigns identifiers and creation timestamps and returns boxes
newest first. Database failures are wrapped in StorageError with the
operation named in the message; nothing is retried here.
"""

from datetime import datetime
from typing import Callable, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from boxship.business.errors import StorageError
from boxship.observability.logging import ContextualLogger
from boxship.observability.metrics import (
    boxes_saved_total,
    shipping_cost_amount,
    storage_errors_total,
)
from boxship.observability.tracing import get_tracer
from boxship.services.shipping import BoxPayload, BoxSubmission, build_record
from boxship.storage.models import Box, utcnow


logger = ContextualLogger(__name__)
tracer = get_tracer(__name__)


class BoxStore:
    """
    Insert and list boxes on an async SQLAlchemy session.

    The session's transaction is committed on every successful insert so
    the record is visible to later readers. ``clock`` supplies creation
    timestamps.
    """

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    async def insert(self, payload: BoxPayload) -> Box:
        """
        Persist a box payload.

        Args:
            payload (BoxPayload): Record built by the shipping engine

        Returns:
            Box: Stored record with id and created_at assigned

        Raises:
            StorageError: If the database rejects the insert
        """
        with tracer.start_as_current_span("box_store_insert") as span:
            span.set_attribute("destination_country", payload.destination_country)

            box = Box(**payload.as_dict(), created_at=self.clock())
            try:
                self.db.add(box)
                await self.db.commit()
                await self.db.refresh(box)
            except SQLAlchemyError as exc:
                await self.db.rollback()
                storage_errors_total.labels(operation="insert").inc()
                logger.error(
                    "Box insert failed",
                    destination_country=payload.destination_country,
                    error=str(exc),
                )
                raise StorageError(f"Failed to save box: {exc}", operation="insert") from exc

            boxes_saved_total.labels(destination_country=box.destination_country).inc()
            shipping_cost_amount.labels(destination_country=box.destination_country).observe(
                box.shipping_cost
            )
            span.set_attribute("box_id", box.id)

            logger.info(
                "Box saved",
                box_id=box.id,
                destination_country=box.destination_country,
                shipping_cost=box.shipping_cost,
            )
            return box

    async def list_all(self) -> List[Box]:
        """
        Fetch every box, most recent first.

        Raises:
            StorageError: If the query fails
        """
        with tracer.start_as_current_span("box_store_list_all") as span:
            query = select(Box).order_by(Box.created_at.desc(), Box.id.desc())
            try:
                result = await self.db.execute(query)
            except SQLAlchemyError as exc:
                storage_errors_total.labels(operation="list_all").inc()
                logger.error("Box listing failed", error=str(exc))
                raise StorageError(f"Failed to fetch boxes: {exc}", operation="list_all") from exc

            boxes = list(result.scalars().all())
            span.set_attribute("box_count", len(boxes))
            return boxes


async def save_box(store: BoxStore, submission: BoxSubmission) -> Box:
    """
    Build the record for an already validated submission and insert it.

    Raises:
        UnknownDestination: If the destination is not in the pricing table
        StorageError: If the insert fails
    """
    payload = build_record(submission)
    return await store.insert(payload)


async def fetch_boxes(store: BoxStore) -> List[Box]:
    """List boxes newest first."""
    return await store.list_all()
