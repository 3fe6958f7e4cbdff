# SPDX-License-Identifier: Apache-2.0

"""
Change feed listener keeping demographic statistics current.

Watches the resident and status collections and recomputes the full
demographic summary on every change. Events are processed one at a time in
arrival order.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from opentelemetry import trace
from pymongo.errors import PyMongoError

from models.demographics import DemographicSummary
from services.demographics import DemographicsService
from services.mongodb import (
    MongoDBService,
    PersistenceError,
    RESIDENTS_COLLECTION,
    STATUS_COLLECTION
)


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

WATCHED_COLLECTIONS = (RESIDENTS_COLLECTION, STATUS_COLLECTION)

SummaryCallback = Callable[[DemographicSummary], None]


class ChangeFeedListener:
    """Recomputes demographics whenever a watched collection changes."""

    def __init__(self, repository: MongoDBService, demographics: DemographicsService):
        self.repository = repository
        self.demographics = demographics
        self.latest_summary: Optional[DemographicSummary] = None
        self._callbacks: List[SummaryCallback] = []
        self._streams: List[Tuple[str, Any]] = []
        self._running = False

    def subscribe(self, callback: SummaryCallback) -> None:
        """Register a callback invoked with every recomputed summary."""
        self._callbacks.append(callback)

    def refresh(self) -> Optional[DemographicSummary]:
        """
        Recompute the summary and notify subscribers.

        A failed recompute is logged and the previous summary is kept.
        """
        with tracer.start_as_current_span("change_feed.recompute"):
            try:
                summary = self.demographics.refresh()
            except PersistenceError as e:
                logger.error(f"Demographics recompute failed, keeping previous summary: {e}")
                return self.latest_summary

        self.latest_summary = summary
        for callback in self._callbacks:
            callback(summary)
        return summary

    def handle_change(self, table: str, event: Optional[Dict[str, Any]] = None) -> Optional[DemographicSummary]:
        """
        Process one change event.

        Args:
            table: Collection the event came from
            event: Change stream document (only used for logging)

        Returns:
            The current summary after processing
        """
        if table not in WATCHED_COLLECTIONS:
            logger.debug(f"Ignoring change on unwatched collection {table}")
            return self.latest_summary

        operation = (event or {}).get("operationType")
        logger.debug(
            f"Change on {table}, recomputing demographics",
            extra={"extra_fields": {"collection": table, "operation": operation}}
        )
        return self.refresh()

    def run(self, max_events: Optional[int] = None) -> int:
        """
        Consume change events until stopped.

        Opens one change stream per watched collection and polls them in
        turn. An error on the stream ends the session.

        Args:
            max_events: Stop after this many events (None to run until stop())

        Returns:
            Number of events processed
        """
        self._running = True
        processed = 0

        try:
            self._streams = [
                (collection, self.repository.watch(collection))
                for collection in WATCHED_COLLECTIONS
            ]
            logger.info(f"Listening for changes on {', '.join(WATCHED_COLLECTIONS)}")

            while self._running:
                for collection, stream in list(self._streams):
                    if not self._running:
                        break
                    if max_events is not None and processed >= max_events:
                        self._running = False
                        break

                    event = stream.try_next()
                    if event is None:
                        continue

                    self.handle_change(collection, event)
                    processed += 1

        except PyMongoError as e:
            logger.error(f"Change stream failed after {processed} events: {e}")
            raise PersistenceError(f"Change stream failed: {e}") from e

        finally:
            self.stop()

        return processed

    def stop(self) -> None:
        """Stop consuming and close open change streams."""
        self._running = False
        streams, self._streams = self._streams, []
        for collection, stream in streams:
            try:
                stream.close()
            except PyMongoError as e:
                logger.warning(f"Failed to close change stream on {collection}: {e}")
