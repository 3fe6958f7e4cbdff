# SPDX-License-Identifier: Apache-2.0

"""
Demographics service: fetch, normalize and aggregate resident records.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from models.demographics import DemographicSummary
from models.entities import ResidentRecord
from models.enums import ProfileStatusCode
from domain.aggregation import aggregate_demographics
from domain.normalization import normalize_records
from domain.residents import ResidentFilters, filter_residents, sort_residents
from services.mongodb import MongoDBService, PersistenceError


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class DemographicsService:
    """Recomputes population statistics from approved resident records."""

    def __init__(self, repository: MongoDBService, today: Optional[date] = None):
        self.repository = repository
        # Fixed reference date for age derivation; None means the current date
        self.today = today

    def refresh(self) -> DemographicSummary:
        """
        Rebuild the demographic summary from scratch.

        Returns:
            DemographicSummary over all approved records

        Raises:
            PersistenceError: When approved records cannot be fetched
        """
        with tracer.start_as_current_span("demographics.refresh") as span:
            try:
                documents = self.repository.fetch_approved_residents()
            except PersistenceError as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

            records = normalize_records(documents)
            summary = aggregate_demographics(records, self.today)

            span.set_attributes({
                "demographics.households": summary.total_households,
                "demographics.residents": summary.total_residents
            })
            logger.info(
                "Demographics refreshed",
                extra={
                    "extra_fields": {
                        "households": summary.total_households,
                        "residents": summary.total_residents,
                        "seniors": summary.senior_citizens
                    }
                }
            )
            return summary

    def list_residents(
        self,
        filters: Optional[ResidentFilters] = None,
        sort: str = "default"
    ) -> List[ResidentRecord]:
        """All residents, filtered and ordered for the administrator list."""
        records = normalize_records(self.repository.fetch_residents())
        if filters is not None:
            records = filter_residents(records, filters)
        return sort_residents(records, sort)

    def status_counts(self) -> Dict[ProfileStatusCode, int]:
        """
        Dashboard counts per status, missing status rows counted as pending.

        Counting happens in the database; use count_by_status for records
        already in memory.

        Raises:
            PersistenceError: When a count query fails
        """
        with tracer.start_as_current_span("demographics.status_counts") as span:
            try:
                return {status: self.repository.count_status(status) for status in ProfileStatusCode}
            except PersistenceError as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise
