# SPDX-License-Identifier: Apache-2.0

"""
Resident list filtering, ordering and status counts for administrators.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from models.entities import ResidentRecord
from models.enums import ProfileStatusCode

SORT_OPTIONS = (
    "default",
    "name-asc",
    "name-desc",
    "status-asc",
    "status-desc",
    "date-asc",
    "date-desc",
)

_EPOCH = datetime(1970, 1, 1)


@dataclass
class ResidentFilters:
    """Filters for the resident list."""
    search_term: Optional[str] = None
    status: Optional[ProfileStatusCode] = None


def display_name(record: ResidentRecord) -> str:
    """Display name ("First Last") used by the resident list search."""
    first = record.household.first_name or "Unknown"
    last = record.household.last_name or "Unknown"
    return f"{first} {last}"


def _status_date(record: ResidentRecord) -> datetime:
    if record.profile_status is None or record.profile_status.updated_at is None:
        return _EPOCH
    return record.profile_status.updated_at.replace(tzinfo=None)


def filter_residents(records: List[ResidentRecord], filters: ResidentFilters) -> List[ResidentRecord]:
    """
    Filter residents by name search and status.

    Args:
        records: Normalized resident records
        filters: Filter criteria

    Returns:
        Filtered list, original order kept
    """
    filtered = records

    if filters.search_term:
        needle = filters.search_term.lower()
        filtered = [r for r in filtered if needle in display_name(r).lower()]

    if filters.status is not None:
        wanted = ProfileStatusCode(filters.status)
        filtered = [r for r in filtered if r.status == wanted]

    return filtered


def _default_order_key(record: ResidentRecord) -> Tuple[int, datetime, str]:
    if record.status == ProfileStatusCode.PENDING:
        return (0, _status_date(record), "")
    if record.status == ProfileStatusCode.APPROVED:
        return (2, _EPOCH, (record.household.last_name or "Unknown").casefold())
    return (1, _status_date(record), "")


def sort_residents(records: List[ResidentRecord], option: str = "default") -> List[ResidentRecord]:
    """
    Order residents for display.

    The default order lists pending profiles first (oldest change first),
    then other in-progress profiles by last change, then approved profiles
    by last name.
    """
    if option not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {option}")

    if option == "name-asc":
        return sorted(records, key=lambda r: display_name(r).casefold())
    if option == "name-desc":
        return sorted(records, key=lambda r: display_name(r).casefold(), reverse=True)
    if option == "status-asc":
        return sorted(records, key=lambda r: int(r.status))
    if option == "status-desc":
        return sorted(records, key=lambda r: int(r.status), reverse=True)
    if option == "date-asc":
        return sorted(records, key=_status_date)
    if option == "date-desc":
        return sorted(records, key=_status_date, reverse=True)

    return sorted(records, key=_default_order_key)


def count_by_status(records: List[ResidentRecord]) -> Dict[ProfileStatusCode, int]:
    """Dashboard counts for every status; records without a status row count as pending."""
    counts = {status: 0 for status in ProfileStatusCode}
    for record in records:
        counts[record.status] += 1
    return counts
