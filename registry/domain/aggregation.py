# SPDX-License-Identifier: Apache-2.0

"""
Demographic aggregation over approved resident records.

Pure functions: given normalized records, produce population totals,
gender and age tallies, per-zone buckets with sorted name rosters, and
household census tallies. Running the aggregation twice over the same input
yields identical output, roster ordering included.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from models.demographics import (
    AGE_GROUP_18_AND_ABOVE,
    AGE_GROUP_BELOW_18,
    DemographicSummary,
    Person,
    RosterPage,
)
from models.entities import CensusAnswers, ResidentRecord
from models.enums import CensusField
from domain.expansion import expand_persons
from domain.normalization import UNNAMED_PLACEHOLDERS

logger = logging.getLogger(__name__)

MALE = "Male"
FEMALE = "Female"
ADULT_AGE_THRESHOLD = 18
SENIOR_AGE = 60
ROSTER_PAGE_SIZE = 20

_PLACEHOLDER_NAMES = frozenset(UNNAMED_PLACEHOLDERS.values())


def roster_sort_key(name: str) -> Tuple[bool, str, str, str]:
    """
    Sort key for zone rosters.

    Named entries come first, ordered by last name (text before the first
    comma) case-insensitively, then by the full name; placeholders last.
    """
    last_name = name.split(",", 1)[0].strip()
    return (name in _PLACEHOLDER_NAMES, last_name.casefold(), name.casefold(), name)


def sort_roster(names: Iterable[str]) -> List[str]:
    """Return a new roster sorted with roster_sort_key."""
    return sorted(names, key=roster_sort_key)


def _count_person(summary: DemographicSummary, person: Person) -> None:
    summary.total_residents += 1

    if person.gender == MALE:
        summary.male_count += 1
    elif person.gender == FEMALE:
        summary.female_count += 1
    else:
        summary.other_count += 1

    if person.age <= ADULT_AGE_THRESHOLD:
        summary.age_groups[AGE_GROUP_BELOW_18] += 1
    else:
        summary.age_groups[AGE_GROUP_18_AND_ABOVE] += 1

    is_senior = person.age >= SENIOR_AGE
    if is_senior:
        summary.senior_citizens += 1

    if not person.has_known_zone():
        return

    bucket = summary.zones[person.zone]
    bucket.population += 1
    bucket.resident_names.append(person.name)
    # Zones only break out male and female
    if person.gender == MALE:
        bucket.male += 1
        bucket.male_names.append(person.name)
    elif person.gender == FEMALE:
        bucket.female += 1
        bucket.female_names.append(person.name)

    if is_senior:
        bucket.seniors += 1
        bucket.senior_names.append(person.name)


def _count_census(summary: DemographicSummary, census: CensusAnswers) -> None:
    for census_field in CensusField:
        answer = census.answer(census_field)
        if answer in ("Yes", "No"):
            summary.census[census_field.value][answer] += 1


def aggregate_persons(
    persons: Iterable[Person],
    records: Iterable[ResidentRecord]
) -> DemographicSummary:
    """
    Aggregate already-expanded persons plus their originating records.

    Args:
        persons: Persons expanded from approved records
        records: The approved records (household count and census)

    Returns:
        DemographicSummary with sorted rosters
    """
    summary = DemographicSummary()

    for person in persons:
        _count_person(summary, person)

    for record in records:
        summary.total_households += 1
        _count_census(summary, record.census)

    for bucket in summary.zones.values():
        bucket.resident_names = sort_roster(bucket.resident_names)
        bucket.male_names = sort_roster(bucket.male_names)
        bucket.female_names = sort_roster(bucket.female_names)
        bucket.senior_names = sort_roster(bucket.senior_names)

    return summary


def aggregate_demographics(
    records: Iterable[ResidentRecord],
    today: Optional[date] = None
) -> DemographicSummary:
    """
    Expand and aggregate approved resident records.

    Records that are not approved are skipped; statistics never include
    pending, rejected or in-revision profiles.

    Args:
        records: Normalized resident records
        today: Reference date for age derivation

    Returns:
        DemographicSummary
    """
    approved: List[ResidentRecord] = []
    for record in records:
        if not record.is_approved():
            logger.debug(f"Skipping resident {record.id} with status {record.status.name}")
            continue
        approved.append(record)

    persons: List[Person] = []
    for record in approved:
        persons.extend(expand_persons(record, today))

    summary = aggregate_persons(persons, approved)

    logger.debug(
        "Demographics aggregated",
        extra={
            "extra_fields": {
                "households": summary.total_households,
                "residents": summary.total_residents,
                "seniors": summary.senior_citizens
            }
        }
    )
    return summary


def search_roster(names: List[str], search_term: Optional[str]) -> List[str]:
    """Filter a roster by case-insensitive substring, keeping its order."""
    if not search_term:
        return list(names)
    needle = search_term.lower()
    return [name for name in names if needle in name.lower()]


def paginate_roster(
    names: List[str],
    page: int = 1,
    page_size: int = ROSTER_PAGE_SIZE,
    search_term: Optional[str] = None
) -> RosterPage:
    """
    Slice a roster into pages after optional search filtering.

    Args:
        names: Sorted roster
        page: 1-based page number (values below 1 are clamped to 1)
        page_size: Entries per page
        search_term: Optional case-insensitive filter

    Returns:
        RosterPage
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    filtered = search_roster(names, search_term)
    page = max(page, 1)
    start = (page - 1) * page_size
    return RosterPage(
        items=filtered[start:start + page_size],
        total=len(filtered),
        page=page,
        page_size=page_size
    )
