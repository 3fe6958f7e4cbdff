# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Derived demographic structures produced by the aggregation pipeline.

None of these are persisted; they are rebuilt from approved resident
records on every recompute.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .enums import CensusField, PersonRole

ZONE_NUMBERS = tuple(range(1, 10))

AGE_GROUP_BELOW_18 = "Below 18"
AGE_GROUP_18_AND_ABOVE = "18 and Above"


@dataclass(frozen=True)
class Person:
    """One counted resident expanded from a household record."""
    name: str
    age: Union[int, float]
    gender: Optional[str]
    zone: Optional[int]
    role: PersonRole = PersonRole.HEAD

    def has_known_zone(self) -> bool:
        """Check if the person belongs to one of the nine zone buckets."""
        return self.zone in ZONE_NUMBERS


@dataclass
class ZoneBucket:
    """Per-zone counters and name rosters."""
    zone: int
    population: int = 0
    male: int = 0
    female: int = 0
    seniors: int = 0
    resident_names: List[str] = field(default_factory=list)
    male_names: List[str] = field(default_factory=list)
    female_names: List[str] = field(default_factory=list)
    senior_names: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone": self.zone,
            "population": self.population,
            "male": self.male,
            "female": self.female,
            "seniors": self.seniors,
            "resident_names": list(self.resident_names),
            "male_names": list(self.male_names),
            "female_names": list(self.female_names),
            "senior_names": list(self.senior_names),
        }


def empty_census_tally() -> Dict[str, Dict[str, int]]:
    """Yes/No counters for every census question, all zero."""
    return {census_field.value: {"Yes": 0, "No": 0} for census_field in CensusField}


def empty_zone_buckets() -> Dict[int, ZoneBucket]:
    """One empty bucket for each of zones 1-9."""
    return {zone: ZoneBucket(zone=zone) for zone in ZONE_NUMBERS}


@dataclass
class DemographicSummary:
    """Population statistics over approved resident records."""
    total_residents: int = 0
    total_households: int = 0
    male_count: int = 0
    female_count: int = 0
    other_count: int = 0
    senior_citizens: int = 0
    age_groups: Dict[str, int] = field(
        default_factory=lambda: {AGE_GROUP_BELOW_18: 0, AGE_GROUP_18_AND_ABOVE: 0}
    )
    zones: Dict[int, ZoneBucket] = field(default_factory=empty_zone_buckets)
    census: Dict[str, Dict[str, int]] = field(default_factory=empty_census_tally)

    def zone_population_total(self) -> int:
        return sum(bucket.population for bucket in self.zones.values())

    def age_chart(self) -> List[Dict[str, Any]]:
        """Age distribution as chart rows."""
        return [
            {"ageGroup": group, "count": count}
            for group, count in self.age_groups.items()
        ]

    def gender_chart(self) -> List[Dict[str, Any]]:
        """Gender distribution as a single chart row."""
        return [{
            "category": "Residents",
            "male": self.male_count,
            "female": self.female_count,
            "other": self.other_count,
        }]

    def to_dict(self) -> Dict[str, Any]:
        """Plain, deterministically ordered representation."""
        return {
            "total_residents": self.total_residents,
            "total_households": self.total_households,
            "male_count": self.male_count,
            "female_count": self.female_count,
            "other_count": self.other_count,
            "senior_citizens": self.senior_citizens,
            "age_groups": dict(self.age_groups),
            "zones": {
                str(zone): self.zones[zone].to_dict()
                for zone in sorted(self.zones)
            },
            "census": {
                name: {"Yes": counts["Yes"], "No": counts["No"]}
                for name, counts in self.census.items()
            },
        }


@dataclass
class RosterPage:
    """One page of a (filtered) zone name roster."""
    items: List[str]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
