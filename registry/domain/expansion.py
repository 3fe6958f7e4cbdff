# SPDX-License-Identifier: Apache-2.0

"""
Expansion of household records into counted persons.
"""

from datetime import date
from typing import List, Optional

from models.demographics import Person
from models.entities import PersonData, ResidentRecord
from models.enums import PersonRole
from domain.normalization import calculate_age, format_name, parse_zone


def is_living_with_parents(member: PersonData) -> bool:
    """
    Check if a household member counts toward the population.

    Members are counted unless they were explicitly marked as not living
    with their parents: "Yes" and an absent/empty answer both count.
    """
    answer = member.is_living_with_parents
    return answer == "Yes" or not answer


def to_person(
    data: PersonData,
    role: PersonRole,
    zone: Optional[int],
    today: Optional[date] = None
) -> Person:
    """Build a Person from a normalized blob."""
    return Person(
        name=format_name(data.last_name, data.first_name, data.middle_name, role),
        age=calculate_age(data.dob, data.age, today),
        gender=data.effective_gender,
        zone=zone,
        role=role
    )


def expand_persons(record: ResidentRecord, today: Optional[date] = None) -> List[Person]:
    """
    Flatten a resident record into the persons it contributes.

    The head is always included, the spouse when a non-empty spouse blob was
    submitted, and each household member passing is_living_with_parents.
    Everyone shares the head's zone.

    Args:
        record: Normalized resident record
        today: Reference date for age derivation

    Returns:
        Persons in head, spouse, members order
    """
    zone = parse_zone(record.household.zone)

    persons = [to_person(record.household, PersonRole.HEAD, zone, today)]

    if record.has_spouse():
        persons.append(to_person(record.spouse, PersonRole.SPOUSE, zone, today))

    for member in record.household_composition:
        if is_living_with_parents(member):
            persons.append(to_person(member, PersonRole.MEMBER, zone, today))

    return persons
