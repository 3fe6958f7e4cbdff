# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for household expansion into persons.
"""

from models.entities import PersonData
from models.enums import PersonRole
from domain.expansion import expand_persons, is_living_with_parents
from domain.normalization import normalize_record


class TestIsLivingWithParents:
    """Test household member inclusion."""

    def test_yes_and_absent_count(self):
        """Test "Yes" and missing answers count."""
        assert is_living_with_parents(PersonData(isLivingWithParents="Yes"))
        assert is_living_with_parents(PersonData())
        assert is_living_with_parents(PersonData(isLivingWithParents=""))

    def test_other_answers_excluded(self):
        """Test "No" and other answers are excluded."""
        assert not is_living_with_parents(PersonData(isLivingWithParents="No"))
        assert not is_living_with_parents(PersonData(isLivingWithParents="yes"))


class TestExpandPersons:
    """Test record expansion."""

    def test_full_household(self, sample_raw_record, reference_date):
        """Test head, spouse and members living with parents are expanded."""
        persons = expand_persons(normalize_record(sample_raw_record), reference_date)

        assert [p.role for p in persons] == [
            PersonRole.HEAD, PersonRole.SPOUSE, PersonRole.MEMBER, PersonRole.MEMBER
        ]
        assert [p.name for p in persons] == [
            "Dela Cruz, Juan Santos",
            "Dela Cruz, Maria Reyes",
            "Dela Cruz, Pedro",
            "Dela Cruz, Luis",
        ]
        assert [p.age for p in persons] == [64, 58, 17, 12]

    def test_everyone_shares_head_zone(self, make_raw_record, reference_date):
        """Test spouse and members take the head's zone."""
        raw = make_raw_record(
            household={"lastName": "Reyes", "zone": "Purok 4"},
            spouse={"lastName": "Reyes", "zone": "Purok 9"},
            members=[{"lastName": "Reyes", "zone": "Purok 1"}]
        )

        persons = expand_persons(normalize_record(raw), reference_date)

        assert {p.zone for p in persons} == {4}

    def test_empty_spouse_skipped(self, make_raw_record, reference_date):
        """Test an empty spouse object is not counted."""
        raw = make_raw_record(household={"lastName": "Reyes"}, spouse={})

        persons = expand_persons(normalize_record(raw), reference_date)

        assert len(persons) == 1

    def test_head_always_included(self, make_raw_record, reference_date):
        """Test an empty household still yields the head."""
        persons = expand_persons(normalize_record(make_raw_record()), reference_date)

        assert len(persons) == 1
        assert persons[0].name == "Unnamed Resident"
        assert persons[0].age == 0
        assert persons[0].zone is None

    def test_custom_gender_used(self, make_raw_record, reference_date):
        """Test self-described gender is carried to the person."""
        raw = make_raw_record(household={"lastName": "Cruz", "gender": "Other", "customGender": "Non-binary"})

        persons = expand_persons(normalize_record(raw), reference_date)

        assert persons[0].gender == "Non-binary"
