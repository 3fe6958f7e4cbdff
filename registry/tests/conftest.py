# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import json
import os
import pytest
from datetime import date, datetime
from typing import Dict, Any
from unittest.mock import MagicMock
from bson import ObjectId

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['MONGODB_DATABASE'] = 'barangay_registry_test'
os.environ['OTEL_ENABLED'] = 'false'


@pytest.fixture
def reference_date():
    """Fixed reference date for age derivation."""
    return date(2024, 7, 1)


@pytest.fixture
def sample_household():
    """Household head blob as submitted by the profiling form."""
    return {
        "firstName": "Juan",
        "middleName": "Santos",
        "lastName": "Dela Cruz",
        "gender": "Male",
        "dob": "1960-03-10",
        "age": None,
        "zone": "Purok 3"
    }


@pytest.fixture
def sample_spouse():
    """Spouse blob."""
    return {
        "firstName": "Maria",
        "middleName": "Reyes",
        "lastName": "Dela Cruz",
        "gender": "Female",
        "dob": "1965-11-20"
    }


@pytest.fixture
def sample_members():
    """Household composition with one member living elsewhere."""
    return [
        {
            "firstName": "Pedro",
            "lastName": "Dela Cruz",
            "gender": "Male",
            "age": "17 years old",
            "isLivingWithParents": "Yes"
        },
        {
            "firstName": "Ana",
            "lastName": "Dela Cruz",
            "gender": "Female",
            "dob": "1990-01-01",
            "isLivingWithParents": "No"
        },
        {
            "firstName": "Luis",
            "lastName": "Dela Cruz",
            "gender": "Male",
            "age": 12
        }
    ]


@pytest.fixture
def sample_census():
    """Census answers."""
    return {
        "isRenting": "No",
        "ownsHouse": "Yes",
        "hasOwnComfortRoom": "Yes",
        "hasOwnElectricity": "Yes",
        "hasOwnWaterSupply": "Maybe",
        "isRegisteredVoter": "Yes"
    }


@pytest.fixture
def sample_raw_record(sample_household, sample_spouse, sample_members, sample_census) -> Dict[str, Any]:
    """Raw resident document with JSON-string blobs and an approved status row."""
    record_id = str(ObjectId())
    return {
        "id": record_id,
        "user_id": "user-001",
        "household": json.dumps(sample_household),
        "spouse": json.dumps(sample_spouse),
        "household_composition": json.dumps(sample_members),
        "census": json.dumps(sample_census),
        "children_count": 3,
        "number_of_household_members": 0,
        "resident_profile_status": [
            {
                "id": str(ObjectId()),
                "resident_id": record_id,
                "status": 1,
                "rejection_reason": None,
                "created_at": datetime(2024, 1, 10, 8, 0, 0),
                "updated_at": datetime(2024, 1, 12, 9, 30, 0)
            }
        ]
    }


@pytest.fixture
def make_raw_record():
    """Factory for raw resident documents."""
    def _make(
        household: Dict[str, Any] = None,
        spouse: Any = None,
        members: Any = None,
        census: Dict[str, Any] = None,
        status: Any = 1,
        user_id: str = "user-001",
        reason: str = None,
        updated_at: datetime = None
    ) -> Dict[str, Any]:
        record_id = str(ObjectId())
        record = {
            "id": record_id,
            "user_id": user_id,
            "household": household if household is not None else {},
            "spouse": spouse,
            "household_composition": members if members is not None else [],
            "census": census if census is not None else {},
            "children_count": 0,
            "number_of_household_members": 0,
            "resident_profile_status": []
        }
        if status is not None:
            record["resident_profile_status"] = [{
                "id": str(ObjectId()),
                "resident_id": record_id,
                "status": status,
                "rejection_reason": reason,
                "created_at": datetime(2024, 1, 1),
                "updated_at": updated_at or datetime(2024, 1, 1)
            }]
        return record
    return _make


@pytest.fixture
def mock_repository():
    """MongoDB service stand-in."""
    repository = MagicMock()
    repository.update_status.return_value = datetime(2024, 7, 1, 12, 0, 0)
    repository.delete_status.return_value = True
    repository.delete_resident.return_value = True
    return repository


@pytest.fixture
def mock_notifier():
    """Notification client stand-in."""
    return MagicMock()
