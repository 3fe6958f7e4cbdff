# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the barangay resident registry.
"""

# Base models
from .base import BaseEntity, BlobModel

# Enumerations
from .enums import (
    ProfileStatusCode,
    ProfileAction,
    NotificationKind,
    PersonRole,
    CensusField
)

# Core entities
from .entities import (
    PersonData,
    CensusAnswers,
    ProfileStatus,
    ResidentRecord
)

# Derived demographics
from .demographics import (
    Person,
    ZoneBucket,
    DemographicSummary,
    RosterPage,
    ZONE_NUMBERS
)

__all__ = [
    # Base models
    "BaseEntity",
    "BlobModel",

    # Enumerations
    "ProfileStatusCode",
    "ProfileAction",
    "NotificationKind",
    "PersonRole",
    "CensusField",

    # Core entities
    "PersonData",
    "CensusAnswers",
    "ProfileStatus",
    "ResidentRecord",

    # Derived demographics
    "Person",
    "ZoneBucket",
    "DemographicSummary",
    "RosterPage",
    "ZONE_NUMBERS"
]
