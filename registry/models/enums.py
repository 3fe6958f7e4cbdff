# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the barangay resident registry.
"""

from enum import Enum


class ProfileStatusCode(int, Enum):
    """Resident profile approval status (persisted as integers 1-6)."""
    APPROVED = 1
    REJECTED = 2
    PENDING = 3
    UPDATE_REQUESTED = 4
    UPDATE_APPROVED = 5
    UPDATE_PROFILING = 6


class ProfileAction(str, Enum):
    """Actions that drive a profile status transition."""
    SUBMIT = "submit"
    ACCEPT = "accept"
    REJECT = "reject"
    REQUEST_UPDATE = "request_update"
    ACCEPT_UPDATE_REQUEST = "accept_update_request"
    DECLINE_UPDATE_REQUEST = "decline_update_request"
    SEND_TO_REPROFILING = "send_to_reprofiling"


class NotificationKind(str, Enum):
    """Notification endpoints, one per transition side effect."""
    PENDING = "send-pending"
    APPROVAL = "send-approval"
    REJECTION = "send-rejection"
    UPDATE_REQUEST = "send-update-request"
    UPDATE_APPROVAL = "send-update-approval"
    UPDATE_REJECTION = "send-update-rejection"
    UPDATE_PROFILING = "send-update-profiling"


class PersonRole(str, Enum):
    """Role of an expanded person within a household record."""
    HEAD = "head"
    SPOUSE = "spouse"
    MEMBER = "member"


class CensusField(str, Enum):
    """Household census survey questions."""
    IS_RENTING = "isRenting"
    OWNS_HOUSE = "ownsHouse"
    HAS_OWN_COMFORT_ROOM = "hasOwnComfortRoom"
    HAS_OWN_ELECTRICITY = "hasOwnElectricity"
    HAS_OWN_WATER_SUPPLY = "hasOwnWaterSupply"
    IS_REGISTERED_VOTER = "isRegisteredVoter"
