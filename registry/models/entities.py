# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the barangay resident registry.
"""

from datetime import datetime
from typing import Any, List, Optional
from pydantic import AliasChoices, Field, field_validator
from .base import BaseEntity, BlobModel
from .enums import CensusField, ProfileStatusCode


def _coerce_text(value: Any) -> Optional[str]:
    """Coerce a scalar blob value to text; falsy non-strings and containers become None."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)) or not value:
        return None
    return str(value)


class PersonData(BlobModel):
    """Typed view of a household head, spouse, or household member blob."""

    first_name: Optional[str] = Field(None, alias="firstName", description="Given name")
    middle_name: Optional[str] = Field(None, alias="middleName", description="Middle name")
    last_name: Optional[str] = Field(None, alias="lastName", description="Family name")
    gender: Optional[str] = Field(None, description="Gender as entered (case-sensitive)")
    custom_gender: Optional[str] = Field(None, alias="customGender", description="Self-described gender")
    dob: Optional[str] = Field(None, description="Date of birth (ISO date)")
    age: Optional[Any] = Field(None, description="Age as entered, number or text")
    zone: Optional[str] = Field(None, description="Purok/zone as entered")
    is_living_with_parents: Optional[str] = Field(
        None, alias="isLivingWithParents", description="Household member living arrangement"
    )

    @field_validator(
        'first_name', 'middle_name', 'last_name', 'gender', 'custom_gender',
        'dob', 'zone', 'is_living_with_parents',
        mode='before'
    )
    @classmethod
    def coerce_text(cls, v):
        """Accept numbers and booleans where text is expected."""
        return _coerce_text(v)

    @property
    def effective_gender(self) -> Optional[str]:
        """Self-described gender when given, otherwise the selected gender."""
        return self.custom_gender or self.gender


class CensusAnswers(BlobModel):
    """Household census survey answers ("Yes"/"No")."""

    is_renting: Optional[str] = Field(None, alias="isRenting")
    owns_house: Optional[str] = Field(None, alias="ownsHouse")
    has_own_comfort_room: Optional[str] = Field(None, alias="hasOwnComfortRoom")
    has_own_electricity: Optional[str] = Field(None, alias="hasOwnElectricity")
    has_own_water_supply: Optional[str] = Field(None, alias="hasOwnWaterSupply")
    is_registered_voter: Optional[str] = Field(None, alias="isRegisteredVoter")

    @field_validator(
        'is_renting', 'owns_house', 'has_own_comfort_room',
        'has_own_electricity', 'has_own_water_supply', 'is_registered_voter',
        mode='before'
    )
    @classmethod
    def coerce_text(cls, v):
        """Accept non-string answers; only the literal strings count later."""
        return _coerce_text(v)

    def answer(self, field: CensusField) -> Optional[str]:
        """Answer for a survey question, looked up by its wire name."""
        return self.model_dump(by_alias=True).get(CensusField(field).value)


class ProfileStatus(BaseEntity):
    """Approval status row, one per resident record."""

    resident_id: str = Field(..., description="Owning resident record ID")
    status: ProfileStatusCode = Field(default=ProfileStatusCode.PENDING, description="Lifecycle status code")
    reason: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("reason", "rejection_reason"),
        description="Rejection or update reason, meaning depends on status"
    )

    @field_validator('resident_id', mode='before')
    @classmethod
    def validate_resident_id(cls, v):
        """Store ObjectId references as strings."""
        return str(v) if v is not None else v

    @property
    def update_reason(self) -> Optional[str]:
        """Reason given with an update request."""
        return self.reason if self.status == ProfileStatusCode.UPDATE_REQUESTED else None

    @property
    def rejection_reason(self) -> Optional[str]:
        """Reason for any status other than a pending update request."""
        return self.reason if self.status != ProfileStatusCode.UPDATE_REQUESTED else None

    def set_status(self, status: ProfileStatusCode, reason: Optional[str]) -> datetime:
        """Move to a new status and stamp the change."""
        self.status = status
        self.reason = reason
        return self.update_timestamp()


class ResidentRecord(BaseEntity):
    """One submitted household profile with its typed sub-entities."""

    user_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("user_id", "userId"),
        description="Submitting user ID"
    )
    household: PersonData = Field(default_factory=PersonData, description="Household head")
    spouse: Optional[PersonData] = Field(None, description="Spouse, if any")
    household_composition: List[PersonData] = Field(default_factory=list, description="Household members")
    census: CensusAnswers = Field(default_factory=CensusAnswers, description="Census survey answers")
    children_count: int = Field(default=0, ge=0, description="Declared number of children")
    other_members_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("other_members_count", "number_of_household_members"),
        description="Declared number of other household members"
    )
    profile_status: Optional[ProfileStatus] = Field(None, description="Joined approval status")

    @property
    def status(self) -> ProfileStatusCode:
        """Current status; records without a status row are pending."""
        if self.profile_status is None:
            return ProfileStatusCode.PENDING
        return ProfileStatusCode(self.profile_status.status)

    def is_approved(self) -> bool:
        """Check if the record feeds population statistics."""
        return self.status == ProfileStatusCode.APPROVED

    def has_spouse(self) -> bool:
        """Check if a non-empty spouse blob was submitted."""
        return self.spouse is not None and not self.spouse.is_empty()
