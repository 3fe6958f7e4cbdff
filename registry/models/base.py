# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new MongoDB ObjectId as string."""
    return str(ObjectId())


class BaseEntity(BaseModel):
    """Base entity with common fields for persisted registry documents."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Validate assignment
        validate_assignment=True,
        # Arbitrary types allowed
        arbitrary_types_allowed=True
    )

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    def update_timestamp(self) -> datetime:
        """Stamp the entity as updated now and return the timestamp."""
        now = datetime.now(timezone.utc)
        self.updated_at = now
        if self.created_at is None:
            self.created_at = now
        return now


class BlobModel(BaseModel):
    """Base model for loosely-shaped JSON blobs stored on a resident record."""

    model_config = ConfigDict(
        populate_by_name=True,
        # Unknown keys are preserved on model_extra
        extra="allow"
    )

    def is_empty(self) -> bool:
        """True when the source blob carried no keys at all."""
        return not self.model_fields_set and not self.model_extra
