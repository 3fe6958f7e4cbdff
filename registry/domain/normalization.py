# SPDX-License-Identifier: Apache-2.0

"""
Resident record normalization.

Raw resident documents carry their household, spouse, household composition
and census data either as JSON strings or as already-parsed structures.
This module is the single boundary where that ambiguity is resolved: every
field is parsed independently, failures are logged and replaced with a safe
default, and the result is a typed ResidentRecord. Nothing here raises on
malformed field content.
"""

import copy
import json
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from models.entities import CensusAnswers, PersonData, ProfileStatus, ResidentRecord
from models.enums import PersonRole, ProfileStatusCode

logger = logging.getLogger(__name__)

YEARS_OLD_SUFFIX = " years old"

UNNAMED_PLACEHOLDERS = {
    PersonRole.HEAD: "Unnamed Resident",
    PersonRole.SPOUSE: "Unnamed Spouse",
    PersonRole.MEMBER: "Unnamed Member",
}

_LEADING_INTEGER = re.compile(r'^\s*([+-]?\d+)')
_NON_DIGITS = re.compile(r'[^0-9]')
_WHITESPACE = re.compile(r'\s+')

# Bound on nested JSON string decoding
_MAX_DECODE_DEPTH = 3


def parse_json_field(
    value: Any,
    default: Any,
    field_name: str,
    record_id: Optional[str] = None,
    expected_type: Optional[type] = None
) -> Any:
    """
    Parse one JSON-or-structure field, falling back to a default.

    Args:
        value: Raw field value (JSON string, dict, list or None)
        default: Value returned when the field is absent or unusable
        field_name: Field name used in log context
        record_id: Record ID used in log context
        expected_type: dict or list; a parsed value of another shape is
            replaced by the default

    Returns:
        Parsed value or a copy of the default
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return copy.deepcopy(default)

    parsed = value
    depth = 0
    while isinstance(parsed, str) and depth < _MAX_DECODE_DEPTH:
        try:
            parsed = json.loads(parsed)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(
                f"Failed to parse {field_name} for resident {record_id}, using default",
                extra={
                    "extra_fields": {
                        "field": field_name,
                        "record_id": record_id,
                        "error": str(e)
                    }
                }
            )
            return copy.deepcopy(default)
        depth += 1

    if parsed is None:
        return copy.deepcopy(default)

    if expected_type is not None and not isinstance(parsed, expected_type):
        logger.warning(
            f"Unexpected shape for {field_name} on resident {record_id}, using default",
            extra={
                "extra_fields": {
                    "field": field_name,
                    "record_id": record_id,
                    "expected": expected_type.__name__,
                    "actual": type(parsed).__name__
                }
            }
        )
        return copy.deepcopy(default)

    return parsed


def _parse_age_text(text: str) -> Optional[int]:
    """Parse "45 years old" / "45" style ages; None when no leading integer."""
    if text.endswith(YEARS_OLD_SUFFIX):
        text = text[:-len(YEARS_OLD_SUFFIX)]
    match = _LEADING_INTEGER.match(text)
    if not match:
        return None
    return int(match.group(1))


def _parse_dob(dob: Any) -> Optional[date]:
    if isinstance(dob, datetime):
        return dob.date()
    if isinstance(dob, date):
        return dob
    if not isinstance(dob, str) or not dob.strip():
        return None
    try:
        return date.fromisoformat(dob.strip()[:10])
    except ValueError:
        logger.debug(f"Unparsable date of birth: {dob!r}")
        return None


def calculate_age(dob: Any, provided_age: Any, today: Optional[date] = None) -> Union[int, float]:
    """
    Derive a person's age.

    A finite numeric provided age wins verbatim, fractions included; a
    textual one ("45 years old") is parsed for its leading integer.
    Otherwise the age is computed from the date of birth against ``today``.
    Falls back to 0.
    """
    if isinstance(provided_age, (int, float)) and not isinstance(provided_age, bool):
        if isinstance(provided_age, int) or math.isfinite(provided_age):
            return provided_age
    elif isinstance(provided_age, str):
        parsed = _parse_age_text(provided_age)
        if parsed is not None:
            return parsed

    birth_date = _parse_dob(dob)
    if birth_date is None:
        return 0

    reference = today or date.today()
    age = reference.year - birth_date.year
    if (reference.month, reference.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def format_name(
    last_name: Optional[str],
    first_name: Optional[str],
    middle_name: Optional[str],
    role: PersonRole = PersonRole.HEAD
) -> str:
    """Format "Last, First Middle", or the role placeholder when the last name is missing."""
    last = (last_name or "").strip()
    if not last:
        return UNNAMED_PLACEHOLDERS[PersonRole(role)]

    first = (first_name or "").strip()
    middle = (middle_name or "").strip()
    return _WHITESPACE.sub(" ", f"{last}, {first} {middle}".strip())


def parse_zone(raw_zone: Any) -> Optional[int]:
    """Extract the zone number from free text such as "Purok 3"."""
    if raw_zone is None:
        return None
    digits = _NON_DIGITS.sub("", str(raw_zone))
    if not digits:
        return None
    return int(digits)


def _build_person(blob: Dict[str, Any], field_name: str, record_id: Optional[str]) -> PersonData:
    try:
        return PersonData.model_validate(blob)
    except ValidationError as e:
        logger.warning(
            f"Invalid {field_name} data for resident {record_id}, using empty person",
            extra={"extra_fields": {"field": field_name, "record_id": record_id, "error": str(e)}}
        )
        return PersonData()


def _build_census(blob: Dict[str, Any], record_id: Optional[str]) -> CensusAnswers:
    try:
        return CensusAnswers.model_validate(blob)
    except ValidationError as e:
        logger.warning(
            f"Invalid census data for resident {record_id}, using empty census",
            extra={"extra_fields": {"field": "census", "record_id": record_id, "error": str(e)}}
        )
        return CensusAnswers()


def _coerce_count(value: Any, field_name: str, record_id: Optional[str]) -> int:
    if isinstance(value, bool):
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError, OverflowError) as e:
        if value is not None:
            logger.warning(
                f"Invalid {field_name} for resident {record_id}, using 0",
                extra={"extra_fields": {"field": field_name, "record_id": record_id, "error": str(e)}}
            )
        return 0
    return count if count >= 0 else 0


def normalize_status(value: Any, record_id: str) -> Optional[ProfileStatus]:
    """
    Normalize a joined status row.

    Accepts a single row or a one-element list (joined query results).
    Returns None when there is no usable row, in which case the record
    counts as pending.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if not isinstance(value, dict):
        return None

    try:
        code = ProfileStatusCode(int(value.get("status")))
    except (TypeError, ValueError, OverflowError):
        logger.warning(
            f"Unknown profile status for resident {record_id}, treating as pending",
            extra={"extra_fields": {"record_id": record_id, "status": value.get("status")}}
        )
        return None

    resident_id = value.get("resident_id") or record_id or ""
    row: Dict[str, Any] = {
        "resident_id": resident_id,
        "status": code,
        "reason": value.get("rejection_reason", value.get("reason")),
        "created_at": value.get("created_at"),
        "updated_at": value.get("updated_at"),
    }
    row_id = value.get("id") or value.get("_id")
    if row_id is not None:
        row["id"] = str(row_id)

    try:
        return ProfileStatus(**row)
    except ValidationError as e:
        logger.warning(
            f"Invalid status row for resident {record_id}, keeping status only",
            extra={"extra_fields": {"record_id": record_id, "error": str(e)}}
        )
        return ProfileStatus(resident_id=resident_id, status=code)


def normalize_record(raw: Dict[str, Any]) -> ResidentRecord:
    """
    Convert one raw resident document into a ResidentRecord.

    Args:
        raw: Resident document as returned by the persistence layer

    Returns:
        ResidentRecord with typed sub-entities; malformed fields are replaced
        by empty defaults
    """
    record_id = raw.get("id") or raw.get("_id")
    record_id = str(record_id) if record_id is not None else None

    household = parse_json_field(raw.get("household"), {}, "household", record_id, dict)
    spouse = parse_json_field(raw.get("spouse"), None, "spouse", record_id, dict)
    composition = parse_json_field(
        raw.get("household_composition"), [], "household_composition", record_id, list
    )
    census = parse_json_field(raw.get("census"), {}, "census", record_id, dict)

    members: List[PersonData] = []
    for index, member in enumerate(composition):
        if not isinstance(member, dict):
            logger.warning(
                f"Skipping malformed household member {index} for resident {record_id}",
                extra={"extra_fields": {"record_id": record_id, "index": index}}
            )
            continue
        members.append(_build_person(member, "household_composition", record_id))

    fields: Dict[str, Any] = {
        "household": _build_person(household, "household", record_id),
        "spouse": _build_person(spouse, "spouse", record_id) if spouse is not None else None,
        "household_composition": members,
        "census": _build_census(census, record_id),
        "children_count": _coerce_count(raw.get("children_count"), "children_count", record_id),
        "other_members_count": _coerce_count(
            raw.get("number_of_household_members", raw.get("other_members_count")),
            "number_of_household_members",
            record_id
        ),
    }
    if record_id is not None:
        fields["id"] = record_id
    user_id = raw.get("user_id", raw.get("userId"))
    if user_id is not None:
        fields["user_id"] = str(user_id)

    status_row = raw.get("resident_profile_status", raw.get("profile_status"))
    if status_row is not None:
        fields["profile_status"] = normalize_status(status_row, record_id)

    return ResidentRecord(**fields)


def normalize_records(raw_records: List[Dict[str, Any]]) -> List[ResidentRecord]:
    """Normalize a batch of raw resident documents."""
    return [normalize_record(raw) for raw in raw_records]
