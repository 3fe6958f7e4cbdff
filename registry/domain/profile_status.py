# SPDX-License-Identifier: Apache-2.0

"""
Resident profile status workflow.

Pure functions for profile status transitions: each transition is computed
from the current status, the requested action and an optional reason, with
no persistence or notification side effects. Callers apply the result.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from models.enums import NotificationKind, ProfileAction, ProfileStatusCode

STATUS_LABELS: Dict[ProfileStatusCode, str] = {
    ProfileStatusCode.APPROVED: "Approved",
    ProfileStatusCode.REJECTED: "Rejected",
    ProfileStatusCode.PENDING: "Pending",
    ProfileStatusCode.UPDATE_REQUESTED: "Update Requested",
    ProfileStatusCode.UPDATE_APPROVED: "Update Approved",
    ProfileStatusCode.UPDATE_PROFILING: "Update Profiling",
}


@dataclass
class ValidationResult:
    """Result of transition validation."""
    is_valid: bool
    errors: List[str]
    warnings: List[str] = None

    def __post_init__(self):
        if self.warnings is None:
            self.warnings = []


@dataclass(frozen=True)
class TransitionRule:
    """One row of the status transition table."""
    sources: FrozenSet[ProfileStatusCode]
    target: ProfileStatusCode
    requires_reason: bool = False
    writes_reason: bool = False
    notification: Optional[NotificationKind] = None


@dataclass
class TransitionResult:
    """Result of a pure status transition."""
    success: bool
    action: ProfileAction
    previous_status: Optional[ProfileStatusCode] = None
    new_status: Optional[ProfileStatusCode] = None
    reason: Optional[str] = None
    writes_reason: bool = False
    notification: Optional[NotificationKind] = None
    error_message: Optional[str] = None
    validation_errors: List[str] = None

    def __post_init__(self):
        if self.validation_errors is None:
            self.validation_errors = []


# Admin and resident actions. writes_reason=False with no reason keeps the
# stored reason untouched; ACCEPT_UPDATE_REQUEST writes an empty reason.
TRANSITIONS: Dict[ProfileAction, TransitionRule] = {
    ProfileAction.ACCEPT: TransitionRule(
        sources=frozenset({ProfileStatusCode.PENDING}),
        target=ProfileStatusCode.APPROVED,
        notification=NotificationKind.APPROVAL
    ),
    ProfileAction.REJECT: TransitionRule(
        sources=frozenset({ProfileStatusCode.PENDING}),
        target=ProfileStatusCode.REJECTED,
        requires_reason=True,
        writes_reason=True,
        notification=NotificationKind.REJECTION
    ),
    ProfileAction.REQUEST_UPDATE: TransitionRule(
        sources=frozenset({ProfileStatusCode.APPROVED}),
        target=ProfileStatusCode.UPDATE_REQUESTED,
        requires_reason=True,
        writes_reason=True,
        notification=NotificationKind.UPDATE_REQUEST
    ),
    ProfileAction.ACCEPT_UPDATE_REQUEST: TransitionRule(
        sources=frozenset({ProfileStatusCode.UPDATE_REQUESTED}),
        target=ProfileStatusCode.UPDATE_APPROVED,
        writes_reason=True,
        notification=NotificationKind.UPDATE_APPROVAL
    ),
    ProfileAction.DECLINE_UPDATE_REQUEST: TransitionRule(
        sources=frozenset({ProfileStatusCode.UPDATE_REQUESTED}),
        target=ProfileStatusCode.APPROVED,
        requires_reason=True,
        writes_reason=True,
        notification=NotificationKind.UPDATE_REJECTION
    ),
    ProfileAction.SEND_TO_REPROFILING: TransitionRule(
        sources=frozenset({ProfileStatusCode.APPROVED}),
        target=ProfileStatusCode.UPDATE_PROFILING,
        requires_reason=True,
        writes_reason=True,
        notification=NotificationKind.UPDATE_PROFILING
    ),
}

# Resident (re)submission of the profiling form
SUBMIT_RULES: Dict[Optional[ProfileStatusCode], TransitionRule] = {
    ProfileStatusCode.UPDATE_REQUESTED: TransitionRule(
        sources=frozenset({ProfileStatusCode.UPDATE_REQUESTED}),
        target=ProfileStatusCode.UPDATE_APPROVED,
        writes_reason=True
    ),
}
SUBMIT_TO_PENDING = TransitionRule(
    sources=frozenset({
        ProfileStatusCode.PENDING,
        ProfileStatusCode.REJECTED,
        ProfileStatusCode.UPDATE_APPROVED,
        ProfileStatusCode.UPDATE_PROFILING,
    }),
    target=ProfileStatusCode.PENDING,
    writes_reason=True,
    notification=NotificationKind.PENDING
)


def status_label(status) -> str:
    """Human-readable label for a status code; unknown codes are "Unknown"."""
    try:
        return STATUS_LABELS[ProfileStatusCode(status)]
    except (ValueError, TypeError, KeyError):
        return "Unknown"


def effective_status(current: Optional[ProfileStatusCode]) -> ProfileStatusCode:
    """Status of a record, treating a missing status row as pending."""
    if current is None:
        return ProfileStatusCode.PENDING
    return ProfileStatusCode(current)


def _rule_for(current: Optional[ProfileStatusCode], action: ProfileAction) -> Optional[TransitionRule]:
    action = ProfileAction(action)
    if action == ProfileAction.SUBMIT:
        if current is None:
            return SUBMIT_TO_PENDING
        current = ProfileStatusCode(current)
        if current in SUBMIT_RULES:
            return SUBMIT_RULES[current]
        if current in SUBMIT_TO_PENDING.sources:
            return SUBMIT_TO_PENDING
        return None

    rule = TRANSITIONS[action]
    if effective_status(current) not in rule.sources:
        return None
    return rule


def can_perform(current: Optional[ProfileStatusCode], action: ProfileAction) -> bool:
    """Check if an action is allowed from a status, ignoring reason requirements."""
    return _rule_for(current, action) is not None


def available_actions(current: Optional[ProfileStatusCode]) -> List[ProfileAction]:
    """Actions allowed from a status, in declaration order."""
    return [action for action in ProfileAction if can_perform(current, action)]


def requires_reason(action: ProfileAction) -> bool:
    """Check if an action needs a non-empty reason."""
    action = ProfileAction(action)
    if action == ProfileAction.SUBMIT:
        return False
    return TRANSITIONS[action].requires_reason


def validate_transition(
    current: Optional[ProfileStatusCode],
    action: ProfileAction,
    reason: Optional[str] = None
) -> ValidationResult:
    """
    Validate a status transition request.

    Args:
        current: Current status code (None when no status row exists)
        action: Requested action
        reason: Reason text supplied by the actor

    Returns:
        ValidationResult with validation status and errors
    """
    errors = []

    rule = _rule_for(current, action)
    if rule is None:
        errors.append(
            f"Cannot {ProfileAction(action).value.replace('_', ' ')} a profile "
            f"with status {status_label(effective_status(current))}"
        )

    errors.extend(validate_reason(action, reason).errors)

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors
    )


def validate_reason(action: ProfileAction, reason: Optional[str] = None) -> ValidationResult:
    """Check the reason requirement alone; it depends only on the action."""
    errors = []
    if requires_reason(action) and (not reason or not reason.strip()):
        errors.append("A reason is required for this action")
    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def apply_transition(
    current: Optional[ProfileStatusCode],
    action: ProfileAction,
    reason: Optional[str] = None
) -> TransitionResult:
    """
    Compute a status transition.

    Args:
        current: Current status code (None when no status row exists)
        action: Requested action
        reason: Reason text supplied by the actor

    Returns:
        TransitionResult describing the new status, the reason to persist
        and the notification to send, or the validation errors
    """
    action = ProfileAction(action)
    validation = validate_transition(current, action, reason)
    if not validation.is_valid:
        return TransitionResult(
            success=False,
            action=action,
            previous_status=current,
            error_message="Transition validation failed",
            validation_errors=validation.errors
        )

    rule = _rule_for(current, action)
    persisted_reason = reason.strip() if (rule.requires_reason and reason) else None

    return TransitionResult(
        success=True,
        action=action,
        previous_status=current,
        new_status=rule.target,
        reason=persisted_reason,
        writes_reason=rule.writes_reason,
        notification=rule.notification
    )


def validate_deletion(confirmed: bool) -> ValidationResult:
    """Deletion is allowed from any status once the actor confirms it."""
    errors = []
    if not confirmed:
        errors.append("Deletion must be confirmed")
    return ValidationResult(is_valid=len(errors) == 0, errors=errors)
