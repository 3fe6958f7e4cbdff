# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the profile status workflow.
"""

import pytest

from models.enums import NotificationKind, ProfileAction, ProfileStatusCode
from domain.profile_status import (
    apply_transition,
    available_actions,
    can_perform,
    requires_reason,
    status_label,
    validate_deletion,
    validate_reason,
    validate_transition,
)


class TestTransitionTable:
    """Test every allowed transition."""

    @pytest.mark.parametrize("current, action, reason, target, notification", [
        (ProfileStatusCode.PENDING, ProfileAction.ACCEPT, None,
         ProfileStatusCode.APPROVED, NotificationKind.APPROVAL),
        (ProfileStatusCode.PENDING, ProfileAction.REJECT, "Incomplete",
         ProfileStatusCode.REJECTED, NotificationKind.REJECTION),
        (ProfileStatusCode.APPROVED, ProfileAction.REQUEST_UPDATE, "Change zone",
         ProfileStatusCode.UPDATE_REQUESTED, NotificationKind.UPDATE_REQUEST),
        (ProfileStatusCode.UPDATE_REQUESTED, ProfileAction.ACCEPT_UPDATE_REQUEST, None,
         ProfileStatusCode.UPDATE_APPROVED, NotificationKind.UPDATE_APPROVAL),
        (ProfileStatusCode.UPDATE_REQUESTED, ProfileAction.DECLINE_UPDATE_REQUEST, "Not needed",
         ProfileStatusCode.APPROVED, NotificationKind.UPDATE_REJECTION),
        (ProfileStatusCode.APPROVED, ProfileAction.SEND_TO_REPROFILING, "Annual review",
         ProfileStatusCode.UPDATE_PROFILING, NotificationKind.UPDATE_PROFILING),
    ])
    def test_admin_transitions(self, current, action, reason, target, notification):
        """Test administrator transitions land on the expected status."""
        result = apply_transition(current, action, reason)

        assert result.success
        assert result.previous_status == current
        assert result.new_status == target
        assert result.notification == notification
        assert result.validation_errors == []

    @pytest.mark.parametrize("current", [
        None,
        ProfileStatusCode.PENDING,
        ProfileStatusCode.REJECTED,
        ProfileStatusCode.UPDATE_APPROVED,
        ProfileStatusCode.UPDATE_PROFILING,
    ])
    def test_submit_to_pending(self, current):
        """Test submissions return the profile to pending and clear the reason."""
        result = apply_transition(current, ProfileAction.SUBMIT)

        assert result.success
        assert result.new_status == ProfileStatusCode.PENDING
        assert result.notification == NotificationKind.PENDING
        assert result.writes_reason
        assert result.reason is None

    def test_submit_after_update_request(self):
        """Test an update submission is approved without notification."""
        result = apply_transition(ProfileStatusCode.UPDATE_REQUESTED, ProfileAction.SUBMIT)

        assert result.success
        assert result.new_status == ProfileStatusCode.UPDATE_APPROVED
        assert result.notification is None
        assert result.writes_reason

    def test_submit_while_approved_refused(self):
        """Test approved profiles cannot be resubmitted."""
        result = apply_transition(ProfileStatusCode.APPROVED, ProfileAction.SUBMIT)

        assert not result.success
        assert result.new_status is None

    def test_missing_row_counts_as_pending(self):
        """Test admin actions treat a missing status row as pending."""
        assert apply_transition(None, ProfileAction.ACCEPT).new_status == ProfileStatusCode.APPROVED


class TestReasons:
    """Test reason handling."""

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reject_requires_reason(self, reason):
        """Test rejection without a reason is refused."""
        result = apply_transition(ProfileStatusCode.PENDING, ProfileAction.REJECT, reason)

        assert not result.success
        assert result.new_status is None
        assert "A reason is required for this action" in result.validation_errors

    def test_reason_trimmed(self):
        """Test the persisted reason is trimmed."""
        result = apply_transition(ProfileStatusCode.PENDING, ProfileAction.REJECT, "  Missing documents \n")

        assert result.reason == "Missing documents"
        assert result.writes_reason

    def test_accept_keeps_stored_reason(self):
        """Test acceptance does not touch the stored reason."""
        result = apply_transition(ProfileStatusCode.PENDING, ProfileAction.ACCEPT, "ignored")

        assert result.reason is None
        assert not result.writes_reason

    def test_accept_update_request_clears_reason(self):
        """Test accepting an update request clears the reason."""
        result = apply_transition(ProfileStatusCode.UPDATE_REQUESTED, ProfileAction.ACCEPT_UPDATE_REQUEST, "x")

        assert result.reason is None
        assert result.writes_reason

    def test_requires_reason(self):
        """Test which actions need a reason."""
        assert requires_reason(ProfileAction.REJECT)
        assert requires_reason("decline_update_request")
        assert not requires_reason(ProfileAction.ACCEPT)
        assert not requires_reason(ProfileAction.SUBMIT)

    def test_validate_reason_ignores_status(self):
        """Test the reason check needs only the action."""
        assert not validate_reason(ProfileAction.SEND_TO_REPROFILING, " ").is_valid
        assert validate_reason(ProfileAction.SEND_TO_REPROFILING, "Annual review").is_valid
        assert validate_reason(ProfileAction.ACCEPT, None).is_valid


class TestInvalidTransitions:
    """Test refused transitions."""

    def test_wrong_source_status(self):
        """Test actions from a state outside the table are refused."""
        result = apply_transition(ProfileStatusCode.APPROVED, ProfileAction.ACCEPT)

        assert not result.success
        assert result.error_message == "Transition validation failed"
        assert result.validation_errors == ["Cannot accept a profile with status Approved"]

    def test_all_errors_reported(self):
        """Test state and reason errors are reported together."""
        validation = validate_transition(ProfileStatusCode.REJECTED, ProfileAction.REJECT, "")

        assert not validation.is_valid
        assert len(validation.errors) == 2

    def test_string_action(self):
        """Test actions may be given by value."""
        assert apply_transition(ProfileStatusCode.PENDING, "accept").success

    def test_unknown_action(self):
        """Test unknown actions raise."""
        with pytest.raises(ValueError):
            apply_transition(ProfileStatusCode.PENDING, "approve")


class TestHelpers:
    """Test UI helpers."""

    def test_status_labels(self):
        """Test human-readable labels."""
        assert status_label(ProfileStatusCode.UPDATE_REQUESTED) == "Update Requested"
        assert status_label(1) == "Approved"
        assert status_label(9) == "Unknown"
        assert status_label(None) == "Unknown"

    def test_available_actions(self):
        """Test actions offered per status."""
        assert available_actions(ProfileStatusCode.APPROVED) == [
            ProfileAction.REQUEST_UPDATE, ProfileAction.SEND_TO_REPROFILING
        ]
        assert available_actions(ProfileStatusCode.UPDATE_REQUESTED) == [
            ProfileAction.SUBMIT, ProfileAction.ACCEPT_UPDATE_REQUEST, ProfileAction.DECLINE_UPDATE_REQUEST
        ]
        assert available_actions(None) == [
            ProfileAction.SUBMIT, ProfileAction.ACCEPT, ProfileAction.REJECT
        ]

    def test_can_perform_ignores_reason(self):
        """Test can_perform only checks the source status."""
        assert can_perform(ProfileStatusCode.PENDING, ProfileAction.REJECT)
        assert not can_perform(ProfileStatusCode.REJECTED, ProfileAction.REJECT)

    def test_validate_deletion(self):
        """Test deletion needs confirmation."""
        assert validate_deletion(True).is_valid
        refused = validate_deletion(False)
        assert not refused.is_valid
        assert refused.errors == ["Deletion must be confirmed"]
