# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for profile lifecycle orchestration.
"""

import pytest
from datetime import datetime

from models.enums import NotificationKind, ProfileAction, ProfileStatusCode
from services.lifecycle import ProfileLifecycleService
from services.mongodb import PersistenceError
from services.notifications import NotificationError


class TestProfileLifecycleService:
    """Test transitions with their side effects."""

    @pytest.fixture
    def service(self, mock_repository, mock_notifier):
        return ProfileLifecycleService(mock_repository, mock_notifier)

    def test_reject_persists_and_notifies(self, service, mock_repository, mock_notifier, make_raw_record):
        """Test a rejection writes the trimmed reason and notifies the resident."""
        raw = make_raw_record(status=3, user_id="user-7")
        mock_repository.find_resident.return_value = raw

        outcome = service.reject(raw["id"], "  Missing documents ")

        assert outcome.success
        assert outcome.previous_status == ProfileStatusCode.PENDING
        assert outcome.new_status == ProfileStatusCode.REJECTED
        assert outcome.updated_at == datetime(2024, 7, 1, 12, 0, 0)
        mock_repository.update_status.assert_called_once_with(
            raw["id"], ProfileStatusCode.REJECTED, reason="Missing documents", write_reason=True
        )
        mock_notifier.send.assert_called_once_with(NotificationKind.REJECTION, "user-7", "Missing documents")

    def test_reject_without_reason_has_no_side_effects(self, service, mock_repository, mock_notifier,
                                                       make_raw_record):
        """Test a refused rejection reads nothing, writes nothing and sends nothing."""
        raw = make_raw_record(status=3)
        mock_repository.find_resident.return_value = raw

        outcome = service.reject(raw["id"], "   ")

        assert not outcome.success
        assert outcome.validation_errors == ["A reason is required for this action"]
        assert outcome.new_status is None
        mock_repository.find_resident.assert_not_called()
        mock_repository.update_status.assert_not_called()
        mock_notifier.send.assert_not_called()

    def test_missing_reason_reported_before_lookup(self, service, mock_repository):
        """Test a missing reason wins over an unreachable database."""
        mock_repository.find_resident.side_effect = PersistenceError("down")

        outcome = service.request_update("any-id", "")

        assert not outcome.success
        assert outcome.error_message == "Transition validation failed"
        assert outcome.validation_errors == ["A reason is required for this action"]
        mock_repository.find_resident.assert_not_called()

    def test_invalid_source_status(self, service, mock_repository, mock_notifier, make_raw_record):
        """Test transitions from a state outside the table are refused."""
        mock_repository.find_resident.return_value = make_raw_record(status=2)

        outcome = service.accept("any-id")

        assert not outcome.success
        assert outcome.previous_status == ProfileStatusCode.REJECTED
        mock_repository.update_status.assert_not_called()

    def test_missing_resident(self, service, mock_repository):
        """Test a missing record yields a failed outcome."""
        mock_repository.find_resident.return_value = None

        outcome = service.accept("missing")

        assert not outcome.success
        assert "not found" in outcome.error_message
        mock_repository.update_status.assert_not_called()

    def test_persistence_failure_skips_notification(self, service, mock_repository, mock_notifier,
                                                    make_raw_record):
        """Test a failed write aborts before notifying."""
        mock_repository.find_resident.return_value = make_raw_record(status=3)
        mock_repository.update_status.side_effect = PersistenceError("write failed")

        outcome = service.accept("any-id")

        assert not outcome.success
        assert outcome.error_message == "write failed"
        mock_notifier.send.assert_not_called()

    def test_notification_failure_is_warning(self, service, mock_repository, mock_notifier, make_raw_record):
        """Test a failed notification keeps the write and reports a warning."""
        mock_repository.find_resident.return_value = make_raw_record(status=1)
        mock_notifier.send.side_effect = NotificationError("mailer down")

        outcome = service.request_update("any-id", "Please update your zone")

        assert outcome.success
        assert outcome.new_status == ProfileStatusCode.UPDATE_REQUESTED
        assert outcome.warnings == ["mailer down"]
        mock_repository.update_status.assert_called_once()

    def test_accept_keeps_reason(self, service, mock_repository, make_raw_record):
        """Test acceptance leaves the stored reason alone."""
        mock_repository.find_resident.return_value = make_raw_record(status=3, reason="old")

        service.accept("any-id")

        assert mock_repository.update_status.call_args[1] == {"reason": None, "write_reason": False}

    def test_first_submission(self, service, mock_repository, mock_notifier, make_raw_record):
        """Test submitting without a status row creates a pending row."""
        mock_repository.find_resident.return_value = make_raw_record(status=None, user_id="user-1")

        outcome = service.submit("any-id")

        assert outcome.success
        assert outcome.previous_status is None
        assert outcome.new_status == ProfileStatusCode.PENDING
        mock_notifier.send.assert_called_once_with(NotificationKind.PENDING, "user-1", None)

    def test_update_submission_not_notified(self, service, mock_repository, mock_notifier, make_raw_record):
        """Test submitting a requested update is approved silently."""
        mock_repository.find_resident.return_value = make_raw_record(status=4, reason="Fix zone")

        outcome = service.submit("any-id")

        assert outcome.new_status == ProfileStatusCode.UPDATE_APPROVED
        mock_repository.update_status.assert_called_once_with(
            "any-id", ProfileStatusCode.UPDATE_APPROVED, reason=None, write_reason=True
        )
        mock_notifier.send.assert_not_called()

    @pytest.mark.parametrize("method, status, reason, target", [
        ("accept_update_request", 4, None, ProfileStatusCode.UPDATE_APPROVED),
        ("decline_update_request", 4, "No changes needed", ProfileStatusCode.APPROVED),
        ("send_to_reprofiling", 1, "Annual review", ProfileStatusCode.UPDATE_PROFILING),
    ])
    def test_update_flow(self, service, mock_repository, make_raw_record, method, status, reason, target):
        """Test update-request transitions through the convenience methods."""
        mock_repository.find_resident.return_value = make_raw_record(status=status)

        args = ("any-id",) if reason is None else ("any-id", reason)
        outcome = getattr(service, method)(*args)

        assert outcome.success
        assert outcome.new_status == target

    def test_generic_transition_by_value(self, service, mock_repository, make_raw_record):
        """Test actions can be passed by value."""
        mock_repository.find_resident.return_value = make_raw_record(status=3)

        outcome = service.transition("any-id", "accept")

        assert outcome.action == ProfileAction.ACCEPT
        assert outcome.success


class TestResidentDeletion:
    """Test resident deletion."""

    @pytest.fixture
    def service(self, mock_repository, mock_notifier):
        return ProfileLifecycleService(mock_repository, mock_notifier)

    def test_requires_confirmation(self, service, mock_repository):
        """Test unconfirmed deletes touch nothing."""
        outcome = service.delete_resident("any-id", confirmed=False)

        assert not outcome.success
        assert outcome.validation_errors == ["Deletion must be confirmed"]
        mock_repository.delete_status.assert_not_called()
        mock_repository.delete_resident.assert_not_called()

    def test_deletes_status_then_record(self, service, mock_repository, mock_notifier):
        """Test the status row is removed before the record."""
        calls = []
        mock_repository.delete_status.side_effect = lambda rid: calls.append("status") or True
        mock_repository.delete_resident.side_effect = lambda rid: calls.append("resident") or True

        outcome = service.delete_resident("any-id", confirmed=True)

        assert outcome.success
        assert calls == ["status", "resident"]
        mock_notifier.send.assert_not_called()

    def test_status_delete_failure_aborts(self, service, mock_repository):
        """Test a failed status delete stops before the record delete."""
        mock_repository.delete_status.side_effect = PersistenceError("boom")

        outcome = service.delete_resident("any-id", confirmed=True)

        assert not outcome.success
        mock_repository.delete_resident.assert_not_called()

    def test_missing_record(self, service, mock_repository):
        """Test deleting an unknown record fails."""
        mock_repository.delete_resident.return_value = False

        outcome = service.delete_resident("any-id", confirmed=True)

        assert not outcome.success
        assert "not found" in outcome.error_message
