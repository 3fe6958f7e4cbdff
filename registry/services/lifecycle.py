# SPDX-License-Identifier: Apache-2.0

"""
Resident profile lifecycle orchestration.

Checks the reason requirement, loads a record, runs the pure status
transition, persists the result and sends the resident's notification.
A missing reason is refused before any I/O. Persistence failures abort the
transition; notification failures are reported as warnings on an otherwise
successful outcome, with the status write kept.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from models.entities import ResidentRecord
from models.enums import ProfileAction, ProfileStatusCode
from domain.normalization import normalize_record
from domain.profile_status import apply_transition, validate_deletion, validate_reason
from services.mongodb import MongoDBService, PersistenceError, ResidentNotFoundError
from services.notifications import NotificationClient, NotificationError


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass
class TransitionOutcome:
    """Result of a lifecycle operation after side effects."""
    success: bool
    resident_id: str
    action: Optional[ProfileAction] = None
    previous_status: Optional[ProfileStatusCode] = None
    new_status: Optional[ProfileStatusCode] = None
    error_message: Optional[str] = None
    validation_errors: List[str] = None
    warnings: List[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.validation_errors is None:
            self.validation_errors = []
        if self.warnings is None:
            self.warnings = []


class ProfileLifecycleService:
    """
    Applies profile status transitions with their side effects.

    There is no optimistic concurrency check: two administrators acting on
    the same record race at the database and the last write wins.
    """

    def __init__(self, repository: MongoDBService, notifier: NotificationClient):
        self.repository = repository
        self.notifier = notifier

    def _load_record(self, resident_id: str) -> ResidentRecord:
        document = self.repository.find_resident(resident_id)
        if document is None:
            raise ResidentNotFoundError(f"Resident {resident_id} not found")
        return normalize_record(document)

    def transition(
        self,
        resident_id: str,
        action: ProfileAction,
        reason: Optional[str] = None
    ) -> TransitionOutcome:
        """
        Apply a status transition to a resident profile.

        Args:
            resident_id: Resident record ID
            action: Requested action
            reason: Reason text, required for rejections and update requests

        Returns:
            TransitionOutcome describing what was persisted and any warnings
        """
        action = ProfileAction(action)

        with tracer.start_as_current_span("lifecycle.transition") as span:
            span.set_attributes({
                "resident.id": resident_id,
                "lifecycle.action": action.value
            })

            reason_check = validate_reason(action, reason)
            if not reason_check.is_valid:
                span.set_attribute("lifecycle.validation_failed", True)
                logger.info(
                    f"Rejected {action.value} for resident {resident_id}: missing reason",
                    extra={"extra_fields": {"resident_id": resident_id, "action": action.value}}
                )
                return TransitionOutcome(
                    success=False,
                    resident_id=resident_id,
                    action=action,
                    error_message="Transition validation failed",
                    validation_errors=reason_check.errors
                )

            try:
                record = self._load_record(resident_id)
            except PersistenceError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    f"Failed to load resident {resident_id} for {action.value}: {e}",
                    extra={"extra_fields": {"resident_id": resident_id, "action": action.value}}
                )
                return TransitionOutcome(
                    success=False,
                    resident_id=resident_id,
                    action=action,
                    error_message=str(e)
                )

            current = record.profile_status.status if record.profile_status else None
            result = apply_transition(current, action, reason)

            if not result.success:
                span.set_attribute("lifecycle.validation_failed", True)
                logger.info(
                    f"Rejected {action.value} for resident {resident_id}",
                    extra={
                        "extra_fields": {
                            "resident_id": resident_id,
                            "action": action.value,
                            "errors": result.validation_errors
                        }
                    }
                )
                return TransitionOutcome(
                    success=False,
                    resident_id=resident_id,
                    action=action,
                    previous_status=current,
                    error_message=result.error_message,
                    validation_errors=result.validation_errors
                )

            try:
                updated_at = self.repository.update_status(
                    resident_id,
                    result.new_status,
                    reason=result.reason,
                    write_reason=result.writes_reason
                )
            except PersistenceError as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    f"Failed to persist {action.value} for resident {resident_id}: {e}",
                    extra={"extra_fields": {"resident_id": resident_id, "action": action.value}}
                )
                return TransitionOutcome(
                    success=False,
                    resident_id=resident_id,
                    action=action,
                    previous_status=current,
                    error_message=str(e)
                )

            outcome = TransitionOutcome(
                success=True,
                resident_id=resident_id,
                action=action,
                previous_status=current,
                new_status=result.new_status,
                updated_at=updated_at
            )

            if result.notification is not None:
                try:
                    self.notifier.send(result.notification, record.user_id, result.reason)
                except NotificationError as e:
                    outcome.warnings.append(str(e))

            span.set_attributes({
                "lifecycle.new_status": int(result.new_status),
                "lifecycle.warnings": len(outcome.warnings)
            })
            logger.info(
                f"Resident {resident_id} moved to status {int(result.new_status)}",
                extra={
                    "extra_fields": {
                        "resident_id": resident_id,
                        "action": action.value,
                        "previous_status": int(current) if current is not None else None,
                        "new_status": int(result.new_status)
                    }
                }
            )
            return outcome

    def accept(self, resident_id: str) -> TransitionOutcome:
        return self.transition(resident_id, ProfileAction.ACCEPT)

    def reject(self, resident_id: str, reason: str) -> TransitionOutcome:
        return self.transition(resident_id, ProfileAction.REJECT, reason)

    def request_update(self, resident_id: str, reason: str) -> TransitionOutcome:
        return self.transition(resident_id, ProfileAction.REQUEST_UPDATE, reason)

    def accept_update_request(self, resident_id: str) -> TransitionOutcome:
        return self.transition(resident_id, ProfileAction.ACCEPT_UPDATE_REQUEST)

    def decline_update_request(self, resident_id: str, reason: str) -> TransitionOutcome:
        return self.transition(resident_id, ProfileAction.DECLINE_UPDATE_REQUEST, reason)

    def send_to_reprofiling(self, resident_id: str, reason: str) -> TransitionOutcome:
        return self.transition(resident_id, ProfileAction.SEND_TO_REPROFILING, reason)

    def submit(self, resident_id: str) -> TransitionOutcome:
        """Record a resident's (re)submission of the profiling form."""
        return self.transition(resident_id, ProfileAction.SUBMIT)

    def delete_resident(self, resident_id: str, confirmed: bool = False) -> TransitionOutcome:
        """
        Delete a resident record and its status row.

        The status row is removed first, then the record. Either step
        failing aborts with an error outcome.
        """
        validation = validate_deletion(confirmed)
        if not validation.is_valid:
            return TransitionOutcome(
                success=False,
                resident_id=resident_id,
                error_message="Deletion validation failed",
                validation_errors=validation.errors
            )

        with tracer.start_as_current_span("lifecycle.delete") as span:
            span.set_attribute("resident.id", resident_id)

            try:
                self.repository.delete_status(resident_id)
                deleted = self.repository.delete_resident(resident_id)
            except (PersistenceError, ValueError) as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(f"Failed to delete resident {resident_id}: {e}")
                return TransitionOutcome(
                    success=False,
                    resident_id=resident_id,
                    error_message=str(e)
                )

            if not deleted:
                return TransitionOutcome(
                    success=False,
                    resident_id=resident_id,
                    error_message=f"Resident {resident_id} not found"
                )

            logger.info(
                f"Deleted resident {resident_id}",
                extra={"extra_fields": {"resident_id": resident_id}}
            )
            return TransitionOutcome(success=True, resident_id=resident_id)
