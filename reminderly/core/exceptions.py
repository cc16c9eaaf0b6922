"""Custom exception hierarchy for Reminderly.

Every application error derives from ReminderlyException so the API layer can
render it uniformly and the batch jobs can fold it into a run summary.

Error codes follow pattern: [CATEGORY][NUMBER]
- REM: Reminder / dispatch errors (001-099)
- EMP: Employee errors (100-199)
- RCR: Recurring reminder errors (200-299)
- JOB: Scheduled job errors (300-399)
- SYS: System errors (400-499)
"""

from __future__ import annotations

from typing import Any


class ReminderlyException(Exception):
    """Base exception for all Reminderly application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with a readable message and metadata.

        Args:
            message: Human-readable error message
            code: Unique error code (e.g., "REM001")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# REMINDER / DISPATCH ERRORS (REM001-099)
# ============================================================================

class ReminderError(ReminderlyException):
    """Base class for reminder-related errors."""
    pass


class ReminderNotFoundError(ReminderError):
    def __init__(self, reminder_id: int | None = None):
        message = "Reminder not found" if reminder_id is None else f"Reminder {reminder_id} not found"
        super().__init__(
            message=message,
            code="REM001",
            status_code=404,
            details={"reminder_id": reminder_id} if reminder_id is not None else {},
        )


class ReminderTypeNotFoundError(ReminderError):
    def __init__(self, reminder_type_id: int | None = None):
        message = (
            "Reminder type not found"
            if reminder_type_id is None
            else f"Reminder type {reminder_type_id} not found"
        )
        super().__init__(
            message=message,
            code="REM002",
            status_code=404,
            details={"reminder_type_id": reminder_type_id} if reminder_type_id is not None else {},
        )


class ReminderAlreadyCompletedError(ReminderError):
    def __init__(self, reminder_id: int):
        super().__init__(
            message="Reminder already marked as complete",
            code="REM003",
            status_code=400,
            details={"reminder_id": reminder_id},
        )


class DuplicateIntervalError(ReminderError):
    def __init__(self, reminder_type_id: int, days_before: int):
        super().__init__(
            message=f"Interval of {days_before} days already exists for this reminder type",
            code="REM004",
            status_code=409,
            details={"reminder_type_id": reminder_type_id, "days_before": days_before},
        )


class ReminderTypeDisabledError(ReminderError):
    def __init__(self, name: str):
        super().__init__(
            message=f"Reminder type '{name}' is disabled",
            code="REM005",
            status_code=400,
            details={"reminder_type": name},
        )


class ReminderTypeAlreadyExistsError(ReminderError):
    def __init__(self, name: str):
        super().__init__(
            message=f"Reminder type '{name}' already exists",
            code="REM006",
            status_code=409,
            details={"name": name},
        )


class IntervalNotFoundError(ReminderError):
    def __init__(self, reminder_type_id: int, days_before: int):
        super().__init__(
            message=f"Interval of {days_before} days is not configured for this reminder type",
            code="REM007",
            status_code=404,
            details={"reminder_type_id": reminder_type_id, "days_before": days_before},
        )


class ConfigurationError(ReminderError):
    """A reminder type is missing its template, recipient policy or intervals."""

    def __init__(self, reason: str, reminder_type: str | None = None):
        super().__init__(
            message=f"Configuration error: {reason}",
            code="REM010",
            status_code=422,
            details={"reason": reason, "reminder_type": reminder_type},
        )
        self.reason = reason


class RecipientResolutionError(ReminderError):
    """No enabled recipient channel has a usable address."""

    def __init__(self, reminder_id: int | None = None):
        super().__init__(
            message="No recipients",
            code="REM011",
            status_code=422,
            details={"reminder_id": reminder_id},
        )
        self.reason = "no recipients"


class DeliveryError(ReminderError):
    """The email collaborator rejected or timed out on a send."""

    def __init__(self, recipient: str, error: str | None = None):
        super().__init__(
            message=f"Delivery to {recipient} failed: {error or 'unknown error'}",
            code="REM012",
            status_code=502,
            details={"recipient": recipient, "error": error},
        )
        self.recipient = recipient
        self.error = error


# ============================================================================
# EMPLOYEE ERRORS (EMP100-199)
# ============================================================================

class EmployeeNotFoundError(ReminderlyException):
    def __init__(self, employee_id: int | None = None):
        message = "Employee not found" if employee_id is None else f"Employee {employee_id} not found"
        super().__init__(
            message=message,
            code="EMP100",
            status_code=404,
            details={"employee_id": employee_id} if employee_id is not None else {},
        )


class EmployeeAlreadyExistsError(ReminderlyException):
    def __init__(self, employee_code: str):
        super().__init__(
            message=f"Employee with ID '{employee_code}' already exists",
            code="EMP101",
            status_code=409,
            details={"employee_id": employee_code},
        )


# ============================================================================
# RECURRING REMINDER ERRORS (RCR200-299)
# ============================================================================

class RecurringReminderNotFoundError(ReminderlyException):
    def __init__(self, recurring_id: int | None = None):
        message = (
            "Recurring reminder not found"
            if recurring_id is None
            else f"Recurring reminder {recurring_id} not found"
        )
        super().__init__(
            message=message,
            code="RCR200",
            status_code=404,
            details={"recurring_reminder_id": recurring_id} if recurring_id is not None else {},
        )


# ============================================================================
# JOB ERRORS (JOB300-399)
# ============================================================================

class JobAlreadyRunningError(ReminderlyException):
    def __init__(self, job_type: str):
        super().__init__(
            message=f"A {job_type} job is already running",
            code="JOB300",
            status_code=409,
            details={"job_type": job_type},
        )


class UnknownJobTypeError(ReminderlyException):
    def __init__(self, job_type: str):
        super().__init__(
            message=f"Invalid job type: {job_type}",
            code="JOB301",
            status_code=400,
            details={"job_type": job_type},
        )


# ============================================================================
# SYSTEM ERRORS (SYS400-499)
# ============================================================================

class DataStoreError(ReminderlyException):
    """The relational store is unreachable or rejected an operation."""

    def __init__(self, operation: str, reason: str | None = None):
        message = f"Data store error during {operation}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            code="SYS400",
            status_code=503,
            details={"operation": operation, "reason": reason},
        )


class EmailNotConfiguredError(ReminderlyException):
    def __init__(self, parameter: str):
        super().__init__(
            message=f"Email service is not properly configured: {parameter} is missing",
            code="SYS401",
            status_code=500,
            details={"parameter": parameter},
        )
