"""Unified exception taxonomy.

Provides a shared base exception hierarchy for the pipeline, the
long-running-operation poller and the resource clients. Every domain
exception inherits from ``ArmError`` and carries structured context
fields that enable consistent retry decisions and diagnostics.

Taxonomy categories
-------------------
- ``ValidationError``   — caller/argument misuse, never retryable.
- ``TransientError``    — temporary failures (network, throttle), retryable.
- ``PermanentError``    — unrecoverable operation failures, not retryable.
- ``ContractError``     — service payload does not match the polling contract.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class ArmError(Exception):
    """Base exception for all arm_polling errors.

    Attributes:
        message: Human-readable error description.
        stage: Stage where the error occurred
            (e.g. ``"initial"``, ``"poll"``, ``"final_get"``).
        code: Machine-readable error code (e.g. ``"OPERATION_FAILED"``).
        retryable: Whether the caller may safely retry the operation.
        correlation_id: Service request identifier, when known.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, TransientError):
            return "transient"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(ArmError):
    """Caller or argument validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TransientError(ArmError):
    """Temporary failure that may succeed on retry."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(ArmError):
    """Unrecoverable operation failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(ArmError):
    """Service payload does not match the expected contract. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Long-running operation errors
# ---------------------------------------------------------------------------


class OperationRejectedError(PermanentError):
    """The initiating response did not carry an accepted status code.

    No poller is created when this is raised.

    Attributes:
        status_code: HTTP status code of the initiating response.
    """

    default_stage = "initial"
    default_code = "OPERATION_REJECTED"

    def __init__(self, status_code: int, *, correlation_id: str = "") -> None:
        self.status_code = status_code
        super().__init__(
            f"the operation failed or was cancelled (HTTP {status_code})",
            correlation_id=correlation_id,
        )


class TransportError(TransientError):
    """Network or send failure. Poller state is left untouched."""

    default_code = "TRANSPORT_FAILED"


class OperationFailedError(PermanentError):
    """The service reported a failed operation.

    Produced by the error unmarshaller from a non-success response, or
    from the ``error`` object of a failed/cancelled status payload.

    Attributes:
        status_code: HTTP status code of the response (0 when unknown).
        error_code: Service-specific error code (e.g. ``"ResourceNotFound"``).
        response: The offending response, if any.
    """

    default_stage = "poll"
    default_code = "OPERATION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 0,
        error_code: str = "",
        response: httpx.Response | None = None,
        stage: str = "",
        correlation_id: str = "",
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.response = response
        super().__init__(message, stage=stage, correlation_id=correlation_id)

    def __str__(self) -> str:
        if self.error_code:
            return f"({self.error_code}) {self.message}"
        return self.message


class MalformedPollBodyError(ContractError):
    """A status-monitor body could not be interpreted."""

    default_stage = "poll"
    default_code = "MALFORMED_POLL_BODY"


class NotYetCompleteError(ValidationError):
    """A final result was requested before the operation reached a terminal state."""

    default_stage = "final_response"
    default_code = "NOT_YET_COMPLETE"


class ResumeUnsupportedError(PermanentError):
    """Resume tokens are not supported by this poller."""

    default_code = "RESUME_UNSUPPORTED"


class OperationCancelledError(PermanentError):
    """The caller cancelled polling while waiting between polls."""

    default_stage = "delay"
    default_code = "OPERATION_CANCELLED"
