"""Polling configuration loaded from environment variables.

All configuration values have defaults suitable for the public Azure
cloud. Sovereign clouds and test fakes override ``ARM_ENDPOINT``.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any numeric
    value is out of its valid range, so bad configuration surfaces when
    the client is built rather than mid-operation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from arm_polling import __version__
from arm_polling.core.constants import DEFAULT_ENDPOINT, DEFAULT_POLLING_INTERVAL_S
from arm_polling.core.exceptions import ValidationError


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class PollingConfig:
    """Immutable pipeline and polling configuration.

    Attributes:
        endpoint: Resource Manager base URL used for relative request paths.
        polling_interval_s: Delay between polls when the service sends no
            ``Retry-After`` hint.
        request_timeout_s: Per-request timeout for the httpx pipeline;
            ``0`` disables the timeout.
        user_agent: ``User-Agent`` header sent with every request.
    """

    endpoint: str = DEFAULT_ENDPOINT
    polling_interval_s: float = DEFAULT_POLLING_INTERVAL_S
    request_timeout_s: float = 0.0
    user_agent: str = f"arm-polling/{__version__}"

    @classmethod
    def from_env(cls) -> PollingConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a numeric value is out of range
                or a required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``ARM_POLLING_INTERVAL_S=abc``).
        """
        config = cls(
            endpoint=os.getenv("ARM_ENDPOINT", DEFAULT_ENDPOINT),
            polling_interval_s=float(
                os.getenv("ARM_POLLING_INTERVAL_S", str(DEFAULT_POLLING_INTERVAL_S))
            ),
            request_timeout_s=float(os.getenv("ARM_REQUEST_TIMEOUT_S", "0")),
            user_agent=os.getenv("ARM_USER_AGENT", f"arm-polling/{__version__}"),
        )
        validate(config)
        return config


def validate(config: PollingConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.endpoint:
        raise ConfigValidationError("ARM_ENDPOINT", config.endpoint, "must not be empty")

    if not config.endpoint.startswith(("https://", "http://")):
        raise ConfigValidationError(
            "ARM_ENDPOINT",
            config.endpoint,
            "must be an absolute http(s) URL",
        )

    if config.polling_interval_s < 0:
        raise ConfigValidationError(
            "ARM_POLLING_INTERVAL_S",
            config.polling_interval_s,
            "must be >= 0 (seconds)",
        )

    if config.request_timeout_s < 0:
        raise ConfigValidationError(
            "ARM_REQUEST_TIMEOUT_S",
            config.request_timeout_s,
            "must be >= 0 (seconds, 0 disables the timeout)",
        )

    if not config.user_agent:
        raise ConfigValidationError("ARM_USER_AGENT", config.user_agent, "must not be empty")
