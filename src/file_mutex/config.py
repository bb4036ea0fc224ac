"""Construction-time configuration for ``FileMutex``.

Classes
-------
- MutexConfig  — validated, immutable retry and timing settings

Functions
---------
- build_config — merge keyword overrides into a ``MutexConfig``
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from file_mutex.errors import ConfigurationError

DEFAULT_UNEXPECTED_RETRY_MAX: int = 20
DEFAULT_PAUSE_INTERVAL: float = 0.1
DEFAULT_MAX_WAIT_TIME: float = 0.0


class MutexConfig(BaseModel):
    """Retry and timing parameters for a ``FileMutex``.

    Parameters
    ----------
    unexpected_retry_max:
        How many consecutive unexpected (non-contention) errors a single
        ``lock()`` call tolerates before giving up.  Must be a non-negative
        integer.  Default: 20.
    pause_interval:
        Seconds to sleep between acquisition attempts.  Must be positive.
        Default: 0.1.
    max_wait_time:
        Maximum seconds ``lock()`` may block.  ``0`` waits forever.
        Default: 0.
    """

    unexpected_retry_max: int = Field(default=DEFAULT_UNEXPECTED_RETRY_MAX, ge=0, strict=True)
    pause_interval: float = Field(
        default=DEFAULT_PAUSE_INTERVAL, gt=0.0, strict=True, allow_inf_nan=False
    )
    max_wait_time: float = Field(
        default=DEFAULT_MAX_WAIT_TIME, ge=0.0, strict=True, allow_inf_nan=False
    )

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("unexpected_retry_max", "pause_interval", "max_wait_time", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        # bool is an int subclass; True must not read as "1 retry".
        if isinstance(value, bool):
            raise ValueError("must be a number, not a boolean")
        return value

    @property
    def has_deadline(self) -> bool:
        """True when ``max_wait_time`` bounds ``lock()``."""
        return self.max_wait_time > 0


def build_config(config: MutexConfig | None = None, **overrides: Any) -> MutexConfig:
    """Return a validated ``MutexConfig``.

    Parameters
    ----------
    config:
        A ready-made configuration.  Mutually exclusive with ``overrides``.
    **overrides:
        Individual ``MutexConfig`` fields.

    Raises
    ------
    ConfigurationError
        If a value is out of its domain, a key is unknown, or both
        ``config`` and ``overrides`` are given.
    """
    if config is not None:
        if overrides:
            raise ConfigurationError(
                "Pass either a MutexConfig or keyword overrides, not both: "
                f"{sorted(overrides)!r}"
            )
        if not isinstance(config, MutexConfig):
            raise ConfigurationError(
                f"config must be a MutexConfig, got {type(config).__name__}"
            )
        return config
    try:
        return MutexConfig(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid mutex configuration: {exc}") from exc
