"""Error types raised by the datasets pipeline."""

from __future__ import annotations


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""


class FetchError(RuntimeError):
    """Retrieving contacts from the CRM failed.

    ``transient`` is True when the failure was a rate-limit or server error
    that kept recurring after every retry was spent.
    """

    def __init__(self, message: str, *, status_code: int | None = None, transient: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.transient = transient


class SerializationError(RuntimeError):
    """The output artifact could not be written."""


class PipelineError(RuntimeError):
    """A pipeline run failed and produced no output."""


class LoadError(RuntimeError):
    """The published artifact could not be read or parsed."""
