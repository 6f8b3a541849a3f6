"""Exceptions raised by the tiered metrics core."""


class TierScopeError(Exception):
    """Base class for all tierscope errors."""


class StoreUnavailableError(TierScopeError):
    """The rollup store failed while serving an operation.

    The driver exception is chained as ``__cause__``.
    """

    def __init__(self, operation: str, server_id: str | None = None) -> None:
        self.operation = operation
        self.server_id = server_id
        target = f" for server {server_id}" if server_id else ""
        super().__init__(f"rollup store failed during {operation}{target}")


class InvalidGranularityError(TierScopeError, ValueError):
    """An explicit granularity is not one of the known tiers."""

    def __init__(self, value: object, server_id: str | None = None) -> None:
        self.value = value
        self.server_id = server_id
        target = f" for server {server_id}" if server_id else ""
        super().__init__(f"unsupported granularity: {value!r}{target}")


class NoCurrentDataError(TierScopeError):
    """No current reading exists for a server."""

    def __init__(self, server_id: str) -> None:
        self.server_id = server_id
        super().__init__(f"no recent data found for server {server_id}")


class ConfigurationError(TierScopeError, ValueError):
    """Query configuration or settings are invalid."""


class InvalidTimeRangeError(TierScopeError, ValueError):
    """A caller-supplied time window or duration is malformed."""
