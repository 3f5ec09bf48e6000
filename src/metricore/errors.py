"""Exception types raised by the metrics engine."""


class MetricsError(Exception):
    """Base class for all metrics engine errors."""
    pass


class ConfigurationError(MetricsError):
    """Raised when metric options or engine configuration are invalid."""
    pass


class DuplicateMetricError(MetricsError):
    """Raised when a metric name is already registered under a different kind."""

    def __init__(self, context: str, name: str, existing_kind: str, requested_kind: str):
        self.context = context
        self.name = name
        self.existing_kind = existing_kind
        self.requested_kind = requested_kind
        super().__init__(
            f"Metric '{name}' in context '{context}' is already registered as a "
            f"{existing_kind}, cannot register it as a {requested_kind}"
        )


class ArgumentError(MetricsError, ValueError):
    """Raised when an observation or query argument is malformed."""
    pass
