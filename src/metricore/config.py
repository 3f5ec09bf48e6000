"""Engine configuration and configuration file validation.

The configuration is an explicit object handed to :class:`metricore.Metrics`
(and from there to the registry and providers). It carries the default
reservoir strategy used for timers and histograms whose options do not
override it.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .core.clock import Clock, StopwatchClock
from .core.time_unit import TimeUnit
from .errors import ConfigurationError
from .sampling import (
    DEFAULT_ALPHA,
    DEFAULT_SAMPLE_SIZE,
    AlgorithmRReservoir,
    ForwardDecayingReservoir,
    Reservoir,
    SlidingWindowReservoir,
)
from .tagging import MetricTags

logger = logging.getLogger(__name__)

ReservoirType = Literal["uniform", "forward_decaying", "sliding_window"]


class ReservoirConfig(BaseModel):
    """Default sampling strategy for timers and histograms."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: ReservoirType = "forward_decaying"
    sample_size: int = Field(DEFAULT_SAMPLE_SIZE, gt=0)
    alpha: float = Field(DEFAULT_ALPHA, gt=0)

    def create_factory(self, clock: Optional[Clock] = None) -> Callable[[], Reservoir]:
        """Return a factory that builds a brand new reservoir on every call."""
        sample_size = self.sample_size

        if self.type == "uniform":
            return lambda: AlgorithmRReservoir(sample_size)
        if self.type == "sliding_window":
            return lambda: SlidingWindowReservoir(sample_size)

        alpha = self.alpha
        decay_clock = clock if clock is not None else StopwatchClock()
        return lambda: ForwardDecayingReservoir(sample_size, alpha, decay_clock)


class MetricsConfig(BaseModel):
    """Top-level metrics engine configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    default_context_label: str = Field("Application", min_length=1)
    global_tags: Dict[str, str] = Field(default_factory=dict)
    reservoir: ReservoirConfig = Field(default_factory=ReservoirConfig)
    default_duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    default_rate_unit: TimeUnit = TimeUnit.SECONDS

    @field_validator("default_duration_unit", "default_rate_unit", mode="before")
    @classmethod
    def _parse_time_unit(cls, value: Any) -> Any:
        if isinstance(value, str):
            return TimeUnit.from_name(value)
        return value

    @field_validator("global_tags")
    @classmethod
    def _check_global_tags(cls, value: Dict[str, str]) -> Dict[str, str]:
        for key in value:
            if not key.strip():
                raise ValueError("global tag keys must be non-empty")
        MetricTags.from_mapping(value)
        return value

    @property
    def global_metric_tags(self) -> MetricTags:
        return MetricTags.from_mapping(self.global_tags)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MetricsConfig":
        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid metrics configuration: {'; '.join(format_validation_errors(e))}") from e

    @classmethod
    def from_yaml_file(cls, file_path: Union[str, Path]) -> "MetricsConfig":
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)
        logger.info(f"Loaded metrics configuration from {file_path}")
        return cls.from_dict(_metrics_section(data))

    @classmethod
    def from_json_file(cls, file_path: Union[str, Path]) -> "MetricsConfig":
        with open(file_path, "r") as f:
            data = json.load(f)
        logger.info(f"Loaded metrics configuration from {file_path}")
        return cls.from_dict(_metrics_section(data))

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "MetricsConfig":
        """Load YAML or JSON, chosen by file extension."""
        if Path(file_path).suffix.lower() == ".json":
            return cls.from_json_file(file_path)
        return cls.from_yaml_file(file_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_context_label": self.default_context_label,
            "global_tags": dict(self.global_tags),
            "reservoir": self.reservoir.model_dump(),
            "default_duration_unit": self.default_duration_unit.name.lower(),
            "default_rate_unit": self.default_rate_unit.name.lower(),
        }


def _metrics_section(data: Any) -> Dict[str, Any]:
    """Accept either a bare config mapping or one nested under ``metrics``."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Metrics configuration must be a mapping, got {type(data).__name__}")
    if "metrics" in data and isinstance(data["metrics"], dict):
        return data["metrics"]
    return data


def format_validation_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        messages.append(f"{location}: {item['msg']}")
    return messages


def validate_config_file(file_path: Union[str, Path]) -> Tuple[bool, List[str], Optional[MetricsConfig]]:
    """Validate a configuration file without building any metrics.

    Returns:
        Tuple of (is_valid, error messages, parsed config or None)
    """
    path = Path(file_path)
    try:
        with open(path, "r") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        return False, [f"Could not read {path}: {e}"], None

    try:
        section = _metrics_section(data)
    except ConfigurationError as e:
        return False, [str(e)], None

    try:
        config = MetricsConfig.model_validate(section)
    except ValidationError as e:
        return False, format_validation_errors(e), None

    return True, [], config
