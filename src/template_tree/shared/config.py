"""Configuration for template tree operations.

This module provides the immutable configuration object shared by the node
engine and the template composer: reserved names, separators, debug dump
layout, and composition policy.
"""

import json
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple


class ConfigError(ValueError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TreeConfig:
    """Settings for tree structural operations and template composition.

    Thread-safe due to frozen dataclass implementation.
    """

    # Reserved names
    sentinel_label: str = "LabelAgent"
    reserved_container: str = "counters"

    # Merge policy
    content_separator: str = ","
    skip_overwrite: Tuple[str, ...] = field(default_factory=tuple)
    preprocess: bool = True

    # Debug dump layout
    print_name_width: int = 50
    print_content_width: int = 35
    print_indent: str = "  "

    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not self.sentinel_label:
            raise ConfigValidationError(
                "sentinel_label cannot be empty", field_name="sentinel_label"
            )
        if self.print_name_width <= 0:
            raise ConfigValidationError(
                "print_name_width must be > 0", field_name="print_name_width"
            )
        if self.print_content_width <= 0:
            raise ConfigValidationError(
                "print_content_width must be > 0", field_name="print_content_width"
            )
        if isinstance(self.skip_overwrite, str):
            raise ConfigValidationError(
                "skip_overwrite must be a sequence of names, not a string",
                field_name="skip_overwrite",
                suggestions=[f"skip_overwrite=({self.skip_overwrite!r},)"]
            )
        # Lists from JSON or callers are normalized so the config stays hashable
        object.__setattr__(self, "skip_overwrite", tuple(self.skip_overwrite))

    def override(self, **kwargs: Any) -> "TreeConfig":
        """Create a new configuration with the given fields replaced.

        Raises:
            ConfigValidationError: If a key is unknown or a value is invalid
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field(s): {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known)
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        data = asdict(self)
        data["skip_overwrite"] = list(self.skip_overwrite)
        return data

    def to_json(self, indent: int = 2) -> str:
        """Serialize configuration to JSON."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreeConfig":
        """Create configuration from a dictionary, rejecting unknown keys."""
        return cls().override(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "TreeConfig":
        """Create configuration from a JSON document."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration JSON must be an object")
        return cls.from_dict(data)


DEFAULT_CONFIG = TreeConfig()
