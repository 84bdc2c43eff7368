"""
Required-field checks for engine settings forms.
"""
from dataclasses import dataclass, field
from typing import Dict, Mapping

from .settings_store import SettingsSlice

DESCRIPTION_MIN_LENGTH = 5

# Flags that must be bound before the primary engine can be run, with their error text
PRIMARY_REQUIRED_FLAGS: Mapping[str, str] = {
    "GPULayersCmd": "GPU Layers Command cannot be empty.",
}


@dataclass
class ValidationResult:
    """Errors keyed by the raw key of the offending field."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid


def validate_description(description: str) -> str:
    """Return the error text for a description, or an empty string when it is fine."""
    if not description or not description.strip():
        return "Description is required."
    if len(description.strip()) < DESCRIPTION_MIN_LENGTH:
        return f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters."
    return ""


def validate_engine_settings(
    settings: SettingsSlice,
    required_flags: Mapping[str, str] = PRIMARY_REQUIRED_FLAGS,
) -> ValidationResult:
    """
    Check the fields an engine needs before a run can be submitted.

    Args:
        settings: The engine slice to check
        required_flags: Raw ``...Cmd`` key -> message for flags that must be bound

    Returns:
        ValidationResult; an empty error map means the slice can be submitted
    """
    result = ValidationResult()
    if "Description" in settings:
        message = validate_description(settings.get_value("Description"))
        if message:
            result.errors["Description"] = message

    for raw_key, message in required_flags.items():
        if raw_key not in settings:
            continue
        if not str(settings.get_value(raw_key) or "").strip():
            result.errors[raw_key] = message
    return result

