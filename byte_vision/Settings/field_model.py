# field_model.py
# Description: Configuration field value objects and the per-slice field catalog entries.
#
# Imports
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Union
#
#######################################################################################################################
#
# Classes:


class FieldKind(str, Enum):
    """The three shapes a configuration field can take."""
    PLAIN = "plain"
    FLAG_VALUE = "flag_value"
    FLAG_TOGGLE = "flag_toggle"


# Parts of a field a raw key can address
PART_VALUE = "value"
PART_CMD = "cmd"
PART_ENABLED = "enabled"


@dataclass(frozen=True)
class PlainValue:
    """A bare string setting (paths, descriptions, file names)."""
    name: str
    value: str = ""

    kind = FieldKind.PLAIN

    def with_value(self, value: str) -> "PlainValue":
        return replace(self, value=value)


@dataclass(frozen=True)
class FlagValuePair:
    """A command line flag and the argument passed with it."""
    name: str
    cmd_token: str = ""
    value: str = ""

    kind = FieldKind.FLAG_VALUE

    def with_value(self, value: str) -> "FlagValuePair":
        return replace(self, value=value)

    def with_cmd_token(self, cmd_token: str) -> "FlagValuePair":
        return replace(self, cmd_token=cmd_token)


@dataclass(frozen=True)
class FlagTogglePair:
    """A command line switch that is either passed or not."""
    name: str
    cmd_token: str = ""
    enabled: bool = False

    kind = FieldKind.FLAG_TOGGLE

    def with_enabled(self, enabled: bool) -> "FlagTogglePair":
        return replace(self, enabled=enabled)

    def with_cmd_token(self, cmd_token: str) -> "FlagTogglePair":
        return replace(self, cmd_token=cmd_token)


Field = Union[PlainValue, FlagValuePair, FlagTogglePair]


def to_text(value: Any) -> str:
    """Coerce a raw setting value to the string form the engine expects."""
    if value is None:
        return ""
    return str(value)


def to_flag(value: Any) -> bool:
    """Coerce a raw toggle value. Strings like 'false' or '0' count as off."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class FieldSpec:
    """
    Catalog entry describing one field of a slice and how it maps to raw keys.

    The raw form of a slice is flat: a pair named ``GPULayers`` is stored as
    ``GPULayersCmd`` / ``GPULayersVal``, a toggle named ``MemLock`` as
    ``MemLockCmd`` / ``MemLockCmdEnabled``.
    """
    name: str
    kind: FieldKind
    value_key: str
    cmd_key: Optional[str] = None
    label: str = ""

    @property
    def display_label(self) -> str:
        return self.label or self.name

    def raw_keys(self) -> Dict[str, str]:
        """Map every raw key of this field to the part it addresses."""
        keys = {}
        if self.cmd_key:
            keys[self.cmd_key] = PART_CMD
        keys[self.value_key] = PART_ENABLED if self.kind is FieldKind.FLAG_TOGGLE else PART_VALUE
        return keys

    def empty(self) -> Field:
        if self.kind is FieldKind.FLAG_VALUE:
            return FlagValuePair(name=self.name)
        if self.kind is FieldKind.FLAG_TOGGLE:
            return FlagTogglePair(name=self.name)
        return PlainValue(name=self.name)

    def from_raw(self, raw: Dict[str, Any]) -> Field:
        """Build the field from a flat raw mapping; missing keys stay empty."""
        if self.kind is FieldKind.FLAG_VALUE:
            return FlagValuePair(
                name=self.name,
                cmd_token=to_text(raw.get(self.cmd_key)),
                value=to_text(raw.get(self.value_key)),
            )
        if self.kind is FieldKind.FLAG_TOGGLE:
            return FlagTogglePair(
                name=self.name,
                cmd_token=to_text(raw.get(self.cmd_key)),
                enabled=to_flag(raw.get(self.value_key, False)),
            )
        return PlainValue(name=self.name, value=to_text(raw.get(self.value_key)))

    def to_raw(self, field: Field) -> Dict[str, Any]:
        if isinstance(field, FlagValuePair):
            return {self.cmd_key: field.cmd_token, self.value_key: field.value}
        if isinstance(field, FlagTogglePair):
            return {self.cmd_key: field.cmd_token, self.value_key: field.enabled}
        return {self.value_key: field.value}

#
# End of field_model.py
#######################################################################################################################
