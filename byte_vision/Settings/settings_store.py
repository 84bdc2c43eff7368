"""
Settings slices: one mutable, in-memory collection of configuration fields per engine.

A slice is built pre-populated with its full catalog (every field empty), is
initialized exactly once from the default-settings loader, and afterwards only
changes through ``SetField`` / ``ReplaceMany`` commands. The transition
function ``apply_command`` is pure; ``SettingsSlice.dispatch`` swaps in its
result.
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from .field_model import (
    PART_CMD,
    PART_ENABLED,
    Field,
    FieldSpec,
    FlagTogglePair,
    to_flag,
    to_text,
)

logger = logger.bind(module="settings_store")


class SettingsError(Exception):
    """Base exception for misuse of a settings slice."""


class UnknownFieldError(SettingsError, KeyError):
    """Raised when a field name or raw key is not part of the slice."""

    def __init__(self, slice_name: str, name: str):
        self.slice_name = slice_name
        self.name = name
        super().__init__(f"Unknown field '{name}' in settings slice '{slice_name}'")

    def __str__(self) -> str:
        return self.args[0]


class UnsupportedCommandError(SettingsError):
    """Raised for an update kind the transition function does not know."""


class SettingsAlreadyInitializedError(SettingsError):
    """Raised when a slice is populated from defaults a second time."""


class ImmutableFieldError(SettingsError):
    """Raised when a bound flag token would be overwritten."""


@dataclass(frozen=True)
class SetField:
    """Replace the part of one field addressed by ``name``."""
    name: str
    value: Any


@dataclass(frozen=True)
class ReplaceMany:
    """Overwrite the named fields wholesale."""
    fields: Mapping[str, Field]


def _build_alias_index(catalog: Iterable[FieldSpec]) -> Dict[str, Tuple[FieldSpec, Optional[str]]]:
    index: Dict[str, Tuple[FieldSpec, Optional[str]]] = {}
    for spec in catalog:
        index[spec.name] = (spec, None)
        for raw_key, part in spec.raw_keys().items():
            index[raw_key] = (spec, part)
    return index


def _set_part(field: Field, part: Optional[str], value: Any) -> Field:
    if part == PART_CMD:
        new_token = to_text(value)
        if field.cmd_token and field.cmd_token != new_token:
            raise ImmutableFieldError(
                f"Flag token of '{field.name}' is already bound to '{field.cmd_token}'"
            )
        return field.with_cmd_token(new_token)
    if isinstance(field, FlagTogglePair):
        return field.with_enabled(to_flag(value))
    return field.with_value(to_text(value))


def apply_command(
    slice_name: str,
    fields: Mapping[str, Field],
    catalog: Iterable[FieldSpec],
    command: Any,
) -> Dict[str, Field]:
    """
    Pure transition function for a slice.

    Args:
        slice_name: Name of the slice, used in error messages
        fields: Current field mapping (left untouched)
        catalog: Catalog of the slice
        command: ``SetField`` or ``ReplaceMany``

    Returns:
        A new field mapping with the command applied

    Raises:
        UnknownFieldError: A named field is not in the catalog
        UnsupportedCommandError: ``command`` is not a known update kind
    """
    index = _build_alias_index(catalog)
    updated = dict(fields)

    if isinstance(command, SetField):
        if command.name not in index:
            raise UnknownFieldError(slice_name, command.name)
        spec, part = index[command.name]
        updated[spec.name] = _set_part(updated[spec.name], part, command.value)
        return updated

    if isinstance(command, ReplaceMany):
        for name, field in command.fields.items():
            if name not in index:
                raise UnknownFieldError(slice_name, name)
            spec, _ = index[name]
            if field.kind is not spec.kind:
                raise SettingsError(
                    f"Field '{spec.name}' in '{slice_name}' is {spec.kind.value}, got {field.kind.value}"
                )
            # Keep the catalog name even when keyed by a raw alias
            if field.name != spec.name:
                field = replace(field, name=spec.name)
            updated[spec.name] = field
        return updated

    raise UnsupportedCommandError(f"Unsupported settings command: {type(command).__name__}")


class SettingsSlice:
    """One named collection of configuration fields."""

    def __init__(self, name: str, catalog: List[FieldSpec]):
        self.name = name
        self._catalog = list(catalog)
        self._specs = {spec.name: spec for spec in self._catalog}
        self._aliases = _build_alias_index(self._catalog)
        self._fields: Dict[str, Field] = {spec.name: spec.empty() for spec in self._catalog}
        self._initialized = False

    def __contains__(self, name: str) -> bool:
        return name in self._aliases

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def catalog(self) -> List[FieldSpec]:
        return list(self._catalog)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def spec(self, name: str) -> FieldSpec:
        if name not in self._aliases:
            raise UnknownFieldError(self.name, name)
        return self._aliases[name][0]

    def get(self, name: str) -> Field:
        """Return the field addressed by a field name or any of its raw keys."""
        return self._fields[self.spec(name).name]

    def get_value(self, name: str) -> Any:
        """Return just the part a raw key addresses (value, flag token or enabled)."""
        spec = self.spec(name)
        part = self._aliases[name][1]
        field = self._fields[spec.name]
        if part == PART_CMD:
            return field.cmd_token
        if part == PART_ENABLED or isinstance(field, FlagTogglePair):
            return field.enabled
        return field.value

    def dispatch(self, command: Any) -> None:
        try:
            self._fields = apply_command(self.name, self._fields, self._catalog, command)
        except SettingsError as e:
            logger.error(f"Settings update rejected in '{self.name}': {e}")
            raise

    def set_value(self, name: str, value: Any) -> None:
        self.dispatch(SetField(name=name, value=value))

    def replace_many(self, fields: Mapping[str, Field]) -> None:
        self.dispatch(ReplaceMany(fields=dict(fields)))

    def replace_raw(self, raw: Mapping[str, Any]) -> None:
        """Restore fields from a flat raw mapping, touching only fields it mentions."""
        self.replace_many(self._fields_from_raw(raw))

    def init_from_defaults(self, raw: Mapping[str, Any]) -> None:
        """Populate the slice from the default-settings loader. Allowed once."""
        if self._initialized:
            raise SettingsAlreadyInitializedError(f"Settings slice '{self.name}' is already populated")
        self._fields = {spec.name: spec.from_raw(raw) for spec in self._catalog}
        unknown = [key for key in raw if key not in self._aliases]
        if unknown:
            logger.warning(f"Ignoring unknown keys for '{self.name}': {sorted(unknown)}")
        self._initialized = True
        logger.info(f"Settings slice '{self.name}' initialized with {len(self._fields)} fields")

    def snapshot(self) -> Mapping[str, Field]:
        """Read-only copy handed to collaborators such as the command runner."""
        return MappingProxyType(dict(self._fields))

    def to_raw(self) -> Dict[str, Any]:
        raw: Dict[str, Any] = {}
        for spec in self._catalog:
            raw.update(spec.to_raw(self._fields[spec.name]))
        return raw

    def _fields_from_raw(self, raw: Mapping[str, Any]) -> Dict[str, Field]:
        touched: Dict[str, Dict[str, Any]] = {}
        for key, value in raw.items():
            if key not in self._aliases:
                raise UnknownFieldError(self.name, key)
            spec = self._aliases[key][0]
            touched.setdefault(spec.name, spec.to_raw(self._fields[spec.name]))[key] = value
        return {name: self._specs[name].from_raw(values) for name, values in touched.items()}
