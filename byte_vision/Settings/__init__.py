"""
Engine and application-path settings: field model, slices, derived fields, model resolution.
"""

from .derived_fields import (
    DerivedFieldBinding,
    compute_derived,
    embedding_engine_bindings,
    primary_engine_bindings,
    reconcile_on_edit,
)
from .field_catalog import (
    APP_PATH_FIELDS,
    EMBEDDING_ENGINE_FIELDS,
    PRIMARY_ENGINE_FIELDS,
    SLICE_CATALOGS,
)
from .field_model import FieldKind, FieldSpec, FlagTogglePair, FlagValuePair, PlainValue
from .model_resolver import (
    EMBEDDING_MODEL_KEYS,
    PRIMARY_MODEL_KEYS,
    ModelDescriptor,
    ModelResolution,
    ModelResolver,
    build_model_descriptors,
    initialize_from_persisted,
    resolve_selection,
)
from .settings_store import (
    ImmutableFieldError,
    ReplaceMany,
    SetField,
    SettingsAlreadyInitializedError,
    SettingsError,
    SettingsSlice,
    UnknownFieldError,
    UnsupportedCommandError,
    apply_command,
)
from .validation import ValidationResult, validate_engine_settings

__all__ = [
    "APP_PATH_FIELDS",
    "EMBEDDING_ENGINE_FIELDS",
    "EMBEDDING_MODEL_KEYS",
    "PRIMARY_ENGINE_FIELDS",
    "PRIMARY_MODEL_KEYS",
    "SLICE_CATALOGS",
    "DerivedFieldBinding",
    "FieldKind",
    "FieldSpec",
    "FlagTogglePair",
    "FlagValuePair",
    "ImmutableFieldError",
    "ModelDescriptor",
    "ModelResolution",
    "ModelResolver",
    "PlainValue",
    "ReplaceMany",
    "SetField",
    "SettingsAlreadyInitializedError",
    "SettingsError",
    "SettingsSlice",
    "UnknownFieldError",
    "UnsupportedCommandError",
    "ValidationResult",
    "apply_command",
    "build_model_descriptors",
    "compute_derived",
    "embedding_engine_bindings",
    "initialize_from_persisted",
    "primary_engine_bindings",
    "reconcile_on_edit",
    "resolve_selection",
    "validate_engine_settings",
]
