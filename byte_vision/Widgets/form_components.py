# byte_vision/Widgets/form_components.py
"""
Form components that render settings fields as Textual widgets.
"""

from typing import List, Optional, Tuple
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Checkbox, Input, Label, Static

from ..Settings.field_model import Field, FieldKind, FieldSpec


def field_widget_id(raw_key: str) -> str:
    """Widget id for the control editing ``raw_key``."""
    return f"field-{raw_key}"


def error_widget_id(raw_key: str) -> str:
    return f"error-{raw_key}"


def raw_key_from_widget_id(widget_id: Optional[str]) -> Optional[str]:
    if widget_id and widget_id.startswith("field-"):
        return widget_id[len("field-"):]
    return None


def create_setting_field(
    spec: FieldSpec,
    field: Field,
    required: bool = False,
    editable_flag: bool = False,
) -> ComposeResult:
    """
    Create the label and controls for one settings field.

    Args:
        spec: Catalog entry of the field
        field: Current field value
        required: Mark the field as required and add an error line under it
        editable_flag: Also render an input for the flag token. It can only be
            filled in while the token is still unbound.
    """
    label = spec.display_label
    cmd_token = getattr(field, "cmd_token", "")
    label_text = f"{label}*" if required else label

    if spec.kind is FieldKind.FLAG_TOGGLE:
        # Checkbox has different layout - label comes after
        yield Checkbox(
            f"{label_text} ({cmd_token or 'unbound'})",
            value=field.enabled,
            id=field_widget_id(spec.value_key),
            classes="form-checkbox",
        )
        return

    if spec.kind is FieldKind.FLAG_VALUE and not editable_flag:
        label_text = f"{label_text} ({cmd_token or 'unbound'})"
    yield Label(f"{label_text}:", classes="form-label")

    if spec.kind is FieldKind.FLAG_VALUE and editable_flag:
        with Horizontal(classes="form-row"):
            yield Input(
                value=cmd_token,
                placeholder="Flag (press Enter to bind)",
                id=field_widget_id(spec.cmd_key),
                classes="form-input form-flag-input",
                disabled=bool(cmd_token),
            )
            yield Input(
                value=field.value,
                id=field_widget_id(spec.value_key),
                classes="form-input",
            )
    else:
        yield Input(
            value=field.value,
            id=field_widget_id(spec.value_key),
            classes="form-input",
        )

    if required:
        yield Static("", id=error_widget_id(spec.cmd_key if editable_flag else spec.value_key), classes="field-error")


def create_button_group(
    buttons: List[Tuple[str, str, str]],
    alignment: str = "left"
) -> ComposeResult:
    """
    Create a group of buttons.

    Args:
        buttons: List of (label, id, variant) tuples
        alignment: Button alignment ("left", "center", "right")
    """
    with Horizontal(classes=f"button-group button-group-{alignment}"):
        for label, button_id, variant in buttons:
            yield Button(
                label,
                id=button_id,
                variant=variant,
                classes="form-button"
            )

