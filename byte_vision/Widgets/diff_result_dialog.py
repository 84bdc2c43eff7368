# diff_result_dialog.py
# Description: Modal showing the diff of two work items next to their plain text
#
# Imports
from typing import Optional
#
# 3rd-Party Imports
from bs4 import BeautifulSoup, NavigableString, Tag
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static
#
#######################################################################################################################
#
# Functions:

TAG_STYLES = {
    "ins": "bold green",
    "del": "strike red",
    "b": "bold",
    "strong": "bold",
    "i": "italic",
    "em": "italic",
    "u": "underline",
    "code": "reverse",
}


def _append_node(text: Text, node, style: Optional[str]) -> None:
    if isinstance(node, NavigableString):
        text.append(str(node), style=style)
        return
    if not isinstance(node, Tag):
        return
    if node.name == "br":
        text.append("\n")
        return
    tag_style = TAG_STYLES.get(node.name)
    combined = " ".join(s for s in (style, tag_style) if s) or None
    for child in node.children:
        _append_node(text, child, combined)


def markup_to_text(markup: str) -> Text:
    """Render sanitized inline diff markup as Rich text."""
    text = Text()
    if not markup:
        return text
    soup = BeautifulSoup(markup, "html.parser")
    for node in soup.children:
        _append_node(text, node, None)
    return text

#
# Classes:


class DiffResultDialog(ModalScreen):
    """Diff markup on top, the two cleaned values side by side below."""

    DEFAULT_CSS = """
    DiffResultDialog {
        align: center middle;
    }

    DiffResultDialog > Container {
        width: 90%;
        height: 85%;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }

    DiffResultDialog .dialog-title {
        text-style: bold;
        width: 100%;
        text-align: center;
        margin-bottom: 1;
    }

    DiffResultDialog #diff-markup {
        height: 1fr;
        border: round $primary;
    }

    DiffResultDialog .diff-sides {
        height: 1fr;
    }

    DiffResultDialog .diff-side {
        width: 1fr;
        border: round $secondary;
    }

    DiffResultDialog .button-container {
        align: center middle;
        height: 3;
    }
    """

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, sanitized_markup: str, left_text: str, right_text: str, title: str = "Diff Result", **kwargs):
        super().__init__(**kwargs)
        self.sanitized_markup = sanitized_markup
        self.left_text = left_text
        self.right_text = right_text
        self.dialog_title = title

    def compose(self) -> ComposeResult:
        with Container():
            yield Static(self.dialog_title, classes="dialog-title")
            with VerticalScroll(id="diff-markup"):
                yield Static(markup_to_text(self.sanitized_markup), id="diff-markup-body")
            with Horizontal(classes="diff-sides"):
                with VerticalScroll(classes="diff-side"):
                    yield Label("Left", classes="form-label")
                    yield Static(Text(self.left_text), id="diff-left")
                with VerticalScroll(classes="diff-side"):
                    yield Label("Right", classes="form-label")
                    yield Static(Text(self.right_text), id="diff-right")
            with Horizontal(classes="button-container"):
                yield Button("Close", id="close-button", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "close-button":
            self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)

#
# End of diff_result_dialog.py
#######################################################################################################################
