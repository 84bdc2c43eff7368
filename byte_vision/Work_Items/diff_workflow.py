"""
Diff of two selected work items.

The selection window supplies exactly two work item indices; the chosen field
of both items is JSON-encoded and handed to the diff engine off the event
loop. The engine's markup is kept unchanged on the result and only rendered
after it went through the HTML sanitizer.
"""
import asyncio
import json
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from loguru import logger

from .diff_engine import DiffEngine
from .html_sanitizer import INLINE_PROFILE, HtmlSanitizer
from .work_item_selector import SELECTION_SIZE, SelectionWindow, WorkItem

logger = logger.bind(module="diff_workflow")

DIFF_FIELDS = ("completion", "prompt", "args")

_BRACES = re.compile(r"[{}]")
_SPAN_OPEN = re.compile(r"<span.*?>")
_SPAN_CLOSE = re.compile(r"</span>")
# Backslash-escaped newlines as they appear inside JSON-encoded text
_ESCAPED_NEWLINE = re.compile(r"\\r\\n|\\n")
_LITERAL_NEWLINE = re.compile(r"\r\n|\n")


class InvalidSelectionError(ValueError):
    """Raised when a diff is requested without exactly two resolvable work items."""


def clean_text(text: str) -> str:
    """Plain-text rendition of a work item value for the side-by-side panes."""
    text = _BRACES.sub("", text or "")
    text = _SPAN_OPEN.sub("", text)
    text = _SPAN_CLOSE.sub("", text)
    text = _ESCAPED_NEWLINE.sub(" ", text)
    text = _LITERAL_NEWLINE.sub(" ", text)
    text = text.replace("\\", "")
    return text.strip()


@dataclass(frozen=True)
class DiffResult:
    raw_markup: str
    left_text: str
    right_text: str


class DiffWorkflow:
    """Runs diffs for the work items view and remembers the last successful one."""

    def __init__(self, engine: DiffEngine, sanitizer: HtmlSanitizer):
        self.engine = engine
        self.sanitizer = sanitizer
        self.result: Optional[DiffResult] = None
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def request_diff(
        self,
        window: SelectionWindow,
        work_items: Iterable[WorkItem],
        field: str,
    ) -> Optional[DiffResult]:
        """
        Diff ``field`` of the two selected work items.

        Args:
            window: Current selection; the first index is the left side
            work_items: Items the indices are resolved against
            field: One of ``completion``, ``prompt``, ``args``

        Returns:
            The new DiffResult, or None if the engine failed or a diff is
            already running. On None the previous result is kept.

        Raises:
            InvalidSelectionError: The selection is not exactly two known items,
                or ``field`` is not a diffable field
        """
        if field not in DIFF_FIELDS:
            raise InvalidSelectionError(f"Cannot diff field '{field}'; expected one of {', '.join(DIFF_FIELDS)}")
        if len(window) != SELECTION_SIZE:
            raise InvalidSelectionError(f"Select exactly {SELECTION_SIZE} work items to compare (have {len(window)})")

        by_idx = {item.idx: item for item in work_items}
        missing = [idx for idx in window.indices if idx not in by_idx]
        if missing:
            raise InvalidSelectionError(f"Selected work item(s) not found: {missing}")

        if self._in_flight:
            logger.warning("Diff already in progress, ignoring request")
            return None

        left_item, right_item = (by_idx[idx] for idx in window.indices)
        left_value = getattr(left_item, field)
        right_value = getattr(right_item, field)

        self._in_flight = True
        try:
            markup = await asyncio.to_thread(
                self.engine.diff, json.dumps(left_value), json.dumps(right_value)
            )
        except Exception as e:
            logger.error(f"Diff of work items {window.indices} failed: {e}")
            return None
        finally:
            self._in_flight = False

        self.result = DiffResult(
            raw_markup=markup,
            left_text=clean_text(left_value),
            right_text=clean_text(right_value),
        )
        logger.info(f"Diffed '{field}' of work items {left_item.idx} and {right_item.idx}")
        return self.result

    def sanitize(self, result: Optional[DiffResult] = None) -> str:
        """Sanitized markup of ``result`` (default: the last successful diff)."""
        result = result or self.result
        if result is None:
            return ""
        return self.sanitizer.sanitize(result.raw_markup, allowed_profile=INLINE_PROFILE)
