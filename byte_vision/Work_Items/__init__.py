"""
Work items: history of inference runs, two-item selection and diffing.
"""

from .diff_engine import DiffEngine, DifflibDiffEngine
from .diff_workflow import DiffResult, DiffWorkflow, InvalidSelectionError, clean_text
from .html_sanitizer import BleachHtmlSanitizer, HtmlSanitizer
from .work_item_selector import SelectionWindow, WorkItem
from .work_item_store import JsonFileWorkItemStore, WorkItemStore, WorkItemStoreError, parse_work_items

__all__ = [
    "BleachHtmlSanitizer",
    "DiffEngine",
    "DiffResult",
    "DiffWorkflow",
    "DifflibDiffEngine",
    "HtmlSanitizer",
    "InvalidSelectionError",
    "JsonFileWorkItemStore",
    "SelectionWindow",
    "WorkItem",
    "WorkItemStore",
    "WorkItemStoreError",
    "clean_text",
    "parse_work_items",
]
