# work_item_store.py
# Description: Persistence of the inference history shown as work items.
#
# Imports
import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from .work_item_selector import WorkItem
#
#######################################################################################################################
#
# Classes:

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class WorkItemStoreError(Exception):
    """Raised when the history cannot be read or written."""


class WorkItemStore(ABC):

    @abstractmethod
    def list(self) -> str:
        """Return the history as a JSON array of work item records."""

    @abstractmethod
    def append(self, prompt: str, completion: str, args: str) -> WorkItem:
        """Record a completed run and return the new work item."""


def _record_idx(record: Dict[str, Any]) -> Optional[int]:
    try:
        return int(record["idx"])
    except (TypeError, ValueError):
        return None


def parse_work_items(payload: str) -> List[WorkItem]:
    """
    Parse a JSON array of work item records.

    Records that are not objects, carry an unusable index, or repeat an index
    already seen are skipped with a warning rather than failing the whole list.
    A record without ``idx`` gets the next index above every explicit one, so
    indices stay unique.
    """
    try:
        records = json.loads(payload) if payload else []
    except json.JSONDecodeError as e:
        raise WorkItemStoreError(f"Work item history is not valid JSON: {e}") from e
    if not isinstance(records, list):
        raise WorkItemStoreError("Work item history must be a JSON array")

    explicit = [_record_idx(r) for r in records if isinstance(r, dict) and "idx" in r]
    next_idx = max((i for i in explicit if i is not None), default=0) + 1

    items: List[WorkItem] = []
    seen = set()
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning(f"Skipping malformed work item at position {position}: {record!r}")
            continue
        if "idx" in record:
            idx = _record_idx(record)
            if idx is None:
                logger.warning(f"Skipping work item with invalid idx at position {position}")
                continue
        else:
            idx = next_idx
            next_idx += 1
        if idx in seen:
            logger.warning(f"Skipping work item at position {position}: duplicate idx {idx}")
            continue
        seen.add(idx)
        items.append(WorkItem(
            idx=idx,
            prompt=str(record.get("prompt", "")),
            completion=str(record.get("completion", "")),
            args=str(record.get("args", "")),
            date=str(record.get("date", "")),
        ))
    return items


def _to_record(item: WorkItem) -> Dict[str, Any]:
    return {
        "idx": item.idx,
        "prompt": item.prompt,
        "completion": item.completion,
        "args": item.args,
        "date": item.date,
    }


class JsonFileWorkItemStore(WorkItemStore):
    """History kept as a single JSON array on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read_records(self) -> List[Any]:
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise WorkItemStoreError(f"Could not read work items from {self.path}: {e}") from e
        if not text.strip():
            return []
        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise WorkItemStoreError(f"Work item file {self.path} is not valid JSON: {e}") from e
        if not isinstance(records, list):
            raise WorkItemStoreError(f"Work item file {self.path} must contain a JSON array")
        return records

    def list(self) -> str:
        with self._lock:
            return json.dumps(self._read_records())

    def append(self, prompt: str, completion: str, args: str) -> WorkItem:
        with self._lock:
            records = self._read_records()
            indices = [r.get("idx") for r in records if isinstance(r, dict) and isinstance(r.get("idx"), int)]
            item = WorkItem(
                idx=max(indices, default=0) + 1,
                prompt=prompt,
                completion=completion,
                args=args,
                date=datetime.now().strftime(DATE_FORMAT),
            )
            records.append(_to_record(item))
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(records, indent=2), encoding="utf-8")
            except OSError as e:
                raise WorkItemStoreError(f"Could not write work items to {self.path}: {e}") from e
        logger.info(f"Recorded work item {item.idx} in {self.path}")
        return item

#
# End of work_item_store.py
#######################################################################################################################
