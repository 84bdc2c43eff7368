# work_item_selector.py
# Description: Work item records and the two-slot selection used to compare them.
#
# Imports
from dataclasses import dataclass
from typing import List, Tuple
#
#######################################################################################################################
#
# Classes:

SELECTION_SIZE = 2


@dataclass(frozen=True)
class WorkItem:
    """One completed inference run from the history."""
    idx: int
    prompt: str = ""
    completion: str = ""
    args: str = ""
    date: str = ""


class SelectionWindow:
    """
    Ordered selection of at most two work item indices.

    Selecting a third item evicts the oldest one; selecting an item that is
    already selected removes it.
    """

    def __init__(self):
        self._indices: List[int] = []

    def __len__(self) -> int:
        return len(self._indices)

    def __contains__(self, idx: int) -> bool:
        return idx in self._indices

    def __repr__(self) -> str:
        return f"SelectionWindow({self._indices!r})"

    @property
    def indices(self) -> Tuple[int, ...]:
        return tuple(self._indices)

    def toggle(self, idx: int) -> Tuple[int, ...]:
        if idx in self._indices:
            self._indices.remove(idx)
        elif len(self._indices) < SELECTION_SIZE:
            self._indices.append(idx)
        else:
            self._indices = [self._indices[-1], idx]
        return self.indices

    def can_submit(self) -> bool:
        return len(self._indices) == SELECTION_SIZE

    def clear(self) -> None:
        self._indices = []

#
# End of work_item_selector.py
#######################################################################################################################
