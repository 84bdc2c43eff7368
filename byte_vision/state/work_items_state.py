"""
Work items view state.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..Work_Items.work_item_selector import SelectionWindow, WorkItem


@dataclass
class WorkItemsState:
    """History rows, the two-item selection and the field being compared."""

    items: List[WorkItem] = field(default_factory=list)
    selection: SelectionWindow = field(default_factory=SelectionWindow)
    diff_field: str = "completion"

    # Status
    is_loading: bool = False
    error: Optional[str] = None

    def item(self, idx: int) -> Optional[WorkItem]:
        for item in self.items:
            if item.idx == idx:
                return item
        return None

    def set_items(self, items: List[WorkItem]) -> None:
        """Replace the history; selected indices that vanished are dropped."""
        self.items = list(items)
        known = {item.idx for item in self.items}
        for idx in self.selection.indices:
            if idx not in known:
                self.selection.toggle(idx)
