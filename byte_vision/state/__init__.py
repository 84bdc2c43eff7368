"""
State management module for byte_vision.
Holds the settings slices and view state the screens share.
"""

from .app_state import AppState
from .work_items_state import WorkItemsState

__all__ = [
    'AppState',
    'WorkItemsState',
]
