# diff_engine.py
# Description: Word-level text diff rendered as inline HTML markup.
#
# Imports
import html
import re
from abc import ABC, abstractmethod
from difflib import SequenceMatcher
from typing import List
#
#######################################################################################################################
#
# Classes:

INSERT_CLASS = "diff-insert"
DELETE_CLASS = "diff-delete"

# Whitespace runs are kept as their own tokens so the output preserves spacing
_TOKEN_PATTERN = re.compile(r"(\s+)")


class DiffEngine(ABC):

    @abstractmethod
    def diff(self, left: str, right: str) -> str:
        """Return markup describing how ``left`` turns into ``right``."""


def tokenize(text: str) -> List[str]:
    return [token for token in _TOKEN_PATTERN.split(text) if token]


class DifflibDiffEngine(DiffEngine):
    """
    Diff built on ``difflib.SequenceMatcher`` over word tokens.

    Unchanged runs are emitted as ``<span>``, additions as
    ``<ins class="diff-insert">`` and removals as ``<del class="diff-delete">``.
    All text is HTML-escaped.
    """

    def __init__(self, autojunk: bool = False):
        self.autojunk = autojunk

    def diff(self, left: str, right: str) -> str:
        left_tokens = tokenize(left)
        right_tokens = tokenize(right)
        matcher = SequenceMatcher(None, left_tokens, right_tokens, autojunk=self.autojunk)

        parts: List[str] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            removed = html.escape("".join(left_tokens[i1:i2]))
            added = html.escape("".join(right_tokens[j1:j2]))
            if tag == "equal":
                parts.append(f"<span>{removed}</span>")
                continue
            if removed:
                parts.append(f'<del class="{DELETE_CLASS}">{removed}</del>')
            if added:
                parts.append(f'<ins class="{INSERT_CLASS}">{added}</ins>')
        return "".join(parts)

#
# End of diff_engine.py
#######################################################################################################################
