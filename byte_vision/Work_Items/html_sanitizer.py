# html_sanitizer.py
# Description: Allow-list sanitization of diff markup before it is rendered.
#
# Imports
from abc import ABC, abstractmethod
from typing import Dict, Optional
#
# Third-Party Imports
import bleach
from loguru import logger
#
#######################################################################################################################
#
# Classes:

INLINE_PROFILE = "html-inline"

# Profile name -> (allowed tags, allowed attributes)
SANITIZER_PROFILES: Dict[str, tuple] = {
    INLINE_PROFILE: (
        ["span", "ins", "del", "b", "strong", "i", "em", "u", "code", "br"],
        {"*": ["class"]},
    ),
}


class HtmlSanitizer(ABC):

    @abstractmethod
    def sanitize(self, markup: str, allowed_profile: str = INLINE_PROFILE) -> str:
        """Return ``markup`` with everything outside the profile's allow-list removed."""


class BleachHtmlSanitizer(HtmlSanitizer):
    """Sanitizer backed by ``bleach.clean``; disallowed tags are stripped, not escaped."""

    def __init__(self, profiles: Optional[Dict[str, tuple]] = None):
        self.profiles = dict(profiles or SANITIZER_PROFILES)

    def _profile(self, name: str) -> tuple:
        if name not in self.profiles:
            raise ValueError(f"Unknown sanitizer profile: {name}")
        return self.profiles[name]

    def sanitize(self, markup: str, allowed_profile: str = INLINE_PROFILE) -> str:
        if not markup:
            return ""
        tags, attributes = self._profile(allowed_profile)
        cleaned = bleach.clean(
            markup,
            tags=tags,
            attributes=attributes,
            protocols=[],
            strip=True,
            strip_comments=True,
        )
        if len(cleaned) != len(markup):
            logger.debug(f"Sanitizer removed {len(markup) - len(cleaned)} characters of markup")
        return cleaned

#
# End of html_sanitizer.py
#######################################################################################################################
