"""Response content matching."""

import re
from dataclasses import dataclass

from .errors import PatternError

# Upper bound on body bytes read per probe for GET/POST scans.
BODY_PREFIX_LIMIT = 64 * 1024


@dataclass(frozen=True)
class ContentMatcher:
    """Optional regex applied to the bounded prefix of each response.

    With no pattern the matcher is in status-only mode and ``evaluate``
    returns ``None`` so outcomes can tell "not configured" from "no match".
    """

    pattern: str | None = None
    regex: re.Pattern[str] | None = None

    @classmethod
    def compile(cls, pattern: str | None) -> "ContentMatcher":
        """Compile ``pattern`` once, raising PatternError if it is invalid."""
        if pattern is None or pattern == "":
            return cls()
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            raise PatternError(pattern, str(exc)) from exc
        return cls(pattern=pattern, regex=regex)

    @property
    def enabled(self) -> bool:
        return self.regex is not None

    def evaluate(self, text: str) -> bool | None:
        """Return whether the pattern occurs anywhere in ``text``."""
        if self.regex is None:
            return None
        return self.regex.search(text) is not None

    @staticmethod
    def body_limit(method: str) -> int:
        """Body bytes worth reading for ``method``; HEAD responses carry none."""
        if method.upper() == "HEAD":
            return 0
        return BODY_PREFIX_LIMIT
