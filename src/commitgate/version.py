"""Dotted-numeric version parsing and minimum-version checks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

_SEGMENT_RE = re.compile(r"^(\d+)")


class VersionError(ValueError):
    """Raised when text does not start with a numeric version segment."""


@total_ordering
@dataclass(frozen=True)
class Version:
    """Structured dotted version; comparison pads missing segments with zero."""

    segments: tuple[int, ...]
    text: str

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse the leading ``N.N.N`` run of *text*.

        Anything after the first whitespace is ignored, and each segment keeps
        only its leading digits, so ``0.1.5575+a1b2 (release)`` parses as
        ``(0, 1, 5575)``. Parsing stops at the first segment without digits.
        """
        stripped = text.strip()
        token = stripped.split()[0] if stripped else ""
        segments: list[int] = []
        for part in token.split("."):
            match = _SEGMENT_RE.match(part)
            if match is None:
                break
            segments.append(int(match.group(1)))
            if match.end() != len(part):
                break

        if not segments:
            raise VersionError(f"not a dotted version: {text!r}")
        return cls(segments=tuple(segments), text=token)

    def _padded(self, width: int) -> tuple[int, ...]:
        return self.segments + (0,) * (width - len(self.segments))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        width = max(len(self.segments), len(other.segments))
        return self._padded(width) == other._padded(width)

    def __lt__(self, other: Version) -> bool:
        width = max(len(self.segments), len(other.segments))
        return self._padded(width) < other._padded(width)

    def __hash__(self) -> int:
        trimmed = list(self.segments)
        while len(trimmed) > 1 and trimmed[-1] == 0:
            trimmed.pop()
        return hash(tuple(trimmed))

    def __str__(self) -> str:
        return ".".join(str(s) for s in self.segments)


def version_satisfies(required: str, actual: str) -> bool:
    """Return True when *actual* is at least *required*.

    Two rules, applied in order:

    1. If the stripped *actual* text starts with the stripped *required* text,
       the requirement is met regardless of any suffix (``0.1.5`` accepts
       ``0.1.5-rc1``).
    2. Otherwise both are parsed with :meth:`Version.parse` and compared
       segment by segment as integers, with missing trailing segments
       treated as zero.

    Raises:
        VersionError: If either side has no leading numeric segment.
    """
    required_text = required.strip()
    actual_text = actual.strip()
    if required_text and actual_text.startswith(required_text):
        return True
    return Version.parse(actual_text) >= Version.parse(required_text)
