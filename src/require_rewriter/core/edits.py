from __future__ import annotations

import bisect
from dataclasses import dataclass

HOIST_START = "/* import-promotion-S */"
HOIST_END = "/* import-promotion-E */"
RUNTIME_START = "// ---- dynamic require runtime functions --S--"
RUNTIME_END = "// ---- dynamic require runtime functions --E--"


@dataclass(frozen=True)
class Edit:
    start: int
    end: int
    text: str


class EditBuffer:
    """Non-overlapping byte-range replacements plus a head and a tail insertion point.

    Offsets are byte offsets into the UTF-8 encoded source, the same unit the
    syntax tree reports. ``render`` applies everything in a single pass.
    """

    def __init__(self, source: bytes) -> None:
        self._source = source
        self._edits: list[Edit] = []
        self._prepend: list[str] = []
        self._append: list[str] = []

    @property
    def edits(self) -> list[Edit]:
        return list(self._edits)

    def overwrite(self, start: int, end: int, text: str) -> None:
        if not 0 <= start <= end <= len(self._source):
            raise ValueError(f"Edit range [{start}, {end}) is outside the source")
        index = bisect.bisect_left([e.start for e in self._edits], start)
        before = self._edits[index - 1] if index > 0 else None
        after = self._edits[index] if index < len(self._edits) else None
        if (before is not None and before.end > start) or (after is not None and after.start < end):
            raise ValueError(f"Edit range [{start}, {end}) overlaps an existing edit")
        self._edits.insert(index, Edit(start, end, text))

    def prepend(self, statement: str) -> None:
        self._prepend.append(statement)

    def append(self, block: str) -> None:
        self._append.append(block)

    def render(self) -> str | None:
        """Return the rewritten text, or ``None`` if nothing changed."""
        original = self._source.decode("utf-8")
        parts: list[str] = []

        cursor = 0
        if self._prepend:
            # A hashbang must stay the first line
            if self._source.startswith(b"#!"):
                newline = self._source.find(b"\n")
                cursor = len(self._source) if newline < 0 else newline + 1
                parts.append(self._source[:cursor].decode("utf-8"))
                if newline < 0:
                    parts.append("\n")
            # One line only, so source line numbers stay put
            parts.append(" ".join([HOIST_START, *(f"{s};" for s in self._prepend), HOIST_END]))

        for edit in self._edits:
            parts.append(self._source[cursor : edit.start].decode("utf-8"))
            parts.append(edit.text)
            cursor = edit.end
        parts.append(self._source[cursor:].decode("utf-8"))

        if self._append:
            if not parts[-1].endswith("\n"):
                parts.append("\n")
            parts.append("\n".join([RUNTIME_START, *self._append, RUNTIME_END]))

        rendered = "".join(parts)
        return None if rendered == original else rendered
