"""
Indented text buffer for generated TypeScript.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from tsbridge.core.strings import is_ts_identifier


class ScriptBuilder:
    """
    Line buffer with an indentation level.

    Example:
        sb = ScriptBuilder("\\t")
        sb.line("export class Person {")
        with sb.indent():
            sb.line("name: string;")
        sb.line("}")
    """

    def __init__(self, indentation: str = "\t"):
        self.indentation = indentation
        self._lines: list[str] = []
        self._level = 0

    def line(self, text: str = "") -> None:
        """Append one line at the current indentation (blank lines stay empty)."""
        if text:
            self._lines.append(self.indentation * self._level + text)
        else:
            self._lines.append("")

    def lines(self, texts: Iterable[str]) -> None:
        for text in texts:
            self.line(text)

    def blank(self) -> None:
        """Append a blank line unless the buffer already ends with one."""
        if self._lines and self._lines[-1] != "":
            self._lines.append("")

    @contextmanager
    def indent(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    def to_string(self) -> str:
        lines = list(self._lines)
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n"

    def __len__(self) -> int:
        return len(self._lines)


def property_key(name: str) -> str:
    """Object-literal key for *name*, quoted when it is not an identifier."""
    return name if is_ts_identifier(name) else f'"{name}"'


def property_access(target: str, name: str) -> str:
    """Property access expression on *target*."""
    return f"{target}.{name}" if is_ts_identifier(name) else f'{target}["{name}"]'
