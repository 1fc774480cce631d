"""
Writes a generation result to disk.

The root namespace goes to the requested output path; other namespaces and
helper modules are written next to it as ``<name><extension>``. Support
files whose current content already contains the generated script are left
untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from tsbridge.emit import GeneratorResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WrittenFile:
    path: Path
    written: bool


def file_contains_script(existing: str, script: str) -> bool:
    """
    Whether *existing* file content already contains *script*.

    Import lines are looked up one by one, since a hand-maintained file may
    have merged or reordered them; the rest must appear as one block.
    """
    body: list[str] = []
    for line in script.splitlines():
        if line.startswith("import "):
            if line not in existing:
                return False
            continue
        body.append(line)

    return "\n".join(body).strip() in existing.replace("\r\n", "\n")


def write_result(result: GeneratorResult, output: Path) -> list[WrittenFile]:
    """
    Write *result*; see the module docstring for the layout.

    Returns:
        One entry per generated module, in result order
    """
    output.parent.mkdir(parents=True, exist_ok=True)

    if len(result.modules) == 1:
        module = next(iter(result.modules.values()))
        output.write_text(module.script)
        return [WrittenFile(output, True)]

    written: list[WrittenFile] = []
    for name, module in result.modules.items():
        if name == result.root_namespace:
            output.write_text(module.script)
            written.append(WrittenFile(output, True))
            continue

        path = output.parent / f"{name}{module.file_extension}"
        if path.exists() and file_contains_script(path.read_text(), module.script):
            logger.debug("Skipping %s: already up to date", path)
            written.append(WrittenFile(path, False))
            continue

        path.write_text(module.script)
        written.append(WrittenFile(path, True))

    return written
