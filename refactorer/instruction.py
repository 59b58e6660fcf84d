"""
Instruction resolution for the refactorer CLI.

The `-i/--instruction` argument is either the instruction itself or a
path to a file holding it.  Resolution happens exactly once, before any
target file is touched, and yields a tagged value so callers can tell
which branch was taken.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import InstructionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiteralInstruction:
    """The argument was used verbatim."""

    text: str


@dataclass(frozen=True)
class FileInstruction:
    """The argument named a file; `text` holds its trimmed contents."""

    text: str
    path: Path


Instruction = Union[LiteralInstruction, FileInstruction]


def _names_existing_file(raw: str) -> bool:
    try:
        return Path(raw).is_file()
    except (OSError, ValueError):
        # Over-long names, embedded NUL bytes, etc. cannot be paths.
        return False


def resolve_instruction(raw: str) -> Instruction:
    """Turn the raw `-i` value into an instruction.

    If `raw` names an existing file its contents, stripped of trailing
    whitespace, become the instruction.  A missing file is not an error:
    the value is then taken literally.  Failing to read a file that does
    exist raises `InstructionError`, as does an empty result.
    """
    if _names_existing_file(raw):
        path = Path(raw)
        try:
            text = path.read_text(encoding="utf-8").rstrip()
        except (OSError, UnicodeDecodeError) as exc:
            raise InstructionError(f"Failed to read instruction file {path}: {exc}") from exc
        if not text:
            raise InstructionError(f"Instruction file {path} is empty.")
        logger.info("Loaded instruction from %s (%d characters)", path, len(text))
        return FileInstruction(text=text, path=path)

    if not raw.strip():
        raise InstructionError("Instruction must not be empty.")
    logger.debug("Using literal instruction text")
    return LiteralInstruction(text=raw)
