"""Local file access used by the batch runner."""

from __future__ import annotations

from pathlib import Path


class LocalFileStore:
    """Reads and rewrites target files on the local disk as UTF-8 text.

    Newlines are written back exactly as they appear in the text so a
    rewritten file matches the completion byte for byte.
    """

    encoding = "utf-8"

    def read(self, path: Path) -> str:
        with path.open("r", encoding=self.encoding, newline="") as f:
            return f.read()

    def write(self, path: Path, content: str) -> None:
        # Encode before opening: a failed encode must not truncate the file.
        data = content.encode(self.encoding)
        with path.open("wb") as f:
            f.write(data)
