"""Expand the `-p/--pattern` glob into the ordered set of target files."""

from __future__ import annotations

import glob
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


def resolve_files(pattern: str, base_dir: Optional[Path] = None) -> Tuple[Path, ...]:
    """Return the regular files matching `pattern`, sorted and de-duplicated.

    Relative patterns are evaluated against `base_dir` (default: the
    current working directory).  Matches are returned as the glob spells
    them when no `base_dir` is given, and joined onto `base_dir`
    otherwise.  `**` only recurses when the pattern spells it.  Directories and
    other non-regular entries are dropped.  An empty result is not an
    error.
    """
    root = base_dir if base_dir is not None else Path.cwd()
    matches = glob.glob(pattern, root_dir=str(root), recursive="**" in pattern)

    seen = set()
    files: List[Path] = []
    for match in sorted(matches):
        key = os.path.normpath(match)
        if key in seen:
            continue
        seen.add(key)
        candidate = Path(match)
        absolute = candidate if candidate.is_absolute() else root / candidate
        if not absolute.is_file():
            logger.debug("Skipping non-regular match %s", match)
            continue
        files.append(candidate if base_dir is None else absolute)

    logger.debug("Pattern %r matched %d file(s)", pattern, len(files))
    return tuple(files)
