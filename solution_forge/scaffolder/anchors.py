"""Anchor-based edits of files that were generated earlier.

An anchor is a literal piece of text (a closing tag, a terminal statement)
that must occur exactly once in its target file.  The mutator inserts an
expanded fragment right before or after it and leaves every other character
of the file alone, so hand edits made elsewhere survive the graft.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from .errors import AmbiguousAnchor, AnchorNotFound
from .expander import expand
from .models import Anchor, InsertionMode, MutationResult

logger = logging.getLogger(__name__)


def count_matches(text: str, pattern: str) -> int:
    """Count occurrences of *pattern* in *text*, overlapping ones included."""
    count = 0
    start = text.find(pattern)
    while start != -1:
        count += 1
        start = text.find(pattern, start + 1)
    return count


def match_newlines(fragment: str, text: str) -> str:
    """Rewrite ``\\n`` in *fragment* as ``\\r\\n`` when *text* uses CRLF."""
    if "\r\n" in text and "\r\n" not in fragment:
        return fragment.replace("\n", "\r\n")
    return fragment


class AnchorMutator:
    """Locates anchors and splices fragments into files."""

    def locate(self, text: str, anchor: Anchor) -> int:
        """Return the insertion offset for *anchor* inside *text*.

        Raises:
            AnchorNotFound: The pattern does not occur.
            AmbiguousAnchor: The pattern occurs more than once.
        """
        first = text.find(anchor.match)
        if first == -1:
            raise AnchorNotFound(anchor.file_path, anchor.match)
        if text.find(anchor.match, first + 1) != -1:
            raise AmbiguousAnchor(
                anchor.file_path, anchor.match, count_matches(text, anchor.match)
            )
        if anchor.mode is InsertionMode.AFTER:
            return first + len(anchor.match)
        return first

    def insert(self, text: str, anchor: Anchor, fragment: str) -> str:
        """Return *text* with *fragment* spliced in at *anchor*."""
        offset = self.locate(text, anchor)
        return text[:offset] + fragment + text[offset:]

    def mutate(
        self,
        anchor: Anchor,
        fragment: str,
        bindings: Mapping[str, Any],
    ) -> MutationResult:
        """Expand *fragment* and insert it into ``anchor.file_path``.

        The file is read whole, edited in memory and written back in one
        pass.

        Raises:
            AnchorNotFound: The file is missing or lacks the pattern.
            AmbiguousAnchor: The pattern occurs more than once.
        """
        path = Path(anchor.file_path)
        text = read_text_exact(path, anchor)

        expanded = match_newlines(expand(fragment, bindings), text)
        offset = self.locate(text, anchor)
        updated = text[:offset] + expanded + text[offset:]

        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(updated)

        logger.debug(
            "Inserted %d chars %s %r in %s",
            len(expanded), anchor.mode.value, anchor.match, path,
        )
        return MutationResult(path=path, offset=offset, inserted=expanded)


def read_text_exact(path: Path, anchor: Anchor | None = None) -> str:
    """Read *path* as UTF-8 without newline translation.

    A missing file is reported as ``AnchorNotFound`` when *anchor* is given.
    """
    if anchor is not None and not path.is_file():
        raise AnchorNotFound(path, anchor.match, "target file does not exist")
    with path.open(encoding="utf-8", newline="") as fh:
        return fh.read()
