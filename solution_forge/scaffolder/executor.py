"""Materialises a ``ScaffoldPlan`` on disk.

The executor checks the whole plan before writing anything: no destination
may exist yet and every anchor must match exactly once in the content its
file will have when the mutation runs.  Only then does it create
directories, write files and apply anchor mutations, in that order.

Files already written are not rolled back if a later step fails (an I/O
error, or a file appearing between the check and the write).  The raised
error names the offending path so the caller can clean up and retry.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .anchors import AnchorMutator, match_newlines, read_text_exact
from .errors import DestinationConflict
from .expander import expand
from .models import ScaffoldPlan, ScaffoldResult

logger = logging.getLogger(__name__)


class ScaffoldExecutor:
    """Runs plans produced by ``ScaffoldPlanner``."""

    def __init__(self, mutator: AnchorMutator | None = None) -> None:
        self.mutator = mutator or AnchorMutator()

    # -- Public API --------------------------------------------------------

    def preflight(self, plan: ScaffoldPlan) -> None:
        """Validate *plan* against the filesystem without changing it.

        Raises:
            DestinationConflict: A destination exists or is planned twice.
            AnchorNotFound: A mutation target is missing or lacks its anchor.
            AmbiguousAnchor: A mutation anchor matches more than once.
        """
        planned: dict[Path, str] = {}
        for op in plan.operations:
            if op.destination in planned or op.destination.exists():
                raise DestinationConflict(op.destination)
            planned[op.destination] = expand(op.template.body, op.bindings)

        # Replay the mutations in memory so that several edits of one file
        # are checked against the text each of them will actually see.
        for mutation in plan.mutations:
            path = mutation.anchor.file_path
            text = planned[path] if path in planned else read_text_exact(path, mutation.anchor)
            fragment = match_newlines(expand(mutation.fragment.body, mutation.bindings), text)
            planned[path] = self.mutator.insert(text, mutation.anchor, fragment)

    def execute(self, plan: ScaffoldPlan) -> ScaffoldResult:
        """Apply *plan*: directories, then files, then anchor mutations.

        Returns:
            A ``ScaffoldResult`` listing every directory, written file and
            mutated file.
        """
        self.preflight(plan)
        result = ScaffoldResult(
            solution_root=plan.solution_root,
            units=list(plan.units),
            warnings=list(plan.warnings),
        )

        for directory in plan.directories:
            directory.mkdir(parents=True, exist_ok=True)
            result.directories.append(directory)

        for op in plan.operations:
            content = expand(op.template.body, op.bindings)
            _write_new_file(op.destination, content)
            logger.debug("Wrote %s from %s", op.destination, op.template.id)
            result.written.append(op.destination)

        for mutation in plan.mutations:
            outcome = self.mutator.mutate(
                mutation.anchor, mutation.fragment.body, mutation.bindings
            )
            result.mutated.append(outcome.path)

        logger.info(
            "Scaffolded %s: %d files written, %d files updated",
            plan.solution_root, len(result.written), len(result.mutated),
        )
        return result


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_new_file(path: Path, content: str) -> None:
    """Create parent dirs and write *content*, refusing to replace a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with path.open("x", encoding="utf-8", newline="") as fh:
            fh.write(content)
    except FileExistsError:
        raise DestinationConflict(path) from None
