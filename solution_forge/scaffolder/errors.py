"""Named failures raised by the scaffolding engine.

Every error carries a ``stage`` (``planning``, ``execution`` or ``mutation``)
so that front ends can tell a rejected request apart from a half-applied
batch, and an ``exit_code`` they may use when translating it for a shell.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ScaffoldError(Exception):
    """Base class for all engine failures."""

    stage = "planning"
    exit_code = 2


# ---------------------------------------------------------------------------
# Planning errors -- raised before anything touches the filesystem
# ---------------------------------------------------------------------------


class CatalogError(ScaffoldError):
    """Raised when the template manifest or one of its sources is unusable."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class TemplateNotFound(ScaffoldError):
    """Raised when a template id is not present in the catalog."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Template not found in catalog: {template_id!r}")


class InvalidUnitName(ScaffoldError):
    """Raised when a unit name cannot be used as a project/class name."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Invalid unit name {name!r}: {reason}")


class DuplicateUnitName(ScaffoldError):
    """Raised when a unit name clashes (case-insensitively) with an existing one."""

    def __init__(self, name: str, existing: str) -> None:
        self.name = name
        self.existing = existing
        super().__init__(
            f"Unit {name!r} already exists in the solution (as {existing!r})"
        )


class UnresolvedPlaceholder(ScaffoldError):
    """Raised when a destination path still holds placeholders after expansion."""

    def __init__(self, template_id: str, pattern: str, names: Sequence[str]) -> None:
        self.template_id = template_id
        self.pattern = pattern
        self.names = list(names)
        super().__init__(
            f"Destination for {template_id!r} has unbound placeholders "
            f"{', '.join(self.names)}: {pattern}"
        )


class PortConflict(ScaffoldError):
    """Raised when a requested port is already taken."""

    def __init__(self, port: int, owner: str) -> None:
        self.port = port
        self.owner = owner
        super().__init__(f"Port {port} is already used by {owner}")


class PortRangeExhausted(ScaffoldError):
    """Raised when no free port could be drawn within the attempt budget."""

    def __init__(self, low: int, high: int, attempts: int) -> None:
        self.low = low
        self.high = high
        self.attempts = attempts
        super().__init__(
            f"No free port found in {low}-{high} after {attempts} attempts"
        )


class SolutionNotFound(ScaffoldError):
    """Raised when a directory does not hold exactly one solution manifest."""

    def __init__(self, root: str | Path, candidates: Sequence[Path] = ()) -> None:
        self.root = Path(root)
        self.candidates = list(candidates)
        if self.candidates:
            names = ", ".join(p.name for p in self.candidates)
            message = f"Multiple solution manifests in {self.root}: {names}"
        else:
            message = f"No .slnx solution manifest found in {self.root}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Execution errors
# ---------------------------------------------------------------------------


class DestinationConflict(ScaffoldError):
    """Raised when a file the plan would create already exists."""

    stage = "execution"
    exit_code = 3

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Refusing to overwrite existing file: {self.path}")


# ---------------------------------------------------------------------------
# Mutation errors
# ---------------------------------------------------------------------------


class AnchorNotFound(ScaffoldError):
    """Raised when an anchor pattern does not occur in its target file."""

    stage = "mutation"
    exit_code = 4

    def __init__(self, path: str | Path, pattern: str, reason: str = "") -> None:
        self.path = Path(path)
        self.pattern = pattern
        detail = reason or "pattern not found"
        super().__init__(f"Anchor {pattern!r} in {self.path}: {detail}")


class AmbiguousAnchor(ScaffoldError):
    """Raised when an anchor pattern occurs more than once."""

    stage = "mutation"
    exit_code = 4

    def __init__(self, path: str | Path, pattern: str, count: int) -> None:
        self.path = Path(path)
        self.pattern = pattern
        self.count = count
        super().__init__(
            f"Anchor {pattern!r} matches {count} times in {self.path}; expected exactly one"
        )
