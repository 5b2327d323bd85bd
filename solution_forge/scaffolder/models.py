"""Pydantic v2 models shared by the scaffolding engine.

Covers the immutable catalog entries (templates and anchor rules), the plan
the planner hands to the executor, the descriptors the ledger derives from
an existing solution, and the result reported back to the caller.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class UnitKind(str, Enum):
    """Role a generated project plays inside a solution."""
    SOLUTION_ROOT = "solution-root"
    BACKEND = "backend-unit"
    FRONTEND = "frontend-unit"
    ORCHESTRATOR = "orchestrator"


class InsertionMode(str, Enum):
    """Where a fragment goes relative to its anchor match."""
    BEFORE = "before"
    AFTER = "after"


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------

class AnchorRule(BaseModel):
    """Catalog-side description of an anchor; ``target`` may hold placeholders."""
    model_config = ConfigDict(frozen=True)

    target: str = Field(..., description="Target file pattern, relative to the solution root")
    match: str = Field(..., min_length=1, description="Literal text that must occur exactly once")
    mode: InsertionMode = Field(default=InsertionMode.BEFORE)


class Template(BaseModel):
    """One catalog entry: a file template or an anchor fragment."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Logical id, e.g. 'service/model'")
    body: str = Field(default="", description="Placeholder-bearing text")
    destination: str = Field(default="", description="Destination pattern for file templates")
    anchor: Optional[AnchorRule] = Field(default=None, description="Insertion rule for fragments")

    @property
    def group(self) -> str:
        """Id prefix before the first ``/``."""
        return self.id.split("/", 1)[0]

    @property
    def is_fragment(self) -> bool:
        return self.anchor is not None


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------

class ScaffoldOperation(BaseModel):
    """Expand ``template`` with ``bindings`` and write it to ``destination``."""
    model_config = ConfigDict(frozen=True)

    template: Template
    destination: Path
    bindings: dict[str, str] = Field(default_factory=dict)


class Anchor(BaseModel):
    """A concrete insertion point inside one file."""
    model_config = ConfigDict(frozen=True)

    file_path: Path
    match: str = Field(..., min_length=1)
    mode: InsertionMode = InsertionMode.BEFORE


class AnchorMutation(BaseModel):
    """Insert the expanded ``fragment`` at ``anchor``."""
    model_config = ConfigDict(frozen=True)

    anchor: Anchor
    fragment: Template
    bindings: dict[str, str] = Field(default_factory=dict)


class UnitDescriptor(BaseModel):
    """A generated member of a solution and the ports it occupies."""
    model_config = ConfigDict(frozen=True)

    kind: UnitKind
    name: str
    http_port: Optional[int] = Field(default=None, ge=1, le=65535)
    secure_port: Optional[int] = Field(default=None, ge=1, le=65535)

    def ports(self) -> list[int]:
        """Return the ports this unit occupies (unset ports omitted)."""
        return [p for p in (self.http_port, self.secure_port) if p is not None]


class ScaffoldPlan(BaseModel):
    """Ordered work for the executor: directories, then files, then mutations."""
    model_config = ConfigDict(frozen=True)

    solution_root: Path
    directories: list[Path] = Field(default_factory=list)
    operations: list[ScaffoldOperation] = Field(default_factory=list)
    mutations: list[AnchorMutation] = Field(default_factory=list)
    units: list[UnitDescriptor] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def destinations(self) -> list[Path]:
        return [op.destination for op in self.operations]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class PortAllocation(BaseModel):
    """Ports handed to a new unit."""
    model_config = ConfigDict(frozen=True)

    http_port: int
    secure_port: int
    secure_fallback: bool = Field(
        default=False,
        description="True when http_port + offset collided and a random search was used",
    )


class MutationResult(BaseModel):
    """Outcome of one anchor insertion."""
    model_config = ConfigDict(frozen=True)

    path: Path
    offset: int = Field(..., ge=0, description="Character offset where the fragment was inserted")
    inserted: str


class ScaffoldResult(BaseModel):
    """Everything a successful batch created or changed."""

    solution_root: Path
    directories: list[Path] = Field(default_factory=list)
    written: list[Path] = Field(default_factory=list)
    mutated: list[Path] = Field(default_factory=list)
    units: list[UnitDescriptor] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    dry_run: bool = False

    def touched(self) -> list[Path]:
        """Every file written or mutated, in execution order."""
        return [*self.written, *self.mutated]
