"""solution-forge scaffolder -- expands solutions and grafts services into them.

This package turns a solution descriptor into an ordered plan of template
expansions and anchor edits, and applies that plan to disk.  It generates a
.NET Aspire orchestrator, Dapr-enabled minimal-API services and a React 19 +
Vite + Zustand frontend from the packaged template catalog.

Quick usage::

    from solution_forge.scaffolder import SolutionGenerator

    generator = SolutionGenerator()
    descriptor = generator.describe_solution("Acme", "/tmp/output")
    generator.create_solution(descriptor)
    generator.add_service("/tmp/output/Acme", "Orders")
"""

from solution_forge.scaffolder.anchors import AnchorMutator
from solution_forge.scaffolder.errors import (
    AmbiguousAnchor,
    AnchorNotFound,
    CatalogError,
    DestinationConflict,
    DuplicateUnitName,
    InvalidUnitName,
    PortConflict,
    PortRangeExhausted,
    ScaffoldError,
    SolutionNotFound,
    TemplateNotFound,
    UnresolvedPlaceholder,
)
from solution_forge.scaffolder.executor import ScaffoldExecutor
from solution_forge.scaffolder.expander import expand, find_placeholders
from solution_forge.scaffolder.generator import SolutionGenerator
from solution_forge.scaffolder.ledger import SolutionLedger
from solution_forge.scaffolder.planner import ScaffoldPlanner, SolutionDescriptor
from solution_forge.scaffolder.ports import PortAllocator
from solution_forge.scaffolder.templates import TemplateCatalog

__all__ = [
    "AmbiguousAnchor",
    "AnchorMutator",
    "AnchorNotFound",
    "CatalogError",
    "DestinationConflict",
    "DuplicateUnitName",
    "InvalidUnitName",
    "PortAllocator",
    "PortConflict",
    "PortRangeExhausted",
    "ScaffoldError",
    "ScaffoldExecutor",
    "ScaffoldPlanner",
    "SolutionDescriptor",
    "SolutionGenerator",
    "SolutionLedger",
    "SolutionNotFound",
    "TemplateCatalog",
    "TemplateNotFound",
    "UnresolvedPlaceholder",
    "expand",
    "find_placeholders",
]
