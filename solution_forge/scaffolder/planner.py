"""Turns solution and unit descriptors into ordered scaffold plans.

The planner owns every decision that can be made without touching the disk:
name validation, binding computation, destination expansion and operation
ordering.  A request it rejects has not written a single byte.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from .errors import DuplicateUnitName, InvalidUnitName, PortConflict, UnresolvedPlaceholder
from .expander import expand, find_placeholders
from .ledger import FRONTEND_UNIT, ORCHESTRATOR_UNIT, RESERVED_UNIT_NAMES, SolutionLedger
from .models import (
    Anchor,
    AnchorMutation,
    ScaffoldOperation,
    ScaffoldPlan,
    Template,
    UnitDescriptor,
    UnitKind,
)
from .templates import TemplateCatalog

_UNIT_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")

# Lower-cased unit names become AppHost.cs locals; these would not compile.
_APPHOST_LOCALS: frozenset[str] = frozenset({"builder", "api", "web"})
_CSHARP_KEYWORDS: frozenset[str] = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch", "char",
    "checked", "class", "const", "continue", "decimal", "default", "delegate",
    "do", "double", "else", "enum", "event", "explicit", "extern", "false",
    "finally", "fixed", "float", "for", "foreach", "goto", "if", "implicit",
    "in", "int", "interface", "internal", "is", "lock", "long", "namespace",
    "new", "null", "object", "operator", "out", "override", "params", "private",
    "protected", "public", "readonly", "ref", "return", "sbyte", "sealed",
    "short", "sizeof", "stackalloc", "static", "string", "struct", "switch",
    "this", "throw", "true", "try", "typeof", "uint", "ulong", "unchecked",
    "unsafe", "ushort", "using", "virtual", "void", "volatile", "while",
})

INITIAL_UNIT_NAME = "Api"

NEW_SOLUTION_GROUPS: tuple[str, ...] = ("solution", "servicedefaults", "service", "apphost", "web")

# Fragments that graft a backend unit into an existing solution.
MEMBERSHIP_FRAGMENTS: tuple[str, ...] = ("fragment/solution-project", "fragment/apphost-reference")
REGISTRATION_FRAGMENTS: tuple[str, ...] = ("fragment/apphost-registration",)


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

class SolutionDescriptor(BaseModel):
    """What the caller asks for when creating a new solution."""

    name: str = Field(..., description="Solution name, e.g. 'Acme'")
    root: Path = Field(..., description="Parent directory; the solution goes to root/name")
    api_http_port: int = Field(default=5080, ge=1, le=65535)
    api_https_port: int = Field(default=7080, ge=1, le=65535)
    web_port: int = Field(default=5173, ge=1, le=65535)
    apphost_http_port: int = Field(default=15080, ge=1, le=65535)
    apphost_https_port: int = Field(default=17080, ge=1, le=65535)
    service_name: str = Field(default="Weather", description="Domain service of the Api unit")

    @property
    def solution_root(self) -> Path:
        return Path(self.root) / self.name


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

class ScaffoldPlanner:
    """Builds ``ScaffoldPlan`` objects from the template catalog."""

    def __init__(self, catalog: TemplateCatalog) -> None:
        self.catalog = catalog

    # -- Public API --------------------------------------------------------

    def plan_new_solution(self, descriptor: SolutionDescriptor) -> ScaffoldPlan:
        """Plan every file of a fresh solution.

        The initial backend unit is written from the same ``service``
        templates the add-unit path uses and joined to the solution manifest
        and the orchestrator project through the same anchor fragments.
        """
        validate_unit_name(descriptor.name)
        validate_unit_name(descriptor.service_name)
        root = descriptor.solution_root.resolve()

        units = [
            UnitDescriptor(kind=UnitKind.SOLUTION_ROOT, name=descriptor.name),
            UnitDescriptor(
                kind=UnitKind.BACKEND,
                name=INITIAL_UNIT_NAME,
                http_port=descriptor.api_http_port,
                secure_port=descriptor.api_https_port,
            ),
            UnitDescriptor(
                kind=UnitKind.ORCHESTRATOR,
                name=ORCHESTRATOR_UNIT,
                http_port=descriptor.apphost_http_port,
                secure_port=descriptor.apphost_https_port,
            ),
            UnitDescriptor(
                kind=UnitKind.FRONTEND, name=FRONTEND_UNIT, http_port=descriptor.web_port
            ),
        ]
        check_distinct_ports(units)

        base = solution_bindings(descriptor.name)
        base.update({
            "API_HTTP_PORT": str(descriptor.api_http_port),
            "API_HTTPS_PORT": str(descriptor.api_https_port),
            "WEB_PORT": str(descriptor.web_port),
            "APPHOST_HTTP_PORT": str(descriptor.apphost_http_port),
            "APPHOST_HTTPS_PORT": str(descriptor.apphost_https_port),
            # The frontend ships a page for the initial service.
            "SERVICE_NAME": descriptor.service_name,
            "SERVICE_NAME_LOWER": descriptor.service_name.lower(),
        })
        service = {
            **base,
            **unit_bindings(descriptor.name, units[1], service_name=descriptor.service_name),
        }

        directories: list[Path] = []
        operations: list[ScaffoldOperation] = []
        for group in NEW_SOLUTION_GROUPS:
            bindings = service if group == "service" else base
            directories.extend(self._directories(group, root, bindings))
            operations.extend(self._operations(group, root, bindings))

        mutations = self._mutations(MEMBERSHIP_FRAGMENTS, root, service)
        return ScaffoldPlan(
            solution_root=root,
            directories=directories,
            operations=operations,
            mutations=mutations,
            units=units,
        )

    def plan_add_unit(
        self,
        descriptor: UnitDescriptor,
        ledger: SolutionLedger,
    ) -> ScaffoldPlan:
        """Plan a new backend unit inside the solution *ledger* describes.

        Raises:
            InvalidUnitName: The name is not a usable identifier.
            DuplicateUnitName: The name is taken or reserved.
            PortConflict: One of the descriptor's ports is already in use.
        """
        if descriptor.kind is not UnitKind.BACKEND:
            raise ValueError(f"Only backend units can be added, got {descriptor.kind.value}")
        validate_unit_name(descriptor.name)
        check_unique_name(descriptor.name, ledger.names())
        check_service_variable(descriptor.name)
        check_distinct_ports([*ledger.units, descriptor])

        root = Path(ledger.solution_root).resolve()
        bindings = {
            **solution_bindings(ledger.solution_name),
            **unit_bindings(ledger.solution_name, descriptor),
        }

        mutations = self._mutations(
            (*MEMBERSHIP_FRAGMENTS, *REGISTRATION_FRAGMENTS), root, bindings
        )
        return ScaffoldPlan(
            solution_root=root,
            directories=self._directories("service", root, bindings),
            operations=self._operations("service", root, bindings),
            mutations=mutations,
            units=[descriptor],
            warnings=[
                f"Review AppHost.cs and add .WithReference({bindings['SERVICE_VAR']}) "
                "wherever other resources need to call the new service."
            ],
        )

    # -- Internals ---------------------------------------------------------

    def _operations(
        self, group: str, root: Path, bindings: dict[str, str]
    ) -> list[ScaffoldOperation]:
        return [
            ScaffoldOperation(
                template=template,
                destination=root / resolve_pattern(template, template.destination, bindings),
                bindings=dict(bindings),
            )
            for template in self.catalog.group(group)
        ]

    def _directories(self, group: str, root: Path, bindings: dict[str, str]) -> list[Path]:
        directories = []
        for pattern in self.catalog.directories(group):
            expanded = expand(pattern, bindings)
            unresolved = find_placeholders(expanded)
            if unresolved:
                raise UnresolvedPlaceholder(f"{group}/<directory>", expanded, unresolved)
            directories.append(root / expanded)
        return directories

    def _mutations(
        self, fragment_ids: Iterable[str], root: Path, bindings: dict[str, str]
    ) -> list[AnchorMutation]:
        mutations = []
        for fragment_id in fragment_ids:
            fragment = self.catalog.resolve(fragment_id)
            rule = fragment.anchor
            if rule is None:
                raise ValueError(f"{fragment_id!r} is a file template, not a fragment")
            anchor = Anchor(
                file_path=root / resolve_pattern(fragment, rule.target, bindings),
                match=rule.match,
                mode=rule.mode,
            )
            mutations.append(
                AnchorMutation(anchor=anchor, fragment=fragment, bindings=dict(bindings))
            )
        return mutations


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------

def solution_bindings(solution_name: str) -> dict[str, str]:
    """Bindings shared by every template of one solution."""
    return {
        "SOLUTION_NAME": solution_name,
        "SOLUTION_NAME_LOWER": solution_name.lower(),
    }


def unit_bindings(
    solution_name: str,
    unit: UnitDescriptor,
    service_name: Optional[str] = None,
) -> dict[str, str]:
    """Bindings for one backend unit.

    The domain service name defaults to the unit name; the initial ``Api``
    unit of a new solution hosts a differently-named service.
    """
    service = service_name or unit.name
    project = f"{solution_name}.{unit.name}"
    return {
        "UNIT_NAME": unit.name,
        "PROJECT_NAME": project,
        "PROJECT_CLASS": project.replace(".", "_"),
        "SERVICE_NAME": service,
        "SERVICE_NAME_LOWER": service.lower(),
        "SERVICE_VAR": unit.name.lower(),
        "HTTP_PORT": "" if unit.http_port is None else str(unit.http_port),
        "HTTPS_PORT": "" if unit.secure_port is None else str(unit.secure_port),
    }


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def validate_unit_name(name: str) -> None:
    """Reject names that cannot become a C# namespace segment and class prefix."""
    if not name:
        raise InvalidUnitName(name, "name is empty")
    if not _UNIT_NAME.match(name):
        raise InvalidUnitName(
            name, "use letters and digits only, starting with a letter (e.g. 'Orders')"
        )


def check_unique_name(name: str, existing: Iterable[str]) -> None:
    """Raise ``DuplicateUnitName`` if *name* matches an existing or reserved name."""
    folded = name.casefold()
    for other in (*existing, *RESERVED_UNIT_NAMES):
        if other.casefold() == folded:
            raise DuplicateUnitName(name, other)


def check_service_variable(name: str) -> None:
    """Reject names whose AppHost.cs local would clash with a keyword or an existing local."""
    variable = name.lower()
    if variable in _APPHOST_LOCALS:
        raise InvalidUnitName(name, f"'{variable}' is already declared in AppHost.cs")
    if variable in _CSHARP_KEYWORDS:
        raise InvalidUnitName(name, f"'{variable}' is a C# keyword")


def check_distinct_ports(units: Iterable[UnitDescriptor]) -> None:
    """Raise ``PortConflict`` if two units (or one unit twice) share a port."""
    owners: dict[int, str] = {}
    for unit in units:
        for port in unit.ports():
            if port in owners:
                raise PortConflict(port, owners[port])
            owners[port] = unit.name


def resolve_pattern(template: Template, pattern: str, bindings: dict[str, str]) -> str:
    """Expand a destination pattern and insist every token was bound."""
    expanded = expand(pattern, bindings)
    unresolved = find_placeholders(expanded)
    if unresolved:
        raise UnresolvedPlaceholder(template.id, expanded, unresolved)
    return expanded
