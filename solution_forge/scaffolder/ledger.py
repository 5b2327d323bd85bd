"""Read-only view of the units an existing solution already contains.

There is no state file: the ledger is derived every time from the directory
naming convention (``src/<Solution>.<Unit>/``) and from the port numbers each
unit recorded in its own generated configuration.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from .errors import SolutionNotFound
from .models import UnitDescriptor, UnitKind

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".slnx"
ORCHESTRATOR_UNIT = "AppHost"
FRONTEND_UNIT = "Web"
SHARED_LIBRARY_UNIT = "ServiceDefaults"

# Names that can never be given to a new backend unit.
RESERVED_UNIT_NAMES: tuple[str, ...] = (ORCHESTRATOR_UNIT, FRONTEND_UNIT, SHARED_LIBRARY_UNIT)

_VITE_PORT = re.compile(r"\bport:\s*(\d+)")


class SolutionLedger(BaseModel):
    """Units found under one solution root."""

    solution_root: Path
    solution_name: str
    units: list[UnitDescriptor] = Field(default_factory=list)

    # -- Construction ------------------------------------------------------

    @classmethod
    def scan(cls, solution_root: str | Path) -> "SolutionLedger":
        """Walk *solution_root* and describe every unit it holds.

        Raises:
            SolutionNotFound: The root holds no ``.slnx`` manifest, or more
                than one.
        """
        root = Path(solution_root)
        solution_name = find_solution_name(root)
        units: list[UnitDescriptor] = []

        src = root / "src"
        prefix = f"{solution_name}."
        if src.is_dir():
            for project_dir in sorted(p for p in src.iterdir() if p.is_dir()):
                if not project_dir.name.startswith(prefix):
                    continue
                unit = _describe(project_dir, project_dir.name[len(prefix):])
                if unit is not None:
                    units.append(unit)

        return cls(solution_root=root, solution_name=solution_name, units=units)

    # -- Queries -----------------------------------------------------------

    def names(self) -> list[str]:
        return [u.name for u in self.units]

    def find(self, name: str) -> Optional[UnitDescriptor]:
        """Return the unit called *name* (case-insensitive), if any."""
        folded = name.casefold()
        for unit in self.units:
            if unit.name.casefold() == folded:
                return unit
        return None

    def has_unit(self, name: str) -> bool:
        return self.find(name) is not None

    def occupied_ports(self) -> set[int]:
        return {port for unit in self.units for port in unit.ports()}

    def of_kind(self, kind: UnitKind) -> list[UnitDescriptor]:
        return [u for u in self.units if u.kind is kind]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def find_solution_name(root: Path) -> str:
    """Return the stem of the single solution manifest directly under *root*."""
    if not root.is_dir():
        raise SolutionNotFound(root)
    manifests = sorted(p for p in root.glob(f"*{MANIFEST_SUFFIX}") if p.is_file())
    if len(manifests) != 1:
        raise SolutionNotFound(root, manifests)
    return manifests[0].stem


def _describe(project_dir: Path, unit_name: str) -> Optional[UnitDescriptor]:
    if not unit_name or unit_name == SHARED_LIBRARY_UNIT:
        return None

    if unit_name == FRONTEND_UNIT:
        return UnitDescriptor(
            kind=UnitKind.FRONTEND,
            name=unit_name,
            http_port=read_vite_port(project_dir / "vite.config.ts"),
        )

    if not (project_dir / f"{project_dir.name}.csproj").is_file():
        logger.debug("Skipping %s: no project file", project_dir)
        return None

    kind = UnitKind.ORCHESTRATOR if unit_name == ORCHESTRATOR_UNIT else UnitKind.BACKEND
    http_port, secure_port = read_launch_ports(project_dir / "Properties" / "launchSettings.json")
    return UnitDescriptor(
        kind=kind, name=unit_name, http_port=http_port, secure_port=secure_port
    )


def read_launch_ports(path: Path) -> tuple[Optional[int], Optional[int]]:
    """Extract ``(http, https)`` ports from a launchSettings.json file.

    Every profile's ``applicationUrl`` is inspected; the first port seen for
    each scheme wins.
    """
    try:
        # Visual Studio saves this file with a byte-order mark.
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Cannot read ports from %s: %s", path, exc)
        return None, None

    profiles = data.get("profiles", {}) if isinstance(data, dict) else None
    if not isinstance(profiles, dict):
        logger.warning("Cannot read ports from %s: 'profiles' is not an object", path)
        return None, None

    http_port: Optional[int] = None
    secure_port: Optional[int] = None
    for profile in profiles.values():
        if not isinstance(profile, dict):
            continue
        for url in str(profile.get("applicationUrl", "")).split(";"):
            try:
                parts = urlsplit(url.strip())
                port = parts.port
            except ValueError:
                continue
            if not port:
                continue
            if parts.scheme == "http" and http_port is None:
                http_port = port
            elif parts.scheme == "https" and secure_port is None:
                secure_port = port
    return http_port, secure_port


def read_vite_port(path: Path) -> Optional[int]:
    """Extract the dev-server port from a vite.config.ts file."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read ports from %s: %s", path, exc)
        return None
    match = _VITE_PORT.search(text)
    return int(match.group(1)) if match else None
