"""Main scaffolding orchestrator.

Wires the catalog, ledger, port allocator, planner and executor together for
the two workflows the command line exposes: creating a new solution and
adding a backend service to one that already exists.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional

from solution_forge.config import ForgeConfig

from .executor import ScaffoldExecutor
from .ledger import SolutionLedger
from .models import ScaffoldPlan, ScaffoldResult, UnitDescriptor, UnitKind
from .planner import (
    ScaffoldPlanner,
    SolutionDescriptor,
    check_service_variable,
    check_unique_name,
    validate_unit_name,
)
from .ports import PortAllocator
from .templates import TemplateCatalog, default_catalog

logger = logging.getLogger(__name__)


class SolutionGenerator:
    """Creates solutions and grafts services into existing ones.

    Given a ``ForgeConfig``, the generator can:
    - plan or create a new solution (service tier, orchestrator, frontend)
    - plan or add a backend service to a previously generated solution
    - describe the units an existing solution contains
    """

    def __init__(
        self,
        config: ForgeConfig | None = None,
        catalog: TemplateCatalog | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or ForgeConfig()
        if catalog is None:
            catalog = (
                TemplateCatalog(self.config.templates_dir)
                if self.config.templates_dir
                else default_catalog()
            )
        self.catalog = catalog
        self.planner = ScaffoldPlanner(self.catalog)
        self.executor = ScaffoldExecutor()
        self.allocator = PortAllocator(
            self.config.ports, rng or random.Random(self.config.port_seed)
        )

    # -- New solution ------------------------------------------------------

    def describe_solution(
        self,
        name: str,
        root: str | Path,
        *,
        api_http_port: Optional[int] = None,
        api_https_port: Optional[int] = None,
        web_port: Optional[int] = None,
        service_name: Optional[str] = None,
    ) -> SolutionDescriptor:
        """Build a ``SolutionDescriptor``, filling unset ports from the config."""
        defaults = self.config.defaults
        return SolutionDescriptor(
            name=name,
            root=Path(root),
            api_http_port=api_http_port or defaults.api_http,
            api_https_port=api_https_port or defaults.api_https,
            web_port=web_port or defaults.web,
            apphost_http_port=defaults.apphost_http,
            apphost_https_port=defaults.apphost_https,
            service_name=service_name or self.config.default_service_name,
        )

    def plan_solution(self, descriptor: SolutionDescriptor) -> ScaffoldPlan:
        """Plan a new solution and check it against the disk."""
        plan = self.planner.plan_new_solution(descriptor)
        self.executor.preflight(plan)
        return plan

    def create_solution(
        self, descriptor: SolutionDescriptor, *, dry_run: bool = False
    ) -> ScaffoldResult:
        """Generate the complete solution described by *descriptor*.

        Returns:
            The result; with ``dry_run`` nothing is written and the result
            lists what would have been.
        """
        plan = self.plan_solution(descriptor)
        if dry_run:
            return _dry_run_result(plan)
        logger.info("Creating solution %s in %s", descriptor.name, plan.solution_root)
        return self.executor.execute(plan)

    # -- Existing solution -------------------------------------------------

    def scan(self, solution_root: str | Path) -> SolutionLedger:
        """Describe the units of the solution at *solution_root*."""
        return SolutionLedger.scan(solution_root)

    def plan_service(
        self,
        solution_root: str | Path,
        name: str,
        *,
        http_port: Optional[int] = None,
        https_port: Optional[int] = None,
    ) -> ScaffoldPlan:
        """Plan a new backend service named *name*.

        Name checks run before port allocation so a duplicate is reported as
        such even when the port range is full.
        """
        ledger = SolutionLedger.scan(solution_root)
        validate_unit_name(name)
        check_unique_name(name, ledger.names())
        check_service_variable(name)

        allocation = self.allocator.allocate(ledger.units, http_port, https_port)
        unit = UnitDescriptor(
            kind=UnitKind.BACKEND,
            name=name,
            http_port=allocation.http_port,
            secure_port=allocation.secure_port,
        )
        plan = self.planner.plan_add_unit(unit, ledger)
        if allocation.secure_fallback:
            notice = (
                f"Secure port {allocation.http_port + self.config.ports.secure_offset} "
                f"was taken; using {allocation.secure_port} instead."
            )
            plan = plan.model_copy(update={"warnings": [notice, *plan.warnings]})
        self.executor.preflight(plan)
        return plan

    def add_service(
        self,
        solution_root: str | Path,
        name: str,
        *,
        http_port: Optional[int] = None,
        https_port: Optional[int] = None,
        dry_run: bool = False,
    ) -> ScaffoldResult:
        """Add backend service *name* to the solution at *solution_root*."""
        plan = self.plan_service(
            solution_root, name, http_port=http_port, https_port=https_port
        )
        if dry_run:
            return _dry_run_result(plan)
        logger.info("Adding service %s to %s", name, plan.solution_root)
        return self.executor.execute(plan)


def _dry_run_result(plan: ScaffoldPlan) -> ScaffoldResult:
    return ScaffoldResult(
        solution_root=plan.solution_root,
        directories=list(plan.directories),
        written=plan.destinations(),
        mutated=[m.anchor.file_path for m in plan.mutations],
        units=list(plan.units),
        warnings=list(plan.warnings),
        dry_run=True,
    )
