"""Tests for the solution ledger (solution_forge.scaffolder.ledger).

Covers:
- Scanning a hand-built solution tree
- Unit kinds and ports recovered from launchSettings.json / vite.config.ts
- Manifest discovery errors
- Tolerance of unreadable configuration files
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from solution_forge.scaffolder.errors import SolutionNotFound
from solution_forge.scaffolder.ledger import (
    SolutionLedger,
    find_solution_name,
    read_launch_ports,
    read_vite_port,
)
from solution_forge.scaffolder.models import UnitKind


pytestmark = pytest.mark.unit


def _launch_settings(http: int, https: int) -> str:
    return json.dumps({
        "profiles": {
            "http": {"applicationUrl": f"http://localhost:{http}"},
            "https": {"applicationUrl": f"https://localhost:{https};http://localhost:{http}"},
        }
    })


def _project(root: Path, solution: str, unit: str, http: int, https: int) -> Path:
    project_dir = root / "src" / f"{solution}.{unit}"
    (project_dir / "Properties").mkdir(parents=True)
    (project_dir / f"{solution}.{unit}.csproj").write_text("<Project />\n", encoding="utf-8")
    (project_dir / "Properties" / "launchSettings.json").write_text(
        _launch_settings(http, https), encoding="utf-8"
    )
    return project_dir


@pytest.fixture
def solution_tree(tmp_path: Path) -> Path:
    """A hand-built ``Shop`` solution with every kind of unit."""
    root = tmp_path / "Shop"
    root.mkdir()
    (root / "Shop.slnx").write_text("<Solution>\n</Solution>\n", encoding="utf-8")
    _project(root, "Shop", "Api", 5080, 7080)
    _project(root, "Shop", "AppHost", 15080, 17080)
    _project(root, "Shop", "Orders", 5123, 6123)
    (root / "src" / "Shop.ServiceDefaults").mkdir()
    web = root / "src" / "Shop.Web"
    web.mkdir()
    (web / "vite.config.ts").write_text(
        "export default defineConfig({\n  server: {\n    port: 5173,\n  },\n})\n",
        encoding="utf-8",
    )
    (root / "src" / "Other.Thing").mkdir()
    (root / "src" / "Shop.Scratch").mkdir()
    return root


class TestScan:
    def test_units_found(self, solution_tree: Path):
        ledger = SolutionLedger.scan(solution_tree)
        assert ledger.solution_name == "Shop"
        assert sorted(ledger.names()) == ["Api", "AppHost", "Orders", "Web"]

    def test_kinds(self, solution_tree: Path):
        ledger = SolutionLedger.scan(solution_tree)
        assert ledger.find("AppHost").kind is UnitKind.ORCHESTRATOR
        assert ledger.find("Web").kind is UnitKind.FRONTEND
        assert [u.name for u in ledger.of_kind(UnitKind.BACKEND)] == ["Api", "Orders"]

    def test_ports(self, solution_tree: Path):
        ledger = SolutionLedger.scan(solution_tree)
        orders = ledger.find("Orders")
        assert (orders.http_port, orders.secure_port) == (5123, 6123)
        web = ledger.find("Web")
        assert (web.http_port, web.secure_port) == (5173, None)
        assert ledger.occupied_ports() == {
            5080, 7080, 15080, 17080, 5123, 6123, 5173,
        }

    def test_find_is_case_insensitive(self, solution_tree: Path):
        ledger = SolutionLedger.scan(solution_tree)
        assert ledger.has_unit("orders")
        assert ledger.find("ORDERS").name == "Orders"
        assert ledger.find("Payments") is None

    def test_shared_library_is_not_a_unit(self, solution_tree: Path):
        assert not SolutionLedger.scan(solution_tree).has_unit("ServiceDefaults")

    def test_byte_order_mark_keeps_ports(self, solution_tree: Path):
        path = solution_tree / "src" / "Shop.Orders" / "Properties" / "launchSettings.json"
        path.write_bytes(b"\xef\xbb\xbf" + path.read_bytes())
        orders = SolutionLedger.scan(solution_tree).find("Orders")
        assert (orders.http_port, orders.secure_port) == (5123, 6123)

    def test_profiles_list_does_not_break_scan(self, solution_tree: Path):
        path = solution_tree / "src" / "Shop.Orders" / "Properties" / "launchSettings.json"
        path.write_text('{"profiles": []}', encoding="utf-8")
        ledger = SolutionLedger.scan(solution_tree)
        assert ledger.find("Orders").http_port is None
        assert ledger.find("Api").http_port == 5080

    def test_solution_without_src(self, tmp_path: Path):
        (tmp_path / "Empty.slnx").write_text("<Solution />", encoding="utf-8")
        ledger = SolutionLedger.scan(tmp_path)
        assert ledger.solution_name == "Empty"
        assert ledger.units == []


class TestFindSolutionName:
    def test_missing_root(self, tmp_path: Path):
        with pytest.raises(SolutionNotFound):
            find_solution_name(tmp_path / "absent")

    def test_no_manifest(self, tmp_path: Path):
        with pytest.raises(SolutionNotFound, match="No .slnx"):
            find_solution_name(tmp_path)

    def test_multiple_manifests(self, tmp_path: Path):
        (tmp_path / "A.slnx").write_text("", encoding="utf-8")
        (tmp_path / "B.slnx").write_text("", encoding="utf-8")
        with pytest.raises(SolutionNotFound, match="Multiple") as exc_info:
            find_solution_name(tmp_path)
        assert [p.name for p in exc_info.value.candidates] == ["A.slnx", "B.slnx"]


class TestReadPorts:
    def test_launch_ports(self, tmp_path: Path):
        path = tmp_path / "launchSettings.json"
        path.write_text(_launch_settings(5100, 6100), encoding="utf-8")
        assert read_launch_ports(path) == (5100, 6100)

    def test_launch_ports_malformed(self, tmp_path: Path, caplog):
        path = tmp_path / "launchSettings.json"
        path.write_text("{ not json", encoding="utf-8")
        assert read_launch_ports(path) == (None, None)
        assert "Cannot read ports" in caplog.text

    def test_launch_ports_with_byte_order_mark(self, tmp_path: Path):
        path = tmp_path / "launchSettings.json"
        path.write_bytes(b"\xef\xbb\xbf" + _launch_settings(5100, 6100).encode("utf-8"))
        assert read_launch_ports(path) == (5100, 6100)

    @pytest.mark.parametrize("body", ['{"profiles": []}', '{"profiles": "http"}', "[1, 2]"])
    def test_launch_ports_unexpected_shape(self, tmp_path: Path, caplog, body: str):
        path = tmp_path / "launchSettings.json"
        path.write_text(body, encoding="utf-8")
        assert read_launch_ports(path) == (None, None)
        assert "Cannot read ports" in caplog.text

    def test_launch_ports_missing(self, tmp_path: Path):
        assert read_launch_ports(tmp_path / "nope.json") == (None, None)

    def test_launch_ports_ignores_portless_urls(self, tmp_path: Path):
        path = tmp_path / "launchSettings.json"
        path.write_text(
            json.dumps({"profiles": {"p": {"applicationUrl": "http://localhost;https://localhost:7001"}}}),
            encoding="utf-8",
        )
        assert read_launch_ports(path) == (None, 7001)

    def test_vite_port(self, tmp_path: Path):
        path = tmp_path / "vite.config.ts"
        path.write_text("server: {\n    port: 3000,\n}", encoding="utf-8")
        assert read_vite_port(path) == 3000

    def test_vite_port_with_byte_order_mark(self, tmp_path: Path):
        path = tmp_path / "vite.config.ts"
        path.write_bytes(b"\xef\xbb\xbfserver: {\n    port: 3000,\n}")
        assert read_vite_port(path) == 3000

    def test_vite_port_absent(self, tmp_path: Path):
        path = tmp_path / "vite.config.ts"
        path.write_text("export default {}", encoding="utf-8")
        assert read_vite_port(path) is None
