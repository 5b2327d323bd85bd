"""Shared pytest fixtures for the solution-forge test suite.

Provides reusable fixtures for:
- Temporary output directories
- A seeded SolutionGenerator
- A freshly generated ``Acme`` solution on disk
- A tiny hand-written template catalog for engine-level tests
"""

from __future__ import annotations

import random
import textwrap
from pathlib import Path

import pytest

from solution_forge.config import ForgeConfig
from solution_forge.scaffolder import SolutionGenerator, TemplateCatalog


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Parent directory new solutions are generated into (auto-cleanup)."""
    path = tmp_path / "output"
    path.mkdir()
    yield path


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

@pytest.fixture
def forge_config() -> ForgeConfig:
    """Default configuration with a fixed port seed."""
    return ForgeConfig(port_seed=1234)


@pytest.fixture
def generator(forge_config: ForgeConfig) -> SolutionGenerator:
    """SolutionGenerator over the packaged catalog with a seeded RNG."""
    return SolutionGenerator(forge_config, rng=random.Random(1234))


@pytest.fixture
def acme_root(generator: SolutionGenerator, output_dir: Path) -> Path:
    """A complete ``Acme`` solution written to disk with default ports."""
    descriptor = generator.describe_solution("Acme", output_dir)
    result = generator.create_solution(descriptor)
    return result.solution_root


def snapshot(root: Path) -> dict[str, bytes]:
    """Return ``{relative path: bytes}`` for every file under *root*."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def take_snapshot():
    """Expose ``snapshot`` to tests without importing conftest."""
    return snapshot


# ---------------------------------------------------------------------------
# Mini catalog
# ---------------------------------------------------------------------------

MINI_MANIFEST = textwrap.dedent("""\
    version: 1
    templates:
      - id: solution/manifest
        source: manifest.txt
        destination: "{{SOLUTION_NAME}}.slnx"
      - id: service/readme
        source: readme.txt
        destination: "src/{{PROJECT_NAME}}/README.md"
    directories:
      service: ["src/{{PROJECT_NAME}}/empty"]
    fragments:
      - id: fragment/solution-project
        source: member.txt
        anchor:
          target: "{{SOLUTION_NAME}}.slnx"
          match: "</Solution>"
          mode: before
      - id: fragment/apphost-reference
        source: reference.txt
        anchor:
          target: host.txt
          match: "# references"
          mode: after
      - id: fragment/apphost-registration
        source: registration.txt
        anchor:
          target: host.txt
          match: "# run"
          mode: before
""")


@pytest.fixture
def mini_template_dir(tmp_path: Path) -> Path:
    """A minimal on-disk catalog: a manifest, one service file and three fragments."""
    root = tmp_path / "mini-templates"
    root.mkdir()
    (root / "catalog.yaml").write_text(MINI_MANIFEST, encoding="utf-8")
    (root / "manifest.txt").write_text("<Solution>\n</Solution>\n", encoding="utf-8")
    (root / "readme.txt").write_text("# {{PROJECT_NAME}} on {{HTTP_PORT}}\n", encoding="utf-8")
    (root / "member.txt").write_text("  <Project Path=\"{{PROJECT_NAME}}\" />\n", encoding="utf-8")
    (root / "reference.txt").write_text("\nref {{PROJECT_NAME}}", encoding="utf-8")
    (root / "registration.txt").write_text("register {{SERVICE_VAR}}\n", encoding="utf-8")
    return root


@pytest.fixture
def mini_catalog(mini_template_dir: Path) -> TemplateCatalog:
    return TemplateCatalog(mini_template_dir)
