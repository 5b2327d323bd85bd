"""Read-only template catalog for solution scaffolding.

Provides the TemplateCatalog class which loads ``catalog.yaml`` from the
``solution_forge/scaffolder/templates/`` directory, reads every template
source it names, and serves the resulting immutable ``Template`` objects by
id or by group.  The catalog is loaded once at construction; nothing is
rescanned at request time.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterator

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import CatalogError, TemplateNotFound
from .models import AnchorRule, Template


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

MANIFEST_NAME = "catalog.yaml"


# ---------------------------------------------------------------------------
# Manifest schema
# ---------------------------------------------------------------------------

class _TemplateEntry(BaseModel):
    id: str = Field(..., pattern=r"^[a-z0-9-]+/[a-z0-9-]+$")
    source: str
    destination: str = Field(..., min_length=1)


class _FragmentEntry(BaseModel):
    id: str = Field(..., pattern=r"^[a-z0-9-]+/[a-z0-9-]+$")
    source: str
    anchor: AnchorRule


class _Manifest(BaseModel):
    version: int = Field(..., ge=1)
    templates: list[_TemplateEntry] = Field(default_factory=list)
    directories: dict[str, list[str]] = Field(default_factory=dict)
    fragments: list[_FragmentEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# TemplateCatalog
# ---------------------------------------------------------------------------


class TemplateCatalog:
    """Registry mapping template ids to ``Template`` objects.

    File templates keep their manifest order, which is also the order the
    planner emits them in.  Fragments are served by the same ``resolve``
    call but never appear in ``group()``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        manifest = self._read_manifest()
        self.version = manifest.version
        self._templates: dict[str, Template] = {}
        self._directories = {
            group: list(patterns) for group, patterns in manifest.directories.items()
        }

        for entry in manifest.templates:
            self._add(Template(
                id=entry.id,
                body=self._read_source(entry.source),
                destination=entry.destination,
            ))
        for entry in manifest.fragments:
            self._add(Template(
                id=entry.id,
                body=self._read_source(entry.source),
                anchor=entry.anchor,
            ))

    # -- Lookup ------------------------------------------------------------

    def resolve(self, template_id: str) -> Template:
        """Return the template registered under *template_id*.

        Raises:
            TemplateNotFound: If the id is not in the catalog.
        """
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFound(template_id) from None

    def group(self, name: str) -> list[Template]:
        """Return the file templates of group *name*, in manifest order."""
        return [
            t for t in self._templates.values()
            if t.group == name and not t.is_fragment
        ]

    def directories(self, name: str) -> list[str]:
        """Return the directory patterns group *name* defines."""
        return list(self._directories.get(name, []))

    def ids(self) -> list[str]:
        """Return every template id, file templates first."""
        return list(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    # -- Loading -----------------------------------------------------------

    def _read_manifest(self) -> _Manifest:
        path = self.template_dir / MANIFEST_NAME
        if not path.is_file():
            raise CatalogError(f"Template manifest not found: {path}", path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise CatalogError(f"Template manifest is not valid YAML: {exc}", path) from exc
        if not isinstance(raw, dict):
            raise CatalogError(f"Template manifest must be a mapping: {path}", path)
        try:
            return _Manifest.model_validate(raw)
        except ValidationError as exc:
            raise CatalogError(f"Malformed template manifest {path}: {exc}", path) from exc

    def _read_source(self, source: str) -> str:
        path = self.template_dir / source
        if not path.is_file():
            raise CatalogError(f"Template source not found: {path}", path)
        # newline="" keeps the source's line endings byte-for-byte.
        with path.open(encoding="utf-8", newline="") as fh:
            return fh.read()

    def _add(self, template: Template) -> None:
        if template.id in self._templates:
            raise CatalogError(f"Duplicate template id in manifest: {template.id!r}")
        self._templates[template.id] = template


@lru_cache(maxsize=None)
def default_catalog() -> TemplateCatalog:
    """Return the packaged catalog, loaded once per process."""
    return TemplateCatalog()
