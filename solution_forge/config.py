"""Settings for solution-forge.

Covers the port range new services draw from, the fixed ports of a freshly
created solution, where templates are loaded from and how chatty the log is.
A ``--config`` JSON file or the ``FORGE_*`` environment variables supply
them; the CLI passes the result to the generator.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class PortRangeConfig(BaseModel):
    """Range new backend units draw their HTTP port from.

    The secure port is ``http + secure_offset``; the defaults reproduce the
    original scripts (5100-5199, HTTPS one thousand above HTTP).
    """

    low: int = Field(default=5100, ge=1, le=65535)
    high: int = Field(default=5199, ge=1, le=65535)
    stride: int = Field(default=1, ge=1)
    secure_offset: int = Field(default=1000, ge=1)
    max_attempts: int = Field(
        default=200, ge=1, description="Random draws before giving up on the range"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "PortRangeConfig":
        if self.low > self.high:
            raise ValueError(f"port range low ({self.low}) exceeds high ({self.high})")
        return self


class DefaultPorts(BaseModel):
    """Ports used for a brand-new solution when the caller gives no hints."""

    api_http: int = Field(default=5080, ge=1, le=65535)
    api_https: int = Field(default=7080, ge=1, le=65535)
    web: int = Field(default=5173, ge=1, le=65535)
    apphost_http: int = Field(default=15080, ge=1, le=65535)
    apphost_https: int = Field(default=17080, ge=1, le=65535)

    def as_dict(self) -> dict[str, int]:
        """Return a plain ``{role: port}`` mapping."""
        return self.model_dump()


class ForgeConfig(BaseModel):
    """Global solution-forge configuration.

    Instances are typically created once by the CLI entry point and then
    passed explicitly to ``SolutionGenerator``; nothing in the engine reads
    the environment on its own.
    """

    templates_dir: Optional[Path] = Field(
        default=None, description="Alternative template directory (defaults to the packaged one)"
    )
    ports: PortRangeConfig = Field(default_factory=PortRangeConfig)
    defaults: DefaultPorts = Field(default_factory=DefaultPorts)
    default_service_name: str = Field(
        default="Weather", description="Domain service of the initial backend unit"
    )
    port_seed: Optional[int] = Field(
        default=None, description="Seed for port draws; set it for reproducible runs"
    )
    log_level: str = Field(default="INFO")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ForgeConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ForgeConfig":
        """Build a ``ForgeConfig`` from environment variables.

        Recognised variables (all optional):
            FORGE_TEMPLATES_DIR, FORGE_PORT_RANGE (e.g. ``5100-5199``),
            FORGE_PORT_STRIDE, FORGE_SECURE_OFFSET, FORGE_PORT_SEED,
            FORGE_LOG_LEVEL.
        """
        port_kwargs: dict[str, Any] = {}
        if os.environ.get("FORGE_PORT_RANGE"):
            low, _, high = os.environ["FORGE_PORT_RANGE"].partition("-")
            port_kwargs["low"] = int(low.strip())
            port_kwargs["high"] = int(high.strip() or low.strip())
        if os.environ.get("FORGE_PORT_STRIDE"):
            port_kwargs["stride"] = int(os.environ["FORGE_PORT_STRIDE"])
        if os.environ.get("FORGE_SECURE_OFFSET"):
            port_kwargs["secure_offset"] = int(os.environ["FORGE_SECURE_OFFSET"])

        kwargs: dict[str, Any] = {"ports": PortRangeConfig(**port_kwargs)}
        if os.environ.get("FORGE_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["FORGE_TEMPLATES_DIR"])
        if os.environ.get("FORGE_PORT_SEED"):
            kwargs["port_seed"] = int(os.environ["FORGE_PORT_SEED"])
        if os.environ.get("FORGE_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["FORGE_LOG_LEVEL"].upper()

        return cls(**kwargs)
