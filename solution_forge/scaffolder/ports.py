"""Port allocation for units added to an existing solution.

The HTTP port is drawn at random from the configured range and the secure
port is derived from it by a fixed offset, the way the original shell
scripts did (``HTTPS = HTTP + 1000``).  Unlike those scripts, a derived port
that collides with an existing unit is detected: the allocator then searches
the offset range independently and reports that it did so.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Optional

from solution_forge.config import PortRangeConfig

from .errors import PortConflict, PortRangeExhausted
from .models import PortAllocation, UnitDescriptor

logger = logging.getLogger(__name__)

MAX_PORT = 65535


def occupied_ports(units: Iterable[UnitDescriptor]) -> dict[int, str]:
    """Return ``{port: unit name}`` for every port recorded against *units*."""
    owners: dict[int, str] = {}
    for unit in units:
        for port in unit.ports():
            owners.setdefault(port, unit.name)
    return owners


class PortAllocator:
    """Hands out collision-free ``(http, secure)`` port pairs."""

    def __init__(
        self,
        port_range: PortRangeConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.port_range = port_range or PortRangeConfig()
        self.rng = rng or random.Random()

    def allocate(
        self,
        existing_units: Iterable[UnitDescriptor],
        http_hint: Optional[int] = None,
        secure_hint: Optional[int] = None,
    ) -> PortAllocation:
        """Pick ports for a new unit.

        Args:
            existing_units: Units already in the solution; their ports are
                never reused.
            http_hint: Explicit HTTP port.  Used as-is when free.
            secure_hint: Explicit secure port.  Used as-is when free.

        Returns:
            The allocation.  ``secure_fallback`` is set when the derived
            secure port collided and a random search replaced it.

        Raises:
            PortConflict: A hint is already taken.
            PortRangeExhausted: No free candidate within ``max_attempts``.
        """
        owners = occupied_ports(existing_units)
        cfg = self.port_range

        if http_hint is not None:
            if http_hint in owners:
                raise PortConflict(http_hint, owners[http_hint])
            http_port = http_hint
        else:
            http_port = self._draw(owners, cfg.low, cfg.high)

        taken = {**owners, http_port: "the new unit's HTTP port"}

        if secure_hint is not None:
            if secure_hint in taken:
                raise PortConflict(secure_hint, taken[secure_hint])
            return PortAllocation(http_port=http_port, secure_port=secure_hint)

        derived = http_port + cfg.secure_offset
        if derived <= MAX_PORT and derived not in taken:
            return PortAllocation(http_port=http_port, secure_port=derived)

        logger.warning(
            "Derived secure port %d collides (owner: %s); searching %d-%d instead",
            derived,
            taken.get(derived, "out of range"),
            cfg.low + cfg.secure_offset,
            cfg.high + cfg.secure_offset,
        )
        secure_port = self._draw(
            taken,
            cfg.low + cfg.secure_offset,
            min(cfg.high + cfg.secure_offset, MAX_PORT),
        )
        return PortAllocation(
            http_port=http_port, secure_port=secure_port, secure_fallback=True
        )

    def _draw(self, taken: dict[int, str], low: int, high: int) -> int:
        cfg = self.port_range
        if low > high:
            raise PortRangeExhausted(low, high, 0)
        for _ in range(cfg.max_attempts):
            candidate = self.rng.randrange(low, high + 1, cfg.stride)
            if candidate not in taken:
                return candidate
        raise PortRangeExhausted(low, high, cfg.max_attempts)
