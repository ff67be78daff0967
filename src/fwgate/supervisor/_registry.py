"""Immutable registry of daemon specifications."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, final

from fwgate.exceptions import DaemonNotFoundError, DuplicateDaemonError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from ._models import DaemonSpec


@final
class DaemonRegistry:
    """Name-keyed table of DaemonSpecs.

    The set of registered daemons is fixed at construction. Iteration and
    names() follow registration order.
    """

    __slots__ = ("_specs",)

    def __init__(self, specs: Iterable[DaemonSpec]) -> None:
        """Build the registry.

        Args:
            specs: Daemon specifications to register.

        Raises:
            DuplicateDaemonError: If two specs share a name.
        """
        table: dict[str, DaemonSpec] = {}
        for spec in specs:
            if spec.name in table:
                msg = f"Daemon '{spec.name}' is registered more than once"
                raise DuplicateDaemonError(msg, daemon_name=spec.name)
            table[spec.name] = spec
        self._specs = MappingProxyType(table)

    @classmethod
    def register(cls, specs: Iterable[DaemonSpec]) -> DaemonRegistry:
        """Build a registry from specs. Alias of the constructor."""
        return cls(specs)

    def get(self, name: str) -> DaemonSpec:
        """Get a spec by name.

        Raises:
            DaemonNotFoundError: If no daemon is registered under that name.
        """
        spec = self._specs.get(name)
        if spec is None:
            msg = f"Daemon not found: {name}"
            raise DaemonNotFoundError(msg, daemon_name=name)
        return spec

    def names(self) -> list[str]:
        """Return all registered names in registration order."""
        return list(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[DaemonSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)
