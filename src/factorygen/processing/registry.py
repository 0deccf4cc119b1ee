# factorygen/processing/registry.py
"""Per-pass store of accepted records, grouped by group type."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock

from asgiref.sync import sync_to_async

from factorygen.exceptions import DuplicateIdentifierError, RegistryStateError
from factorygen.naming import simple_name

from .records import AnnotatedRecord

logger = logging.getLogger(__name__)

__all__ = ["Group", "GroupRegistry", "RegistryState"]


class RegistryState(str, Enum):
    COLLECTING = "collecting"
    EMITTING = "emitting"
    IDLE = "idle"


@dataclass
class Group:
    """All records sharing one group type, keyed by identifier in insertion order."""

    name: str
    members: dict[str, AnnotatedRecord] = field(default_factory=dict)

    @property
    def simple_name(self) -> str:
        return simple_name(self.name)

    def add(self, record: AnnotatedRecord) -> None:
        existing = self.members.get(record.identifier)
        if existing is not None:
            raise DuplicateIdentifierError(
                f"Conflict: The class {record.qualified_name} is annotated with @factory "
                f"with identifier={record.identifier!r} but {existing.qualified_name} "
                f"already uses the same identifier in group {self.name}",
                record=record,
                existing=existing,
            )
        self.members[record.identifier] = record

    def records(self) -> tuple[AnnotatedRecord, ...]:
        return tuple(self.members.values())

    def copy(self) -> Group:
        return Group(name=self.name, members=dict(self.members))

    def __len__(self) -> int:
        return len(self.members)


class GroupRegistry:
    """Pass-scoped accumulator of records, grouped by group type name.

    State machine::

        COLLECTING --begin_emission()--> EMITTING --end_emission()--> IDLE
             ^                                                          |
             +------------------------- clear() -------------------------+

    ``clear()`` is the only way back to COLLECTING and may be called from any
    state; records are only accepted while COLLECTING.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._groups: dict[str, Group] = {}
        self._state = RegistryState.COLLECTING

    @property
    def state(self) -> RegistryState:
        return self._state

    # --- registration ---

    def add(self, record: AnnotatedRecord) -> None:
        """
        Add a record to its group, creating the group lazily.

        :raises DuplicateIdentifierError: the group already has this identifier;
            the registry is left unchanged.
        :raises RegistryStateError: the registry is not collecting.
        """
        with self._lock:
            if self._state is not RegistryState.COLLECTING:
                raise RegistryStateError(f"Registry is {self._state.value}; call clear() to start a new pass")
            group = self._groups.get(record.group)
            if group is None:
                group = Group(name=record.group)
                group.add(record)
                self._groups[record.group] = group
            else:
                group.add(record)
        logger.debug("added %r to group %s", record.identifier, record.group)

    async def aadd(self, record: AnnotatedRecord) -> None:
        """Async wrapper around `add`."""
        return await sync_to_async(self.add)(record)

    # --- retrieval ---

    def all_groups(self) -> tuple[Group, ...]:
        """Snapshot of every group in discovery order."""
        with self._lock:
            return tuple(group.copy() for group in self._groups.values())

    async def aall_groups(self) -> tuple[Group, ...]:
        """Async wrapper around `all_groups`."""
        return await sync_to_async(self.all_groups)()

    def get(self, name: str) -> Group | None:
        with self._lock:
            group = self._groups.get(name)
            return group.copy() if group is not None else None

    def count(self) -> int:
        """Number of records across all groups."""
        with self._lock:
            return sum(len(group) for group in self._groups.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)

    # --- state transitions ---

    def begin_emission(self) -> tuple[Group, ...]:
        with self._lock:
            if self._state is not RegistryState.COLLECTING:
                raise RegistryStateError(f"Cannot emit from state {self._state.value}")
            self._state = RegistryState.EMITTING
            return self.all_groups()

    def end_emission(self) -> None:
        with self._lock:
            if self._state is RegistryState.EMITTING:
                self._state = RegistryState.IDLE

    def clear(self) -> None:
        """Drop all groups and return to COLLECTING."""
        with self._lock:
            dropped = self.count()
            self._groups.clear()
            self._state = RegistryState.COLLECTING
        logger.debug("registry cleared (%d records dropped)", dropped)

    async def aclear(self) -> None:
        """Async wrapper around `clear`."""
        return await sync_to_async(self.clear)()
