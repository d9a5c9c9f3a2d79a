"""
Critical Sections

Two kinds of sections guard a session's metadata state:

- the exclusive dump section: one writer at a time per session. Acquiring it
  yields a DumpSection, the capability every emission call requires.
- read sections over ReadMostlyTable: lookups run against an immutable
  snapshot of the table and never block on concurrent writers, which
  publish a fresh copy of the mapping on every update.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Generic, Hashable, Iterator, Mapping, TypeVar

from tracemeta.errors import SectionNotHeldError

if TYPE_CHECKING:
    from tracemeta.metadata.writer import MetadataWriter
    from tracemeta.registry.session import SessionRegistry

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ReadMostlyTable(Generic[K, V]):
    """
    Copy-on-write mapping.

    Usage:
        table.publish(key, value)           # writer side
        with table.read_section() as view:  # reader side
            value = view.get(key)
    """

    def __init__(self):
        self._items: Dict[K, V] = {}
        self._update_lock = threading.Lock()

    def publish(self, key: K, value: V) -> None:
        """Insert or replace an entry."""
        with self._update_lock:
            items = dict(self._items)
            items[key] = value
            self._items = items

    def remove(self, key: K) -> None:
        with self._update_lock:
            if key not in self._items:
                return
            items = dict(self._items)
            del items[key]
            self._items = items

    @contextmanager
    def read_section(self) -> Iterator[Mapping[K, V]]:
        """Yield a read-only view that stays stable for the whole section."""
        yield MappingProxyType(self._items)

    def __len__(self) -> int:
        return len(self._items)


class DumpSection:
    """
    Capability proving the holder owns a session's exclusive dump section.

    Obtained from SessionRegistry.exclusive(); becomes unusable once the
    section is left.
    """

    def __init__(self, registry: SessionRegistry):
        self._registry = registry
        self._held = True

    @property
    def held(self) -> bool:
        return self._held

    @property
    def registry(self) -> SessionRegistry:
        self._check_held()
        return self._registry

    @property
    def writer(self) -> MetadataWriter:
        self._check_held()
        return self._registry.writer

    def emit(self, text: str) -> None:
        """Append text to the session's metadata."""
        self.writer.append(text)

    def emit_tabs(self, nesting: int) -> None:
        self.writer.print_tabs(nesting)

    def release(self) -> None:
        self._held = False

    def _check_held(self) -> None:
        if not self._held:
            raise SectionNotHeldError("Dump section has been released")
