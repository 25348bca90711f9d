"""Import map entries and the ordered entry set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List

from constants import ImportMapType


@dataclass(frozen=True)
class ImportMapEntry:
    """Fields shared by every row of the import map configuration."""

    import_name: str
    path: str
    type: ImportMapType
    is_entrypoint: bool

    def is_remote_package(self) -> bool:
        """Return True when the entry was produced by package resolution."""
        return False


@dataclass(frozen=True)
class LocalEntry(ImportMapEntry):
    """Entry whose path points at a file of the project itself."""


@dataclass(frozen=True)
class RemoteEntry(ImportMapEntry):
    """Entry downloaded from a package registry.

    ``package_module_specifier`` is the original request string (for example
    ``bootstrap/dist/css/bootstrap.min.css``) and is what gets re-resolved on
    update; ``path`` is where the downloaded file lives.
    """

    version: str
    package_module_specifier: str

    def is_remote_package(self) -> bool:
        return True


class ImportMapEntries:
    """Insertion-ordered collection of entries keyed by import name."""

    def __init__(self, entries: List[ImportMapEntry] | None = None):
        self._entries: Dict[str, ImportMapEntry] = {}
        for entry in entries or []:
            self.add(entry)

    def add(self, entry: ImportMapEntry) -> None:
        """Add ``entry``, replacing any entry with the same import name in place."""
        self._entries[entry.import_name] = entry

    def has(self, import_name: str) -> bool:
        return import_name in self._entries

    def get(self, import_name: str) -> ImportMapEntry:
        """Return the entry for ``import_name``.

        Raises:
            KeyError: If no entry has that name.
        """
        if import_name not in self._entries:
            raise KeyError(f'The importmap entry "{import_name}" does not exist.')
        return self._entries[import_name]

    def remove(self, import_name: str) -> None:
        self._entries.pop(import_name, None)

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, import_name: object) -> bool:
        return import_name in self._entries

    def __iter__(self) -> Iterator[ImportMapEntry]:
        # Snapshot so callers may remove entries while iterating.
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ImportMapEntries({self.names()!r})"
