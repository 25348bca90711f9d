"""Collaborator interfaces the import map core depends on.

Each interface carries only the operations the generator and the manager
call, so tests can substitute small in-memory doubles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from constants import ImportMapType

from .entry import ImportMapEntries, RemoteEntry
from .models import MappedAsset, PackageRequireOptions, ResolvedImportMapPackage


class AssetMapper(ABC):
    """Looks up assets by logical path or by filesystem path."""

    @abstractmethod
    def get_asset(self, logical_path: str) -> Optional[MappedAsset]:
        """Return the asset with this logical path, if any."""

    @abstractmethod
    def get_asset_from_source_path(self, source_path: str) -> Optional[MappedAsset]:
        """Return the asset stored at this filesystem path, if any."""


class ImportMapConfigReader(ABC):
    """Loads and persists the root entry set."""

    @abstractmethod
    def get_entries(self) -> ImportMapEntries:
        """Return the persisted entries.

        Implementations may hand out the same instance on every call; the
        manager mutates it and passes it back to :meth:`write_entries`.
        """

    @abstractmethod
    def write_entries(self, entries: ImportMapEntries) -> None:
        """Persist ``entries`` in a single write."""

    @abstractmethod
    def get_root_directory(self) -> str:
        """Directory that ``./`` entry paths are relative to."""

    @abstractmethod
    def create_remote_entry(
        self,
        import_name: str,
        type_: ImportMapType,
        version: str,
        package_module_specifier: str,
        is_entrypoint: bool,
    ) -> RemoteEntry:
        """Build a remote entry, choosing where its file is downloaded to."""


class PackageResolver(ABC):
    """Resolves package requests against a registry."""

    @abstractmethod
    def resolve_packages(self, packages_to_require: List[PackageRequireOptions]) -> List[ResolvedImportMapPackage]:
        """Resolve the whole batch in one call.

        Every result references the request it answers through
        ``require_options``.
        """


class PackageDownloader(ABC):
    """Materializes remote entries on disk."""

    @abstractmethod
    def download_packages(self) -> List[str]:
        """Download every remote entry that has no local file yet.

        Returns:
            Import names that were downloaded.
        """


class PublicAssetsPathResolver(ABC):
    """Knows where compiled assets, and the dumped cache files, are written."""

    @abstractmethod
    def get_public_filesystem_path(self) -> str:
        """Absolute directory holding the dumped import map files."""


class DirectoryPublicAssetsPathResolver(PublicAssetsPathResolver):
    """Public path resolver backed by a fixed directory."""

    def __init__(self, public_dir: str):
        self._public_dir = public_dir

    def get_public_filesystem_path(self) -> str:
        return self._public_dir
