"""In-memory collaborators shared by the import map tests."""

import os
from typing import Dict, List, Optional

import pytest

from constants import Constants, ImportMapType
from importmap.entry import ImportMapEntries, ImportMapEntry, RemoteEntry
from importmap.interfaces import (
    AssetMapper,
    ImportMapConfigReader,
    PackageDownloader,
    PackageResolver,
    PublicAssetsPathResolver,
)
from importmap.models import JavaScriptImport, MappedAsset, ResolvedImportMapPackage


class InMemoryAssetMapper(AssetMapper):
    """Asset mapper over assets registered by the test."""

    def __init__(self):
        self.by_logical_path: Dict[str, MappedAsset] = {}
        self.by_source_path: Dict[str, MappedAsset] = {}

    def add(self, logical_path, source_path=None, public_path=None, imports=None):
        """Register an asset; ``imports`` is a list or a callable returning one."""
        source_path = os.path.normpath(source_path or f"/project/assets/{logical_path}")
        asset = MappedAsset(
            logical_path=logical_path,
            source_path=source_path,
            public_path=public_path or f"/assets/{logical_path}",
        )
        self.set_imports(asset, imports or [])
        self.by_logical_path[logical_path] = asset
        self.by_source_path[source_path] = asset
        return asset

    @staticmethod
    def set_imports(asset, imports):
        if callable(imports):
            asset.imports_loader = lambda _asset: imports()
        else:
            asset.imports_loader = lambda _asset: list(imports)

    def get_asset(self, logical_path: str) -> Optional[MappedAsset]:
        return self.by_logical_path.get(logical_path)

    def get_asset_from_source_path(self, source_path: str) -> Optional[MappedAsset]:
        return self.by_source_path.get(os.path.normpath(source_path))


class InMemoryConfigReader(ImportMapConfigReader):
    """Entry store that hands out a fresh copy on every load and records writes."""

    def __init__(self, entries: Optional[List[ImportMapEntry]] = None, root_directory="/project"):
        self.stored = ImportMapEntries(entries or [])
        self.root_directory = root_directory
        self.writes: List[List[str]] = []

    def get_entries(self) -> ImportMapEntries:
        return ImportMapEntries(list(self.stored))

    def write_entries(self, entries: ImportMapEntries) -> None:
        self.stored = ImportMapEntries(list(entries))
        self.writes.append(entries.names())

    def get_root_directory(self) -> str:
        return self.root_directory

    def create_remote_entry(self, import_name, type_, version, package_module_specifier, is_entrypoint):
        return RemoteEntry(
            import_name=import_name,
            path=os.path.join(self.root_directory, "assets", "vendor", f"{package_module_specifier}.index.{type_.value}"),
            type=type_,
            is_entrypoint=is_entrypoint,
            version=version,
            package_module_specifier=package_module_specifier,
        )


class RecordingResolver(PackageResolver):
    """Resolves every request to a fixed version and records each batch."""

    def __init__(self, versions: Optional[Dict[str, str]] = None, error: Optional[Exception] = None):
        self.versions = versions or {}
        self.error = error
        self.calls: List[list] = []

    def resolve_packages(self, packages_to_require):
        self.calls.append(list(packages_to_require))
        if self.error:
            raise self.error
        return [
            ResolvedImportMapPackage(
                require_options=options,
                version=self.versions.get(options.package_module_specifier, "1.0.0"),
                type=ImportMapType.CSS if options.package_module_specifier.endswith(".css") else ImportMapType.JS,
            )
            for options in packages_to_require
        ]


class CountingDownloader(PackageDownloader):
    def __init__(self):
        self.calls = 0

    def download_packages(self):
        self.calls += 1
        return []


class FixedPublicPathResolver(PublicAssetsPathResolver):
    def __init__(self, path):
        self.path = str(path)

    def get_public_filesystem_path(self):
        return self.path


def js_import(import_name, asset=None, lazy=False, implicit=None):
    """Import edge; edges to an asset are implicit unless told otherwise."""
    if implicit is None:
        implicit = asset is not None
    return JavaScriptImport(import_name, lazy, asset, implicit)


@pytest.fixture
def asset_mapper():
    return InMemoryAssetMapper()


@pytest.fixture
def restore_constants():
    """Snapshot ``Constants`` and restore it after the test."""
    saved = {k: v for k, v in vars(Constants).items() if k.isupper()}
    yield Constants
    for key, value in saved.items():
        setattr(Constants, key, value)
