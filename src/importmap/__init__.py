"""Import map management: entries, dependency resolution and reconciliation."""

from .entry import ImportMapEntries, ImportMapEntry, LocalEntry, RemoteEntry
from .exceptions import (
    EntryNotFoundError,
    ImportMapError,
    MissingAssetError,
    PackageDownloadError,
    PackageResolutionError,
    UnresolvableAssetError,
)
from .generator import ImportMapGenerator
from .manager import ImportMapManager
from .models import JavaScriptImport, MappedAsset, PackageRequireOptions, ResolvedImportMapPackage

__all__ = [
    "ImportMapEntries",
    "ImportMapEntry",
    "LocalEntry",
    "RemoteEntry",
    "ImportMapError",
    "EntryNotFoundError",
    "UnresolvableAssetError",
    "MissingAssetError",
    "PackageResolutionError",
    "PackageDownloadError",
    "ImportMapGenerator",
    "ImportMapManager",
    "JavaScriptImport",
    "MappedAsset",
    "PackageRequireOptions",
    "ResolvedImportMapPackage",
]
