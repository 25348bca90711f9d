"""Adds, removes and updates entries of the persisted import map."""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

from constants import ImportMapType
from common.logging_utils import extra_context, is_debug_enabled

from .entry import ImportMapEntries, ImportMapEntry, LocalEntry, RemoteEntry
from .exceptions import EntryNotFoundError, UnresolvableAssetError
from .generator import find_asset
from .interfaces import AssetMapper, ImportMapConfigReader, PackageDownloader, PackageResolver
from .models import MappedAsset, PackageRequireOptions

logger = logging.getLogger(__name__)


class ImportMapManager:
    """Reconciles require/remove/update requests with the entry set.

    Every operation loads the entries once, applies all changes in memory,
    writes them back once and then asks the downloader to fetch whatever
    remote files are missing. Nothing is written if a step fails.
    """

    def __init__(
        self,
        asset_mapper: AssetMapper,
        config_reader: ImportMapConfigReader,
        package_downloader: PackageDownloader,
        resolver: PackageResolver,
    ):
        self._asset_mapper = asset_mapper
        self._config_reader = config_reader
        self._package_downloader = package_downloader
        self._resolver = resolver

    def require(self, packages: List[PackageRequireOptions]) -> List[ImportMapEntry]:
        """Add or replace packages and return the entries that were added."""
        return self._update_import_map_config(False, packages, [], [])

    def remove(self, packages: Iterable[str]) -> None:
        """Remove packages by import name.

        Raises:
            EntryNotFoundError: If any name is not in the import map.
        """
        self._update_import_map_config(False, [], list(packages), [])

    def update(self, packages: Iterable[str] = ()) -> List[ImportMapEntry]:
        """Re-resolve remote packages to their latest version.

        With no names every remote entry is updated, otherwise only the
        named ones.
        """
        return self._update_import_map_config(True, [], [], list(packages))

    def find_root_import_map_entry(self, module_name: str) -> Optional[ImportMapEntry]:
        entries = self._config_reader.get_entries()
        return entries.get(module_name) if entries.has(module_name) else None

    def _update_import_map_config(
        self,
        update: bool,
        packages_to_require: List[PackageRequireOptions],
        packages_to_remove: List[str],
        packages_to_update: List[str],
    ) -> List[ImportMapEntry]:
        current_entries = self._config_reader.get_entries()
        packages_to_require = list(packages_to_require)

        for package_name in packages_to_remove:
            if not current_entries.has(package_name):
                raise EntryNotFoundError(
                    f'Package "{package_name}" listed for removal was not found in the import map.'
                )

            self._cleanup_package_files(current_entries.get(package_name))
            current_entries.remove(package_name)
            logger.info("Removed %s", package_name)

        if update:
            for entry in current_entries:
                import_name = entry.import_name
                if not isinstance(entry, RemoteEntry) or (packages_to_update and import_name not in packages_to_update):
                    continue

                packages_to_require.append(
                    PackageRequireOptions(entry.package_module_specifier, None, import_name)
                )

                # remove it: then it will be re-added
                self._cleanup_package_files(entry)
                current_entries.remove(import_name)

        new_entries = self._require_packages(packages_to_require, current_entries)
        self._config_reader.write_entries(current_entries)
        self._package_downloader.download_packages()

        if is_debug_enabled(logger):
            logger.debug(
                "Import map reconciled",
                extra=extra_context(
                    event="import_map_write",
                    component="manager",
                    action="update" if update else "require",
                    added=len(new_entries),
                    removed=len(packages_to_remove),
                    entry_count=len(current_entries),
                ),
            )
        return new_entries

    def _require_packages(
        self, packages_to_require: List[PackageRequireOptions], import_map_entries: ImportMapEntries
    ) -> List[ImportMapEntry]:
        """Resolve the requests, add them to the entries and return what was added."""
        if not packages_to_require:
            return []

        added_entries: List[ImportMapEntry] = []
        remote_requests: List[PackageRequireOptions] = []
        for require_options in packages_to_require:
            if require_options.path is None:
                remote_requests.append(require_options)
                continue

            asset = self._find_asset(require_options.path)
            if not asset:
                raise UnresolvableAssetError(
                    f'The path "{require_options.path}" of the package "{require_options.import_name}" '
                    'cannot be found: either pass the logical name of the asset or a relative path starting with "./".'
                )

            new_entry = LocalEntry(
                import_name=require_options.import_name or require_options.package_module_specifier,
                path=self._relative_or_logical_path(asset),
                type=_type_from_filename(require_options.path),
                is_entrypoint=require_options.entrypoint,
            )
            import_map_entries.add(new_entry)
            added_entries.append(new_entry)
            logger.info("Added local package %s -> %s", new_entry.import_name, new_entry.path)

        if not remote_requests:
            return added_entries

        resolved_packages = self._resolver.resolve_packages(remote_requests)
        for resolved_package in resolved_packages:
            require_options = resolved_package.require_options
            new_entry = self._config_reader.create_remote_entry(
                require_options.import_name or require_options.package_module_specifier,
                resolved_package.type,
                resolved_package.version,
                require_options.package_module_specifier,
                require_options.entrypoint,
            )
            import_map_entries.add(new_entry)
            added_entries.append(new_entry)
            logger.info("Added %s@%s", new_entry.import_name, resolved_package.version)

        return added_entries

    def _relative_or_logical_path(self, asset: MappedAsset) -> str:
        """Path relative to the root directory ("./..."), else the logical path."""
        root_directory = self._config_reader.get_root_directory()
        if not root_directory:
            return asset.logical_path

        real_root = os.path.realpath(root_directory)
        real_source = os.path.realpath(asset.source_path)
        if real_source.startswith(real_root + os.sep):
            return "./" + os.path.relpath(real_source, real_root).replace(os.sep, "/")
        return asset.logical_path

    def _cleanup_package_files(self, entry: ImportMapEntry) -> None:
        asset = self._find_asset(entry.path)
        if not asset or not os.path.isfile(asset.source_path):
            return

        try:
            os.unlink(asset.source_path)
        except OSError as exc:
            logger.warning("Could not delete %s: %s", asset.source_path, exc)

    def _find_asset(self, path: str) -> Optional[MappedAsset]:
        return find_asset(self._asset_mapper, self._config_reader, path)


def _type_from_filename(path: str) -> ImportMapType:
    return ImportMapType.CSS if path.endswith(".css") else ImportMapType.JS
