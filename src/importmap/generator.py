"""Builds import map data from the root entries and the asset import graph."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from constants import Constants, ImportMapType
from common.logging_utils import extra_context, is_debug_enabled, Timer

from .entry import ImportMapEntries, ImportMapEntry, LocalEntry
from .exceptions import EntryNotFoundError, MissingAssetError, UnresolvableAssetError
from .interfaces import AssetMapper, ImportMapConfigReader, PublicAssetsPathResolver
from .models import JavaScriptImport, MappedAsset

logger = logging.getLogger(__name__)

ImportMapData = Dict[str, Dict[str, Any]]


def find_asset(asset_mapper: AssetMapper, config_reader: ImportMapConfigReader, path: str) -> Optional[MappedAsset]:
    """Find an asset by logical path, relative ("./") path or filesystem path."""
    asset = asset_mapper.get_asset(path)
    if asset:
        return asset

    if path.startswith("."):
        path = os.path.normpath(os.path.join(config_reader.get_root_directory(), path))

    return asset_mapper.get_asset_from_source_path(path)


def missing_asset_error(entry: ImportMapEntry) -> MissingAssetError:
    if entry.is_remote_package():
        return MissingAssetError(
            f'The "{entry.import_name}" vendor asset is missing. Try running the "importmap install" command.'
        )
    return MissingAssetError(f'The asset "{entry.path}" cannot be found in any asset map paths.')


class ImportMapGenerator:
    """Computes the import map rendered for a set of entrypoints."""

    def __init__(
        self,
        asset_mapper: AssetMapper,
        assets_path_resolver: PublicAssetsPathResolver,
        config_reader: ImportMapConfigReader,
    ):
        self._asset_mapper = asset_mapper
        self._assets_path_resolver = assets_path_resolver
        self._config_reader = config_reader

    def get_entrypoint_names(self) -> List[str]:
        """Names of the root entries flagged as entrypoints, in config order."""
        return [entry.import_name for entry in self._config_reader.get_entries() if entry.is_entrypoint]

    def get_import_map_data(self, entrypoint_names: List[str]) -> ImportMapData:
        """Return the import map for a page loading ``entrypoint_names``.

        Each entrypoint and its eager imports come first, flagged with
        ``preload``, in the order the entrypoints were given. Every other
        entry follows in its raw order without a ``preload`` key.
        """
        raw_import_map_data = dict(self.get_raw_import_map_data())
        final_import_map_data: ImportMapData = {}
        for entrypoint_name in entrypoint_names:
            entrypoint_imports = self.find_eager_entrypoint_imports(entrypoint_name)
            # Entrypoint modules must be preloaded before their dependencies
            for import_name in [entrypoint_name, *entrypoint_imports]:
                if import_name in final_import_map_data:
                    continue

                # Missing dependency - rely on the browser or build tools to warn
                if import_name not in raw_import_map_data:
                    continue

                final_import_map_data[import_name] = {**raw_import_map_data.pop(import_name), "preload": True}

        final_import_map_data.update(raw_import_map_data)
        return final_import_map_data

    def get_entrypoint_metadata(self, entrypoint_name: str) -> List[str]:
        """Return the preload list for ``entrypoint_name``."""
        return self.find_eager_entrypoint_imports(entrypoint_name)

    def get_raw_import_map_data(self) -> ImportMapData:
        """Map every entry of the closure to its public path and type.

        A dumped ``importmap.json`` in the public directory is returned as-is.

        Raises:
            MissingAssetError: If any entry has no asset.
        """
        dumped = self._read_dumped_file(Constants.IMPORT_MAP_CACHE_FILENAME)
        if dumped is not None:
            return dumped

        with Timer() as timer:
            all_entries = self.find_implicit_entries(self._config_reader.get_entries())

            raw_import_map_data: ImportMapData = {}
            for entry in all_entries.values():
                asset = self._find_asset(entry.path)
                if not asset:
                    raise missing_asset_error(entry)
                raw_import_map_data[entry.import_name] = {"path": asset.public_path, "type": entry.type.value}

        if is_debug_enabled(logger):
            logger.debug(
                "Raw import map computed",
                extra=extra_context(
                    event="import_map_raw",
                    component="generator",
                    action="closure",
                    entry_count=len(raw_import_map_data),
                    duration_ms=timer.duration_ms(),
                ),
            )
        return raw_import_map_data

    def find_implicit_entries(self, root_entries: ImportMapEntries) -> Dict[str, ImportMapEntry]:
        """Return the root entries plus every module they pull in.

        Traversal is depth-first over an explicit stack of
        ``(entry, import iterator)`` frames. ``all_entries`` doubles as the
        visited map: an import whose name is already present is never
        expanded again, so cyclic imports terminate.
        """
        all_entries: Dict[str, ImportMapEntry] = {}
        for root_entry in root_entries:
            all_entries[root_entry.import_name] = root_entry

        for root_entry in root_entries:
            stack: List[Tuple[ImportMapEntry, Iterator[JavaScriptImport]]] = [
                (root_entry, self._iter_entry_imports(root_entry))
            ]

            while stack:
                _, imports = stack[-1]
                javascript_import = next(imports, None)
                if javascript_import is None:
                    stack.pop()
                    continue

                import_name = javascript_import.import_name
                if import_name in all_entries:
                    continue

                # root entries are already in all_entries, so only implicit edges add entries
                if not javascript_import.add_implicitly_to_import_map or not javascript_import.asset:
                    continue

                imported_asset = javascript_import.asset
                next_entry = LocalEntry(
                    import_name=import_name,
                    path=imported_asset.logical_path,
                    type=_type_from_extension(imported_asset.public_extension),
                    is_entrypoint=False,
                )
                all_entries[import_name] = next_entry
                logger.debug("Implicit entry %s added via %s", import_name, stack[-1][0].import_name)
                stack.append((next_entry, self._iter_entry_imports(next_entry)))

        return all_entries

    def find_eager_entrypoint_imports(self, entry_name: str) -> List[str]:
        """Given an entrypoint name, find the non-lazy module imports in its chain.

        Raises:
            EntryNotFoundError: If the name is unknown, not an entrypoint, or
                a remote package.
            UnresolvableAssetError: If the entrypoint path matches no asset.
        """
        dumped = self._read_dumped_file(Constants.ENTRYPOINT_CACHE_FILENAME_PATTERN.format(entry_name))
        if dumped is not None:
            return dumped

        root_entries = self._config_reader.get_entries()
        if not root_entries.has(entry_name):
            raise EntryNotFoundError(f'The entrypoint "{entry_name}" does not exist in the import map.')

        entry = root_entries.get(entry_name)
        if not entry.is_entrypoint:
            raise EntryNotFoundError(
                f'The entrypoint "{entry_name}" is not an entry point in the import map. '
                'Set "entrypoint: true" to make it available as an entrypoint.'
            )

        if entry.is_remote_package():
            raise EntryNotFoundError(
                f'The entrypoint "{entry_name}" is a remote package and cannot be used as an entrypoint.'
            )

        asset = self._find_asset(entry.path)
        if not asset:
            raise UnresolvableAssetError(
                f'The path "{entry.path}" of the entrypoint "{entry_name}" mentioned in the import map '
                'cannot be found in any asset map paths.'
            )

        return self.find_eager_imports(asset)

    def find_eager_imports(self, asset: MappedAsset) -> List[str]:
        """List the import names ``asset`` needs before it can execute.

        Lazy imports end their branch. An import that leads back to an asset
        still being walked is listed but not followed again.
        """
        dependencies: List[str] = []
        in_progress: Set[str] = {asset.source_path}
        stack: List[Tuple[MappedAsset, Iterator[JavaScriptImport]]] = [
            (asset, iter(asset.get_javascript_imports()))
        ]

        while stack:
            current, imports = stack[-1]
            javascript_import = next(imports, None)
            if javascript_import is None:
                stack.pop()
                in_progress.discard(current.source_path)
                continue

            if javascript_import.is_lazy:
                continue

            dependencies.append(javascript_import.import_name)

            dependent_asset = javascript_import.asset
            if not dependent_asset:
                continue
            if dependent_asset.source_path in in_progress:
                logger.debug("Eager import cycle at %s, not following", javascript_import.import_name)
                continue

            in_progress.add(dependent_asset.source_path)
            stack.append((dependent_asset, iter(dependent_asset.get_javascript_imports())))

        return dependencies

    def _iter_entry_imports(self, entry: ImportMapEntry) -> Iterator[JavaScriptImport]:
        # only JS files have import dependencies
        if entry.type is not ImportMapType.JS:
            return iter(())

        asset = self._find_asset(entry.path)
        if not asset:
            raise missing_asset_error(entry)

        return iter(asset.get_javascript_imports())

    def _find_asset(self, path: str) -> Optional[MappedAsset]:
        return find_asset(self._asset_mapper, self._config_reader, path)

    def _read_dumped_file(self, filename: str) -> Optional[Any]:
        dumped_path = os.path.join(self._assets_path_resolver.get_public_filesystem_path(), filename)
        if not os.path.isfile(dumped_path):
            return None

        logger.debug("Using dumped import map file %s", dumped_path)
        with open(dumped_path, "r", encoding="utf-8") as f:
            return json.load(f)


def _type_from_extension(extension: str) -> ImportMapType:
    try:
        return ImportMapType(extension)
    except ValueError:
        return ImportMapType.JS
