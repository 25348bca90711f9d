"""Asset mapper over plain directories, with JavaScript import scanning."""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, List, Optional, Tuple

from constants import Constants

from .entry import ImportMapEntries
from .generator import find_asset
from .interfaces import AssetMapper, ImportMapConfigReader
from .models import JavaScriptImport, MappedAsset

logger = logging.getLogger(__name__)

# string literals are matched first (group 1) so "/*" or "//" inside them is kept
_STRING_OR_COMMENT = re.compile(
    r"""('(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)|/\*.*?\*/|//[^\n]*""",
    re.DOTALL,
)
_STATIC_IMPORT = re.compile(
    r"""(?:^|[;\s}])(?:import|export)\s*(?:[\w*{}\s,$]+?\s*from\s*)?(['"])([^'"\n]+)\1""",
    re.MULTILINE,
)
_DYNAMIC_IMPORT = re.compile(r"""\bimport\(\s*(['"])([^'"\n]+)\1\s*\)""")
_JS_EXTENSIONS = ("js", "mjs")


def find_import_specifiers(content: str) -> List[Tuple[str, bool]]:
    """Return ``(specifier, is_lazy)`` pairs in source order.

    Static ``import``/``export ... from`` statements are eager; ``import()``
    calls are lazy.
    """
    content = _STRING_OR_COMMENT.sub(lambda m: " " if m.group(1) is None else m.group(1), content)
    found: List[Tuple[int, str, bool]] = []
    for match in _STATIC_IMPORT.finditer(content):
        found.append((match.start(2), match.group(2), False))
    for match in _DYNAMIC_IMPORT.finditer(content):
        found.append((match.start(2), match.group(2), True))
    found.sort()
    return [(specifier, is_lazy) for _, specifier, is_lazy in found]


class FileSystemAssetMapper(AssetMapper):
    """Maps files below a set of asset directories to public paths.

    The logical path of a file is its path relative to the asset directory
    that contains it; its public path is ``public_prefix`` plus the logical
    path. Bare module imports are resolved through the root import map
    entries when ``config_reader`` is given.
    """

    def __init__(
        self,
        asset_dirs: List[str],
        public_prefix: Optional[str] = None,
        config_reader: Optional[ImportMapConfigReader] = None,
    ):
        self._asset_dirs = [os.path.realpath(d) for d in asset_dirs]
        prefix = public_prefix if public_prefix is not None else Constants.PUBLIC_PREFIX
        self._public_prefix = prefix.rstrip("/") + "/"
        self._config_reader = config_reader
        self._assets: Dict[str, MappedAsset] = {}

    def get_asset(self, logical_path: str) -> Optional[MappedAsset]:
        if not logical_path or logical_path.startswith((".", "/")) or os.path.isabs(logical_path):
            return None

        for asset_dir in self._asset_dirs:
            candidate = os.path.realpath(os.path.join(asset_dir, *logical_path.split("/")))
            if candidate.startswith(asset_dir + os.sep) and os.path.isfile(candidate):
                return self._build_asset(asset_dir, candidate)
        return None

    def get_asset_from_source_path(self, source_path: str) -> Optional[MappedAsset]:
        real_path = os.path.realpath(source_path)
        if not os.path.isfile(real_path):
            return None

        for asset_dir in self._asset_dirs:
            if real_path.startswith(asset_dir + os.sep):
                return self._build_asset(asset_dir, real_path)
        return None

    def _build_asset(self, asset_dir: str, source_path: str) -> MappedAsset:
        source_path = os.path.realpath(source_path)
        if source_path in self._assets:
            return self._assets[source_path]

        logical_path = os.path.relpath(source_path, asset_dir).replace(os.sep, "/")
        asset = MappedAsset(
            logical_path=logical_path,
            source_path=source_path,
            public_path=self._public_prefix + logical_path,
            imports_loader=self._load_javascript_imports,
        )
        self._assets[source_path] = asset
        return asset

    def _load_javascript_imports(self, asset: MappedAsset) -> List[JavaScriptImport]:
        if asset.public_extension not in _JS_EXTENSIONS:
            return []

        with open(asset.source_path, "r", encoding="utf-8") as f:
            content = f.read()

        root_entries: Optional[ImportMapEntries] = None
        javascript_imports: List[JavaScriptImport] = []
        for specifier, is_lazy in find_import_specifiers(content):
            if specifier.startswith(("./", "../")):
                target = os.path.normpath(os.path.join(os.path.dirname(asset.source_path), specifier))
                dependent_asset = self.get_asset_from_source_path(target)
                if not dependent_asset:
                    logger.warning('Unable to find asset "%s" imported from "%s".', specifier, asset.source_path)
                    continue
                javascript_imports.append(
                    JavaScriptImport(dependent_asset.public_path, is_lazy, dependent_asset, True)
                )
                continue

            if specifier.startswith("/") or "://" in specifier:
                continue

            dependent_asset = None
            if self._config_reader is not None:
                if root_entries is None:
                    root_entries = self._config_reader.get_entries()
                if root_entries.has(specifier):
                    dependent_asset = find_asset(self, self._config_reader, root_entries.get(specifier).path)
            javascript_imports.append(JavaScriptImport(specifier, is_lazy, dependent_asset, False))

        return javascript_imports
