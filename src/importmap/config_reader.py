"""YAML-backed storage for the root import map entries."""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Any, Dict, Optional

import yaml

from constants import Constants, ImportMapType

from .entry import ImportMapEntries, ImportMapEntry, LocalEntry, RemoteEntry
from .exceptions import ImportMapError
from .interfaces import ImportMapConfigReader

logger = logging.getLogger(__name__)

_ALLOWED_KEYS = {"path", "version", "type", "entrypoint", "package_specifier"}


class YamlImportMapConfigReader(ImportMapConfigReader):
    """Reads and writes ``importmap.yaml``.

    Each top-level key is an import name. Entries with a ``path`` are local,
    entries with a ``version`` are remote packages downloaded to the vendor
    directory::

        app:
          path: ./assets/app.js
          entrypoint: true
        lodash:
          version: 4.17.21
    """

    def __init__(self, config_path: str, vendor_dir: Optional[str] = None):
        self._config_path = os.path.abspath(config_path)
        self._vendor_dir = vendor_dir if vendor_dir is not None else Constants.VENDOR_DIR

    @property
    def config_path(self) -> str:
        return self._config_path

    def get_root_directory(self) -> str:
        return os.path.dirname(self._config_path)

    def get_vendor_directory(self) -> str:
        return os.path.join(self.get_root_directory(), self._vendor_dir)

    def get_entries(self) -> ImportMapEntries:
        """Load the entries; a missing file is an empty import map.

        Raises:
            ImportMapError: If the file is not a mapping or an entry is malformed.
        """
        if not os.path.isfile(self._config_path):
            logger.debug("No import map config at %s", self._config_path)
            return ImportMapEntries()

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ImportMapError(f'The import map config "{self._config_path}" is not valid YAML: {e}') from e

        if not isinstance(data, dict):
            raise ImportMapError(f'The import map config "{self._config_path}" must be a mapping of import names.')

        entries = ImportMapEntries()
        for import_name, data_item in data.items():
            entries.add(self._entry_from_data(str(import_name), data_item or {}))
        return entries

    def write_entries(self, entries: ImportMapEntries) -> None:
        """Write all entries to a temporary file, then move it into place."""
        data: Dict[str, Dict[str, Any]] = {}
        for entry in entries:
            data[entry.import_name] = self._data_from_entry(entry)

        directory = os.path.dirname(self._config_path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".importmap-", suffix=".yaml", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, self._config_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug("Wrote %d entries to %s", len(data), self._config_path)

    def create_remote_entry(
        self,
        import_name: str,
        type_: ImportMapType,
        version: str,
        package_module_specifier: str,
        is_entrypoint: bool,
    ) -> RemoteEntry:
        return RemoteEntry(
            import_name=import_name,
            path=self._download_path(package_module_specifier, type_),
            type=type_,
            is_entrypoint=is_entrypoint,
            version=version,
            package_module_specifier=package_module_specifier,
        )

    def _download_path(self, package_module_specifier: str, type_: ImportMapType) -> str:
        filename = package_module_specifier
        if not filename.endswith((".js", ".css")):
            filename = f"{filename}.index.{type_.value}"
        return os.path.join(self.get_vendor_directory(), *filename.split("/"))

    def _entry_from_data(self, import_name: str, data: Any) -> ImportMapEntry:
        if not isinstance(data, dict):
            raise ImportMapError(f'The import map entry "{import_name}" must be a mapping.')

        unknown_keys = set(data) - _ALLOWED_KEYS
        if unknown_keys:
            raise ImportMapError(
                f'The following keys are not valid for the import map entry "{import_name}": '
                f'"{", ".join(sorted(unknown_keys))}". Valid keys are: "{", ".join(sorted(_ALLOWED_KEYS))}".'
            )

        try:
            type_ = ImportMapType(data.get("type", ImportMapType.JS.value))
        except ValueError as e:
            raise ImportMapError(f'The import map entry "{import_name}" has an invalid type "{data.get("type")}".') from e
        is_entrypoint = bool(data.get("entrypoint", False))

        if data.get("version"):
            return self.create_remote_entry(
                import_name,
                type_,
                str(data["version"]),
                str(data.get("package_specifier") or import_name),
                is_entrypoint,
            )

        if data.get("path"):
            return LocalEntry(import_name=import_name, path=str(data["path"]), type=type_, is_entrypoint=is_entrypoint)

        raise ImportMapError(f'The import map entry "{import_name}" must have either a "path" or a "version" key.')

    def _data_from_entry(self, entry: ImportMapEntry) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if isinstance(entry, RemoteEntry):
            data["version"] = entry.version
            if entry.package_module_specifier != entry.import_name:
                data["package_specifier"] = entry.package_module_specifier
        else:
            data["path"] = entry.path
        if entry.type is not ImportMapType.JS:
            data["type"] = entry.type.value
        if entry.is_entrypoint:
            data["entrypoint"] = True
        return data
