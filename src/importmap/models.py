"""Data models shared by the import map core and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from constants import ImportMapType


@dataclass
class JavaScriptImport:
    """One import edge found in a JavaScript asset."""

    import_name: str
    is_lazy: bool = False
    asset: Optional["MappedAsset"] = None
    add_implicitly_to_import_map: bool = False


@dataclass(eq=False)
class MappedAsset:
    """An asset known to the asset mapper.

    Import edges are computed on first access through ``imports_loader`` and
    then kept for the lifetime of the asset.
    """

    logical_path: str
    source_path: str
    public_path: str
    imports_loader: Optional[Callable[["MappedAsset"], List[JavaScriptImport]]] = None
    _javascript_imports: Optional[List[JavaScriptImport]] = field(default=None, init=False, repr=False)

    @property
    def public_extension(self) -> str:
        """Extension of the public path, without the dot."""
        basename = self.public_path.rsplit("/", 1)[-1]
        return basename.rsplit(".", 1)[-1] if "." in basename else ""

    def get_javascript_imports(self) -> List[JavaScriptImport]:
        if self._javascript_imports is None:
            loader = self.imports_loader
            self._javascript_imports = loader(self) if loader else []
        return self._javascript_imports


@dataclass(eq=False)
class PackageRequireOptions:
    """A request to add a package to the import map.

    Requests are matched to resolver results by identity, so two requests
    with the same fields stay distinct.
    """

    package_module_specifier: str
    version: Optional[str] = None
    import_name: Optional[str] = None
    path: Optional[str] = None
    entrypoint: bool = False

    def __post_init__(self) -> None:
        if not self.import_name:
            self.import_name = self.package_module_specifier


@dataclass
class ResolvedImportMapPackage:
    """Resolution outcome for one :class:`PackageRequireOptions`."""

    require_options: PackageRequireOptions
    version: str
    type: ImportMapType = ImportMapType.JS
