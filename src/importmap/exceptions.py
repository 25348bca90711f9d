"""Exceptions raised by the import map core and its default collaborators."""


class ImportMapError(Exception):
    """Base class for every import map failure."""


class EntryNotFoundError(ImportMapError, ValueError):
    """A named entry is absent, or cannot serve the requested role."""


class UnresolvableAssetError(ImportMapError, ValueError):
    """A path given for a package or entrypoint does not map to any asset."""


class MissingAssetError(ImportMapError, RuntimeError):
    """An entry of the import map has no backing asset on disk."""


class PackageResolutionError(ImportMapError):
    """A remote package could not be resolved to a version."""


class PackageDownloadError(ImportMapError):
    """A resolved remote package could not be written to the vendor directory."""
