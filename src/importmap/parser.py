"""Token parsing utilities for package requests."""

import re
from typing import Dict, Optional, Tuple

from .models import PackageRequireOptions

# name[@version][=alias]; a leading "@" belongs to a scoped name
_PACKAGE_TOKEN = re.compile(r"(?P<package>@?[^=@\n]+)(?:@(?P<version>[^=\s\n]+))?(?:=(?P<alias>[^\s\n]+))?")


def parse_package_name(token: str) -> Optional[Dict[str, str]]:
    """Split ``name[@version][=alias]`` into its parts.

    Returns:
        Dict with a ``package`` key and, when present, ``version`` and
        ``alias`` keys; None if the token holds no package name.
    """
    match = _PACKAGE_TOKEN.search(token.strip())
    if not match:
        return None
    return {key: value for key, value in match.groupdict().items() if value}


def split_package_specifier(specifier: str) -> Tuple[str, str]:
    """Return ``(package_name, subpath)`` of a module specifier.

    ``@scope/pkg/dist/x.js`` gives ``("@scope/pkg", "dist/x.js")`` and
    ``lodash`` gives ``("lodash", "")``.
    """
    parts = specifier.split("/")
    name_length = 2 if specifier.startswith("@") and len(parts) > 1 else 1
    return "/".join(parts[:name_length]), "/".join(parts[name_length:])


def parse_require_token(token: str, path: Optional[str] = None, entrypoint: bool = False) -> PackageRequireOptions:
    """Build a require request from a CLI token such as ``lodash@^4=_``.

    Raises:
        ValueError: If the token does not contain a package name.
    """
    parts = parse_package_name(token)
    if not parts:
        raise ValueError(f'Package "{token}" is not a valid package name format. Use the format PACKAGE@VERSION - e.g. "lodash" or "lodash@^4.15".')

    version = parts.get("version")
    if version and version.lower() == "latest":
        version = None

    return PackageRequireOptions(
        package_module_specifier=parts["package"],
        version=version,
        import_name=parts.get("alias") or parts["package"],
        path=path,
        entrypoint=entrypoint,
    )
