"""Package resolver backed by the npm registry, using semantic versioning."""

from __future__ import annotations

import logging
from typing import List, Optional

import semantic_version

from constants import Constants, ImportMapType
from common.http_client import fetch_json
from common.logging_utils import extra_context, is_debug_enabled, Timer

from .exceptions import PackageResolutionError
from .interfaces import PackageResolver
from .models import PackageRequireOptions, ResolvedImportMapPackage
from .parser import split_package_specifier

logger = logging.getLogger(__name__)


class NpmRegistryResolver(PackageResolver):
    """Resolves each request to the highest registry version matching its constraint."""

    def __init__(self, registry_url: Optional[str] = None):
        self._registry_url = registry_url or Constants.REGISTRY_URL_NPM

    def resolve_packages(self, packages_to_require: List[PackageRequireOptions]) -> List[ResolvedImportMapPackage]:
        """Resolve the batch.

        Raises:
            PackageResolutionError: If any package is unknown or has no
                matching version. Nothing is returned for the batch then.
        """
        if not packages_to_require:
            return []

        resolved: List[ResolvedImportMapPackage] = []
        with Timer() as timer:
            for require_options in packages_to_require:
                package_name, _ = split_package_specifier(require_options.package_module_specifier)
                candidates = self.fetch_candidates(package_name)
                version = self.pick(require_options.version, candidates)
                if version is None:
                    constraint = require_options.version or "latest"
                    raise PackageResolutionError(
                        f'Unable to find a version of "{package_name}" matching "{constraint}".'
                    )
                resolved.append(
                    ResolvedImportMapPackage(
                        require_options=require_options,
                        version=version,
                        type=_type_from_specifier(require_options.package_module_specifier),
                    )
                )

        if is_debug_enabled(logger):
            logger.debug(
                "Packages resolved",
                extra=extra_context(
                    event="resolve",
                    component="resolver",
                    action="resolve_packages",
                    package_count=len(resolved),
                    duration_ms=timer.duration_ms(),
                ),
            )
        return resolved

    def fetch_candidates(self, package_name: str) -> List[str]:
        """Fetch the published versions from the registry packument.

        Raises:
            PackageResolutionError: On a non-200 response or an unreadable body.
        """
        url = f"{self._registry_url.rstrip('/')}/{package_name}"
        status_code, data = fetch_json(url, accept=Constants.NPM_METADATA_ACCEPT)

        if status_code == 404:
            raise PackageResolutionError(f'The package "{package_name}" does not exist in the npm registry.')
        if status_code != 200 or data is None:
            raise PackageResolutionError(
                f'Error resolving "{package_name}" from the npm registry (status {status_code}).'
            )

        return list(data.get("versions", {}).keys())

    def pick(self, constraint: Optional[str], candidates: List[str]) -> Optional[str]:
        """Pick the highest candidate satisfying ``constraint``.

        Without a constraint pre-releases are ignored. An exact version is
        returned as long as it was published.
        """
        if constraint and constraint in candidates:
            return constraint

        spec = None
        if constraint:
            try:
                spec = semantic_version.NpmSpec(constraint)
            except ValueError:
                logger.warning("Invalid version constraint %s", constraint)
                return None

        matching = []
        for candidate in candidates:
            try:
                version = semantic_version.Version(candidate)
            except ValueError:
                continue  # Skip invalid versions
            if spec is None:
                if not version.prerelease:
                    matching.append(version)
            elif spec.match(version):
                matching.append(version)

        if not matching:
            return None
        return str(max(matching))


def _type_from_specifier(specifier: str) -> ImportMapType:
    return ImportMapType.CSS if specifier.endswith(".css") else ImportMapType.JS
