"""Downloads remote import map packages into the vendor directory."""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from constants import Constants, ImportMapType
from common.http_client import fetch
from common.logging_utils import safe_url

from .entry import RemoteEntry
from .exceptions import PackageDownloadError
from .interfaces import ImportMapConfigReader, PackageDownloader
from .parser import split_package_specifier

logger = logging.getLogger(__name__)


class RemotePackageDownloader(PackageDownloader):
    """Fetches remote entries from the jsDelivr CDN.

    JavaScript packages are fetched in their ESM build, CSS files as-is.
    Entries whose file already exists are left alone, so calling
    :meth:`download_packages` repeatedly is safe.
    """

    def __init__(self, config_reader: ImportMapConfigReader, cdn_url: Optional[str] = None):
        self._config_reader = config_reader
        self._cdn_url = (cdn_url or Constants.CDN_URL_JSDELIVR).rstrip("/") + "/"

    def download_packages(self) -> List[str]:
        """Download every remote entry missing on disk.

        Raises:
            PackageDownloadError: If the CDN does not return a file.
        """
        downloaded: List[str] = []
        for entry in self._config_reader.get_entries():
            if not isinstance(entry, RemoteEntry) or os.path.isfile(entry.path):
                continue

            url = self.download_url(entry)
            response = fetch(url, use_cache=False)
            if response.status_code != 200:
                raise PackageDownloadError(
                    f'Error downloading package "{entry.import_name}" from "{safe_url(url)}" (status {response.status_code}).'
                )

            os.makedirs(os.path.dirname(entry.path) or ".", exist_ok=True)
            with open(entry.path, "wb") as f:
                f.write(response.content)
            downloaded.append(entry.import_name)
            logger.info("Downloaded %s@%s", entry.import_name, entry.version)

        return downloaded

    def download_url(self, entry: RemoteEntry) -> str:
        package_name, subpath = split_package_specifier(entry.package_module_specifier)
        url = f"{self._cdn_url}{package_name}@{entry.version}"
        if subpath:
            url = f"{url}/{subpath}"
        if entry.type is ImportMapType.JS:
            url = f"{url}/+esm"
        return url
