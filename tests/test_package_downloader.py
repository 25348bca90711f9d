"""Tests for the CDN package downloader."""

from unittest.mock import patch

import pytest

from common.http_client import HttpResponse
from constants import ImportMapType
from importmap.config_reader import YamlImportMapConfigReader
from importmap.downloader import RemotePackageDownloader
from importmap.entry import ImportMapEntries, LocalEntry
from importmap.exceptions import PackageDownloadError


@pytest.fixture
def reader(tmp_path):
    reader = YamlImportMapConfigReader(str(tmp_path / "importmap.yaml"), vendor_dir="assets/vendor")
    reader.write_entries(ImportMapEntries([
        LocalEntry("app", "./assets/app.js", ImportMapType.JS, True),
        reader.create_remote_entry("lodash", ImportMapType.JS, "4.17.21", "lodash", False),
        reader.create_remote_entry(
            "bootstrap.css", ImportMapType.CSS, "5.3.3", "bootstrap/dist/css/bootstrap.min.css", False
        ),
    ]))
    return reader


@pytest.fixture
def downloader(reader):
    return RemotePackageDownloader(reader, "https://cdn.test/npm/")


class TestRemotePackageDownloader:
    """Downloading missing vendor files."""

    @patch("importmap.downloader.fetch", return_value=HttpResponse(200, "/* body \u00e9 */".encode("utf-8")))
    def test_downloads_missing_remote_entries(self, mock_get, downloader, reader):
        downloaded = downloader.download_packages()

        assert downloaded == ["lodash", "bootstrap.css"]
        assert [c.args[0] for c in mock_get.call_args_list] == [
            "https://cdn.test/npm/lodash@4.17.21/+esm",
            "https://cdn.test/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css",
        ]
        lodash = reader.get_entries().get("lodash")
        with open(lodash.path, "rb") as f:
            assert f.read() == "/* body \u00e9 */".encode("utf-8")

    @patch("importmap.downloader.fetch", return_value=HttpResponse(200, b"x"))
    def test_second_run_downloads_nothing(self, mock_get, downloader):
        downloader.download_packages()
        mock_get.reset_mock()

        assert downloader.download_packages() == []
        mock_get.assert_not_called()

    @patch("importmap.downloader.fetch", return_value=HttpResponse(404, b"Not found"))
    def test_http_error(self, _mock_get, downloader):
        with pytest.raises(PackageDownloadError, match='"lodash".*status 404'):
            downloader.download_packages()

    def test_scoped_subpath_url(self, downloader, reader):
        entry = reader.create_remote_entry("ctrl", ImportMapType.JS, "3.2.2", "@hotwired/stimulus/dist/stimulus.js", False)

        assert downloader.download_url(entry) == "https://cdn.test/npm/@hotwired/stimulus@3.2.2/dist/stimulus.js/+esm"
