"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2


class ImportMapType(Enum):
    """Module types an import map entry can point to.

    Args:
        Enum (string): Value written to the import map "type" key.
    """

    JS = "js"
    CSS = "css"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    IMPORT_MAP_CONFIG_FILE = "importmap.yaml"
    IMPORT_MAP_CACHE_FILENAME = "importmap.json"
    ENTRYPOINT_CACHE_FILENAME_PATTERN = "entrypoint.{}.json"
    ASSET_DIRS = ["assets"]
    VENDOR_DIR = "assets/vendor"
    PUBLIC_DIR = "public/assets"
    PUBLIC_PREFIX = "/assets/"

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    CDN_URL_JSDELIVR = "https://cdn.jsdelivr.net/npm/"

    ENV_CONFIG = "IMPORTMAP_CONFIG"
    ENV_LOG_LEVEL = "IMPORTMAP_LOG_LEVEL"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
    HTTP_CACHE_MAX_ENTRIES = 128
    # abbreviated packument: versions and dist data only
    NPM_METADATA_ACCEPT = "application/vnd.npm.install-v1+json"
