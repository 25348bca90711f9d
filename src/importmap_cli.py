"""importmap - manage a browser import map from the command line.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

from constants import Constants, ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import apply_config_overrides, load_config
from importmap.asset_mapper import FileSystemAssetMapper
from importmap.config_reader import YamlImportMapConfigReader
from importmap.downloader import RemotePackageDownloader
from importmap.exceptions import ImportMapError, PackageDownloadError, PackageResolutionError
from importmap.generator import ImportMapGenerator
from importmap.interfaces import DirectoryPublicAssetsPathResolver
from importmap.manager import ImportMapManager
from importmap.parser import parse_require_token
from importmap.resolver import NpmRegistryResolver

logger = logging.getLogger(__name__)


def build_services():
    """Wire the default collaborators from ``Constants``.

    Returns:
        tuple: (ImportMapManager, ImportMapGenerator)
    """
    config_reader = YamlImportMapConfigReader(Constants.IMPORT_MAP_CONFIG_FILE, Constants.VENDOR_DIR)
    root_directory = config_reader.get_root_directory()
    asset_mapper = FileSystemAssetMapper(
        [os.path.join(root_directory, d) for d in Constants.ASSET_DIRS],
        Constants.PUBLIC_PREFIX,
        config_reader,
    )
    manager = ImportMapManager(
        asset_mapper,
        config_reader,
        RemotePackageDownloader(config_reader, Constants.CDN_URL_JSDELIVR),
        NpmRegistryResolver(Constants.REGISTRY_URL_NPM),
    )
    generator = ImportMapGenerator(
        asset_mapper,
        DirectoryPublicAssetsPathResolver(os.path.join(root_directory, Constants.PUBLIC_DIR)),
        config_reader,
    )
    return manager, generator


def run_action(args, manager, generator):
    """Run the sub-command selected in ``args``."""
    if args.action == "require":
        packages = [
            parse_require_token(token, path=args.PATH, entrypoint=args.ENTRYPOINT)
            for token in args.PACKAGES
        ]
        for entry in manager.require(packages):
            version = getattr(entry, "version", None)
            print(f'Package "{entry.import_name}" added to the import map' + (f" (version {version})." if version else "."))
    elif args.action == "remove":
        manager.remove(args.PACKAGES)
        print(f"Removed {', '.join(args.PACKAGES)} from the import map.")
    elif args.action == "update":
        updated = manager.update(args.PACKAGES)
        if not updated:
            print("No packages to update.")
        for entry in updated:
            print(f'Updated "{entry.import_name}" to version {getattr(entry, "version", "")}.')
    elif args.action == "entrypoints":
        for name in generator.get_entrypoint_names():
            print(name)
    elif args.action == "show":
        print(json.dumps(generator.get_import_map_data(args.ENTRYPOINTS), indent=2))


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    if getattr(args, "LOG_FILE", None):
        file_handler = logging.FileHandler(args.LOG_FILE)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)

    apply_config_overrides(load_config(args.CONFIG), args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    manager, generator = build_services()
    try:
        run_action(args, manager, generator)
    except (PackageResolutionError, PackageDownloadError) as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.CONNECTION_ERROR.value)
    except (ImportMapError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
