"""Argument parsing functionality for the importmap command."""

import argparse

from constants import Constants


def _add_common_arguments(parser):
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--importmap",
                        dest="IMPORT_MAP_FILE",
                        help=f"Path to the import map entries file (default: {Constants.IMPORT_MAP_CONFIG_FILE})",
                        action="store",
                        type=str)
    parser.add_argument("--public-dir",
                        dest="PUBLIC_DIR",
                        help="Directory holding dumped importmap.json / entrypoint.*.json files",
                        action="store",
                        type=str)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="importmap",
        description="Manage a browser import map: require, remove and update packages, and render entrypoints.",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="action", required=True)

    require = subparsers.add_parser("require", help="Add packages or local files to the import map")
    _add_common_arguments(require)
    require.add_argument("PACKAGES",
                         help="Packages to require, e.g. lodash or lodash@^4.17 or lodash=_",
                         nargs="+",
                         type=str)
    require.add_argument("--path",
                         dest="PATH",
                         help="Local path (./relative or logical asset path) of a single package",
                         action="store",
                         type=str)
    require.add_argument("--entrypoint",
                         dest="ENTRYPOINT",
                         help="Make the required package usable as an entrypoint",
                         action="store_true")

    remove = subparsers.add_parser("remove", help="Remove packages from the import map")
    _add_common_arguments(remove)
    remove.add_argument("PACKAGES", help="Import names to remove", nargs="+", type=str)

    update = subparsers.add_parser("update", help="Update remote packages to their latest version")
    _add_common_arguments(update)
    update.add_argument("PACKAGES", help="Import names to update (default: all)", nargs="*", type=str)

    entrypoints = subparsers.add_parser("entrypoints", help="List the entrypoint names")
    _add_common_arguments(entrypoints)

    show = subparsers.add_parser("show", help="Print the import map data for entrypoints as JSON")
    _add_common_arguments(show)
    show.add_argument("ENTRYPOINTS", help="Entrypoint names", nargs="+", type=str)

    ns = parser.parse_args(argv)
    if ns.action == "require" and ns.PATH and len(ns.PACKAGES) > 1:
        parser.error("--path can only be used when requiring a single package")
    return ns
