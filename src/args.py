"""Argument parsing functionality for depmeta."""

import argparse

from constants import CacheBackends


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depmeta",
        description=(
            "depmeta - fetch and cache release metadata for a dependency's repository"
        ),
        add_help=True,
    )

    parser.add_argument("-d", "--datasource",
                        dest="DATASOURCE",
                        help="Datasource id, i.e: bitbucket-tags, gitlab-tags",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-r", "--repository",
                        dest="REPOSITORY",
                        help="Repository path at the provider, i.e: owner/name",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-u", "--registry-url",
                        dest="REGISTRY_URLS",
                        help="Registry base URL; repeat to give several candidates",
                        action="append", type=str,
                        default=[])

    parser.add_argument("--digest",
                        dest="DIGEST",
                        help="Resolve a commit digest instead of listing releases",
                        action="store_true")
    parser.add_argument("--ref",
                        dest="REF",
                        help="Tag to resolve with --digest; default branch head when omitted",
                        action="store", type=str)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML or JSON configuration file",
                        action="store", type=str)
    parser.add_argument("--cache-backend",
                        dest="CACHE_BACKEND",
                        help="Cache store backing",
                        action="store", type=str.lower,
                        choices=[b.value for b in CacheBackends])
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help="Directory for the file cache backend",
                        action="store", type=str)

    parser.add_argument("-a", "--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: DEPMETA_LOG_LEVEL or INFO)",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
