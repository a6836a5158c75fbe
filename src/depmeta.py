"""depmeta - fetch release metadata and commit digests for a dependency.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

from admin_config import RunContext
from args import parse_args
from cli_config import apply_env_overrides, build_engine, load_config_file
from common.errors import ConfigError, DataShapeError, TransportFailure, UnknownDatasourceError
from common.logging_utils import configure_logging
from constants import Constants, ExitCodes
from datasource import DigestConfig, GetReleasesConfig, list_datasources

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    # An explicit --loglevel wins over DEPMETA_LOG_LEVEL
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _load_settings(args, context: RunContext):
    """Merge file, environment and CLI settings; pin admin options on the context."""
    config = apply_env_overrides(load_config_file(args.CONFIG))
    if args.CACHE_BACKEND:
        config["cache_backend"] = args.CACHE_BACKEND
    if args.CACHE_DIR:
        config["cache_dir"] = args.CACHE_DIR
    admin = context.set_admin_config(config)

    registry_urls = args.REGISTRY_URLS or config.get("registry_urls") or []
    if isinstance(registry_urls, str):
        registry_urls = [registry_urls]
    return admin, admin.filter_registry_urls(registry_urls)


def run(args, context: RunContext):
    """Execute one lookup and return (exit code, JSON-serializable output)."""
    try:
        admin, registry_urls = _load_settings(args, context)
        engine = build_engine(admin)
    except ConfigError as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value, None

    try:
        if args.DIGEST:
            config = DigestConfig(args.DATASOURCE, args.REPOSITORY, registry_urls)
            return ExitCodes.SUCCESS.value, engine.get_digest(config, args.REF)
        if args.REF:
            logger.warning("--ref is only used together with --digest; ignoring")
        result = engine.get_releases(GetReleasesConfig(args.DATASOURCE, args.REPOSITORY, registry_urls))
        return ExitCodes.SUCCESS.value, result.to_dict() if result is not None else None
    except UnknownDatasourceError as exc:
        logger.error("%s (available: %s)", exc, ", ".join(list_datasources()))
        return ExitCodes.USAGE_ERROR.value, None
    except TransportFailure as exc:
        logger.error("%s", exc)
        return ExitCodes.CONNECTION_ERROR.value, None
    except DataShapeError as exc:
        logger.error("%s", exc)
        return ExitCodes.DATA_ERROR.value, None
    except ConfigError as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value, None


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    context = RunContext()
    try:
        code, output = run(args, context)
    finally:
        context.reset()

    if code == ExitCodes.SUCCESS.value:
        print(json.dumps(output, indent=2))
    return code


if __name__ == "__main__":
    sys.exit(main())
