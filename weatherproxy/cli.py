"""CLI entry point for the CWA weather proxy."""

import argparse
import json
import logging
from pathlib import Path

from weatherproxy.config.loader import load_config, redacted_config
from weatherproxy.errors import ProxyError
from weatherproxy.ingest.cwa_client import CwaClient
from weatherproxy.ingest.forecast_cache import ForecastCache
from weatherproxy.ingest.forecast_fetcher import ForecastFetcher

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherproxy",
        description="Caching proxy for the CWA weather open-data API",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP server")
    serve_p.add_argument("--host", default=None, help="Bind address")
    serve_p.add_argument("--port", type=int, default=None, help="Listen port")

    # fetch
    fetch_p = sub.add_parser("fetch", help="Fetch one city's forecast and print it")
    fetch_p.add_argument("city", help="City code, e.g. taipei")

    # cities
    sub.add_parser("cities", help="List supported city codes")

    # config show
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config (API key redacted)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(_config_path(args.config))

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "fetch":
        return _cmd_fetch(config, args)
    elif args.command == "cities":
        return _cmd_cities(config)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_serve(config, args) -> int:
    import uvicorn

    from weatherproxy.app import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info("Supported cities: %s", ", ".join(config.city_map))
    logger.info("Environment: %s", config.server.environment.value)
    if not config.upstream.api_key:
        logger.warning("CWA_API_KEY is not set; weather lookups will fail")
    uvicorn.run(create_app(config), host=host, port=port)
    return 0


def _cmd_fetch(config, args) -> int:
    client = CwaClient(
        api_key=config.upstream.api_key,
        base_url=config.upstream.base_url,
        dataset_id=config.upstream.dataset_id,
        timeout=config.upstream.timeout_seconds,
    )
    fetcher = ForecastFetcher(config, client, ForecastCache())
    try:
        lookup = fetcher.fetch(args.city)
    except ProxyError as e:
        print(f"Error ({e.status_code}): {e.message}")
        return 1
    print(json.dumps(lookup.result.to_dict(), ensure_ascii=False, indent=2))
    return 0


def _cmd_cities(config) -> int:
    for key, name in config.city_map.items():
        print(f"{key}\t{name}")
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(json.dumps(redacted_config(config), ensure_ascii=False, indent=2))
        return 0
    print("Use: config show")
    return 1


def _config_path(arg: str) -> str | None:
    """The default config file is optional; an explicit --config must exist."""
    if arg == DEFAULT_CONFIG and not Path(arg).exists():
        logger.info("No %s found, using built-in defaults", DEFAULT_CONFIG)
        return None
    return arg
