"""
Process entry point.

Wires configuration, logging, the tick store, the scheduled poller and the
HTTP API together, then serves until interrupted.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .api.web_server import TickWebServer
from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .data.normalizer import TickNormalizer
from .errors import ConfigurationError
from .logging.config import configure_logging, get_logger
from .scheduler.poller import TickPoller
from .scheduler.runner import RecurringTask
from .scheduler.session import SessionWindow
from .store.tick_store import TickStore
from .upstream.client import UpstreamClient
from .utils.time import Clock, local_now

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sensex futures tick relay")
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument("--config-dir", type=Path, help="Directory holding settings.yaml")
    parser.add_argument("--upstream-url", help="Upstream futures quote URL")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser


def cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed flags into a config override mapping."""
    overrides: dict[str, Any] = {}

    def put(section: str, key: str, value: Any) -> None:
        if value is not None:
            overrides.setdefault(section, {})[key] = value

    put("server", "host", args.host)
    put("server", "port", args.port)
    put("upstream", "url", args.upstream_url)
    put("logging", "level", args.log_level)
    if args.json_logs:
        put("logging", "format_json", True)

    return overrides


def build_components(config: DefaultConfig, clock: Clock = local_now) -> tuple[TickStore, TickPoller, RecurringTask]:
    """Create the store, poller and recurring task for a configuration."""
    store = TickStore()
    client = UpstreamClient(config.upstream)

    poller = TickPoller(
        store=store,
        client=client,
        normalizer=TickNormalizer(config.normalization),
        window=SessionWindow.from_params(config.session),
        polling=config.polling,
        upstream=config.upstream,
        clock=clock,
    )

    task = RecurringTask(
        interval_seconds=config.polling.interval_seconds,
        callback=poller.tick,
        name="SensexPoller",
        run_immediately=config.polling.run_immediately,
    )

    return store, poller, task


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point"""
    load_dotenv()

    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader.create(args.config_dir).load(cli_overrides(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(level=config.logging.level, format_json=config.logging.format_json)

    store, poller, task = build_components(config)

    if not poller.client.health_check():
        logger.warning("Upstream not reachable at start-up, polling anyway",
                       url=config.upstream.url)

    server = TickWebServer(store, config.server, poller=poller)

    task.start()
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        task.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
