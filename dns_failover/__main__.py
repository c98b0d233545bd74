"""
Main entry point for DNS-Failover.
"""

import asyncio
import logging
import sys
from pathlib import Path

from dns_failover.config.config import Config, parse_duration
from dns_failover.controller.controller import EXIT_CONFIG_ERROR, EXIT_OK, Controller
from dns_failover.controller.reconciler import Reconciler
from dns_failover.errors import ConfigError
from dns_failover.probe.https_probe import HealthProbe
from dns_failover.provider.cloudflare import CloudflareRecordStore
from dns_failover.utils.status_server import StatusServer


def setup_logging(level: str = "info") -> None:
    """Configure timestamped status lines on stdout."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(log_level)
    # Set httpx logger level to WARNING unless root is DEBUG
    httpx_log_level = logging.DEBUG if log_level == logging.DEBUG else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_log_level)


async def run(config: Config) -> int:
    """
    Build the components from configuration and run the controller.

    Args:
        config: Loaded configuration

    Returns:
        int: Process exit code
    """
    logger = logging.getLogger("dns-failover")

    store = CloudflareRecordStore(
        api_token=config.cloudflare_api_token,
        api_email=config.cloudflare_api_email,
        api_key=config.cloudflare_api_key,
        timeout=parse_duration(config.cloudflare_timeout),
        dry_run=config.dry_run,
    )
    probe = HealthProbe(
        config.hostname,
        path=config.health_check_path,
        port=config.health_check_port,
        timeout=parse_duration(config.health_check_timeout),
    )
    reconciler = Reconciler(
        store,
        probe,
        config.record(),
        config.primary(),
        config.failover(),
    )
    controller = Controller(
        reconciler,
        interval=parse_duration(config.interval),
        once=config.once,
    )

    status_server = None
    if config.status_server_enabled and not config.once:
        status_server = StatusServer(
            controller,
            host=config.status_server_host,
            port=config.status_server_port,
        )
        status_server.start()

    try:
        logger.debug(
            f"Managing {config.record().record_type} {config.hostname}: primary {config.primary_ip}, failover {config.failover_ip}"
        )
        return await controller.run()
    finally:
        if status_server:
            status_server.stop()
        await store.close()


def main() -> int:
    """Console script entry point."""
    setup_logging()
    logger = logging.getLogger("dns-failover")

    # Load configuration
    config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    try:
        config = Config.from_yaml(config_path)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    setup_logging(config.log_level)
    if config.dry_run:
        logger.info("Dry run mode, DNS record will not be changed")

    try:
        return asyncio.run(run(config))
    except KeyboardInterrupt:
        logger.info("Shutting down DNS-Failover")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
