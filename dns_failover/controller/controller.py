"""
Controller module for DNS-Failover.

This module is responsible for running the reconciler either once (for an
external scheduler such as cron) or on a fixed interval as a daemon.
"""

import asyncio
import logging
from typing import Optional

from dns_failover.errors import ProviderError
from dns_failover.models.models import RunResult

EXIT_OK = 0
EXIT_PROVIDER_ERROR = 1
EXIT_CONFIG_ERROR = 2


class Controller:
    """
    Controller that schedules reconciliation passes and keeps their outcome.
    """

    def __init__(self, reconciler, interval: float = 60.0, once: bool = True):
        """
        Initialize a Controller.

        Args:
            reconciler: Reconciler performing a single pass
            interval: Seconds between passes in daemon mode
            once: Whether to run a single pass and exit
        """
        self.reconciler = reconciler
        self.interval = interval
        self.once = once
        self.logger = logging.getLogger("dns-failover.controller")

        # Only one pass may touch the record at a time
        self._lock = asyncio.Lock()

        self.last_result: Optional[RunResult] = None
        self.last_error: Optional[BaseException] = None
        self.runs_total = 0
        self.failures_total = 0
        self.writes_total = 0

    @property
    def healthy(self) -> bool:
        """True until a pass fails, and again after the next successful one."""
        return self.last_error is None

    async def run(self) -> int:
        """
        Runs according to the configured mode.

        Returns:
            int: Process exit code
        """
        if self.once:
            return await self.run_once()
        await self.run_forever()
        return EXIT_OK

    async def run_once(self) -> int:
        """
        Performs a single reconciliation pass.

        Returns:
            int: EXIT_OK on success, EXIT_PROVIDER_ERROR if the provider failed
        """
        if self._lock.locked():
            self.logger.warning(
                "Previous reconciliation is still running, skipping this one."
            )
            return EXIT_OK

        async with self._lock:
            self.runs_total += 1
            try:
                result = await self.reconciler.run_once()
            except ProviderError as e:
                self.failures_total += 1
                self.last_error = e
                self.logger.error(f"Reconciliation aborted: {e}")
                if e.payload is not None:
                    self.logger.error(f"Provider response: {e.payload}")
                return EXIT_PROVIDER_ERROR

            self.last_result = result
            self.last_error = None
            if result.changed and not result.dry_run:
                self.writes_total += 1
            return result.exit_code

    async def run_forever(self) -> None:
        """
        Runs reconciliation passes at the configured interval until cancelled.
        """
        self.logger.info(
            f"Reconciliation loop starting with interval {self.interval} seconds"
        )

        while True:
            try:
                await self.run_once()
            except Exception as e:
                self.failures_total += 1
                self.last_error = e
                self.logger.error(f"Error in reconciliation loop: {e}", exc_info=True)

            await asyncio.sleep(self.interval)
