"""
Reconciler module for DNS-Failover.

This module is responsible for one failover decision: read what is published,
probe the primary, and publish the health-derived address if it differs.
"""

import logging

from dns_failover.models.models import Endpoint, HealthStatus, ManagedRecord, Role, RunResult


def decide_target(
    status: HealthStatus, primary: Endpoint, failover: Endpoint
) -> Endpoint:
    """
    Pick the endpoint the record should point at.

    Args:
        status: Health of the primary
        primary: Primary endpoint
        failover: Failover endpoint

    Returns:
        Endpoint: primary when healthy, failover otherwise
    """
    if status == HealthStatus.HEALTHY:
        return primary
    return failover


class Reconciler:
    """
    Brings the managed record in line with the health of the primary.
    """

    def __init__(
        self,
        store,
        probe,
        record: ManagedRecord,
        primary: Endpoint,
        failover: Endpoint,
    ):
        """
        Initialize a Reconciler.

        Args:
            store: Record store (read/write of the published address)
            probe: Health probe
            record: Managed record
            primary: Primary endpoint
            failover: Failover endpoint
        """
        self.store = store
        self.probe = probe
        self.record = record
        self.primary = primary
        self.failover = failover
        self.logger = logging.getLogger("dns-failover.reconciler")

    async def run_once(self) -> RunResult:
        """
        Performs a single reconciliation pass.

        Provider errors propagate unchanged. A failed read stops the pass
        before the probe runs, so nothing is written.

        Returns:
            RunResult: What was found and what was done
        """
        current_ip = await self.store.read(self.record)
        self.logger.info(
            f"Current DNS IP for {self.record.hostname} is: {current_ip}"
        )

        status = await self.probe.check(self.primary)
        if status == HealthStatus.HEALTHY:
            self.logger.info("Primary server is healthy.")
        else:
            self.logger.info("Primary server appears to be down.")

        target = decide_target(status, self.primary, self.failover)
        label = target.role.value

        if current_ip == target.address:
            self.logger.info(
                f"DNS record already points to {label}. No update necessary."
            )
            return RunResult(
                current_ip=current_ip,
                desired_ip=target.address,
                status=status,
                changed=False,
                dry_run=getattr(self.store, "dry_run", False),
                primary_ip=self.primary.address,
            )

        if current_ip not in (self.primary.address, self.failover.address):
            self.logger.warning(
                f"DNS record points to unmanaged address {current_ip}, switching to {label}."
            )
        elif target.role == Role.PRIMARY:
            self.logger.info("DNS record mismatch, switching back to primary.")
        else:
            self.logger.info("Updating DNS record to failover server.")

        await self.store.write(self.record, target.address)
        return RunResult(
            current_ip=current_ip,
            desired_ip=target.address,
            status=status,
            changed=True,
            dry_run=getattr(self.store, "dry_run", False),
            primary_ip=self.primary.address,
        )
