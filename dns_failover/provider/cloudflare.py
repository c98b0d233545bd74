"""
Cloudflare provider module for DNS-Failover.

This module is responsible for reading and republishing the managed DNS record
through the Cloudflare API.
"""

import logging
from typing import Optional, Type

import cloudflare
import httpx

from dns_failover.errors import (
    ProviderAuthError,
    ProviderError,
    ProviderReadError,
    ProviderWriteError,
)
from dns_failover.models.models import ManagedRecord


class CloudflareRecordStore:
    """
    Record store backed by the Cloudflare DNS records API.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        api_email: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        dry_run: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize a CloudflareRecordStore.

        Args:
            api_token: Cloudflare API token
            api_email: Account email, used with api_key when no token is given
            api_key: Global API key, used with api_email when no token is given
            timeout: Timeout for each API call, in seconds
            dry_run: Whether to skip writes
            http_client: Optional httpx client (used by tests)
        """
        self.timeout = timeout
        self.dry_run = dry_run
        self.logger = logging.getLogger("dns-failover.provider.cloudflare")

        if api_token:
            credentials = {"api_token": api_token}
        else:
            credentials = {"api_email": api_email, "api_key": api_key}

        # Retries are left to the next scheduled run
        self.cf = cloudflare.AsyncCloudflare(
            **credentials,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def read(self, record: ManagedRecord) -> str:
        """
        Returns the IP currently published in the record.

        Args:
            record: Managed record

        Returns:
            str: Current record content

        Raises:
            ProviderReadError: If the API call fails or returns no content
        """
        self.logger.debug(
            f"Fetching DNS record {record.record_id} in zone {record.zone_id}"
        )
        try:
            result = await self.cf.dns.records.get(
                dns_record_id=record.record_id, zone_id=record.zone_id
            )
        except cloudflare.CloudflareError as e:
            raise self._translate(
                e, ProviderReadError, f"reading DNS record for {record.hostname}"
            ) from e

        content = getattr(result, "content", None)
        if not content:
            self.logger.error(
                f"Cloudflare returned no content for DNS record {record.record_id}: {result}"
            )
            raise ProviderReadError(
                f"Cloudflare response for {record.hostname} has no record content",
                payload=result,
            )
        return content

    async def write(self, record: ManagedRecord, new_ip: str) -> None:
        """
        Republishes the record pointing at new_ip.

        The whole record is replaced: type, name, content, ttl and proxied are
        always sent.

        Args:
            record: Managed record
            new_ip: Address to publish

        Raises:
            ProviderWriteError: If the API call fails or does not confirm the new content
        """
        if self.dry_run:
            self.logger.info(
                f"Dry run mode, not updating {record.record_type} {record.hostname} -> {new_ip}"
            )
            return

        self.logger.info(
            f"Updating DNS record: {record.record_type} {record.hostname} -> {new_ip} (TTL: {record.ttl}, Proxied: {record.proxied})"
        )
        try:
            result = await self.cf.dns.records.update(
                dns_record_id=record.record_id,
                zone_id=record.zone_id,
                type=record.record_type,
                name=record.hostname,
                content=new_ip,
                ttl=record.ttl,
                proxied=record.proxied,
            )
        except cloudflare.CloudflareError as e:
            raise self._translate(
                e, ProviderWriteError, f"updating DNS record for {record.hostname}"
            ) from e

        content = getattr(result, "content", None)
        if content != new_ip:
            self.logger.error(
                f"Cloudflare did not confirm update of {record.hostname} to {new_ip}: {result}"
            )
            raise ProviderWriteError(
                f"Cloudflare did not confirm update of {record.hostname} to {new_ip}",
                payload=result,
            )
        self.logger.info("DNS update successful.")

    def _translate(
        self,
        e: cloudflare.CloudflareError,
        error_cls: Type[ProviderError],
        action: str,
    ) -> ProviderError:
        """
        Logs an SDK error with its raw payload and converts it to a ProviderError.

        Args:
            e: Error raised by the Cloudflare SDK
            error_cls: ProviderReadError or ProviderWriteError
            action: Description of the failed call, for messages

        Returns:
            ProviderError: Error to raise
        """
        if isinstance(e, cloudflare.APIStatusError):
            payload = e.body
            self.logger.error(
                f"Cloudflare API Error {action}: HTTP {e.status_code}. Response: {payload}"
            )
            if e.status_code in (401, 403):
                error_cls = ProviderAuthError
            error = error_cls(
                f"Cloudflare API Error {action}", payload=payload, status_code=e.status_code
            )
        elif isinstance(e, cloudflare.APITimeoutError):
            self.logger.error(f"Cloudflare API timed out {action} after {self.timeout}s")
            error = error_cls(f"Cloudflare API timed out {action}")
        elif isinstance(e, cloudflare.APIConnectionError):
            self.logger.error(f"Cloudflare API unreachable {action}: {e}")
            error = error_cls(f"Cloudflare API unreachable {action}: {e}")
        elif isinstance(e, cloudflare.APIError):
            payload = getattr(e, "body", None)
            self.logger.error(f"Cloudflare API Error {action}: {e}. Response: {payload}")
            error = error_cls(f"Cloudflare API Error {action}: {e}", payload=payload)
        else:
            self.logger.error(f"General Cloudflare Error {action}: {e}")
            error = error_cls(f"General Cloudflare Error {action}: {e}")
        return error

    async def close(self) -> None:
        await self.cf.close()
