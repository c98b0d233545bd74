"""
Health probe module for DNS-Failover.

This module checks whether the primary server answers its health check. The
connection always goes to the server's literal address, never through public
DNS, so the result does not depend on where the record currently points.
"""

import asyncio
import logging
from typing import Optional

import httpx

from dns_failover.models.models import Endpoint, HealthStatus, normalize_hostname


class HealthProbe:
    """
    Probe that issues a single HTTPS GET against an endpoint's address.
    """

    def __init__(
        self,
        hostname: str,
        path: str = "/health",
        port: int = 443,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize a HealthProbe.

        Args:
            hostname: Public hostname presented for TLS (SNI) and the Host header
            path: Health check path
            port: HTTPS port of the server
            timeout: Total time budget for the probe, in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.hostname = normalize_hostname(hostname)
        self.path = path
        self.port = port
        self.timeout = timeout
        self.transport = transport
        self.logger = logging.getLogger("dns-failover.probe")

    def url_for(self, endpoint: Endpoint) -> str:
        """
        Build the request URL for an endpoint's literal address.

        Args:
            endpoint: Endpoint to probe

        Returns:
            str: URL with the address as host (IPv6 bracketed)
        """
        host = endpoint.address
        if endpoint.version == 6:
            host = f"[{host}]"
        if self.port != 443:
            host = f"{host}:{self.port}"
        return f"https://{host}{self.path}"

    @property
    def host_header(self) -> str:
        if self.port != 443:
            return f"{self.hostname}:{self.port}"
        return self.hostname

    async def check(self, endpoint: Endpoint) -> HealthStatus:
        """
        Check whether an endpoint is healthy.

        Any failure (connect, TLS, timeout, non-2xx status) is reported as
        UNHEALTHY; the cause is only logged.

        Args:
            endpoint: Endpoint to probe

        Returns:
            HealthStatus: HEALTHY if the server answered 2xx within the timeout
        """
        try:
            url = self.url_for(endpoint)
            self.logger.debug(
                f"Probing {endpoint.role.value} server at {url} (Host/SNI: {self.hostname}, timeout: {self.timeout}s)"
            )
            async with asyncio.timeout(self.timeout):
                async with httpx.AsyncClient(
                    timeout=self.timeout,
                    follow_redirects=False,
                    transport=self.transport,
                ) as client:
                    response = await client.get(
                        url,
                        headers={"Host": self.host_header},
                        extensions={"sni_hostname": self.hostname},
                    )
        except TimeoutError:
            self.logger.warning(
                f"Health check of {endpoint.address} did not complete within {self.timeout}s"
            )
            return HealthStatus.UNHEALTHY
        except httpx.TimeoutException as e:
            self.logger.warning(
                f"Health check of {endpoint.address} timed out after {self.timeout}s: {e!r}"
            )
            return HealthStatus.UNHEALTHY
        except httpx.HTTPError as e:
            self.logger.warning(f"Health check of {endpoint.address} failed: {e!r}")
            return HealthStatus.UNHEALTHY
        except OSError as e:
            # ssl.SSLError and socket errors not wrapped by the transport
            self.logger.warning(f"Health check of {endpoint.address} failed: {e!r}")
            return HealthStatus.UNHEALTHY
        except Exception as e:
            self.logger.exception(
                f"An unexpected error occurred while checking {endpoint.address}: {e}"
            )
            return HealthStatus.UNHEALTHY

        if not response.is_success:
            self.logger.warning(
                f"Health check of {endpoint.address} returned HTTP {response.status_code}"
            )
            return HealthStatus.UNHEALTHY

        self.logger.debug(
            f"Health check of {endpoint.address} returned HTTP {response.status_code}"
        )
        return HealthStatus.HEALTHY
