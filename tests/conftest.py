import pytest

from dns_failover.errors import ProviderReadError, ProviderWriteError
from dns_failover.models.models import Endpoint, HealthStatus, ManagedRecord, Role

PRIMARY_IP = "192.168.1.100"
FAILOVER_IP = "34.56.78.90"


class FakeStore:
    """In-memory record store that counts calls."""

    def __init__(self, content=PRIMARY_IP, read_error=None, write_error=None):
        self.content = content
        self.read_error = read_error
        self.write_error = write_error
        self.dry_run = False
        self.reads = 0
        self.writes = []

    async def read(self, record):
        self.reads += 1
        if self.read_error:
            raise self.read_error
        return self.content

    async def write(self, record, new_ip):
        self.writes.append(new_ip)
        if self.write_error:
            raise self.write_error
        self.content = new_ip


class FakeProbe:
    """Probe returning a fixed status and remembering what it was asked to check."""

    def __init__(self, status=HealthStatus.HEALTHY):
        self.status = status
        self.checked = []

    async def check(self, endpoint):
        self.checked.append(endpoint)
        return self.status


@pytest.fixture
def record():
    return ManagedRecord(
        zone_id="zone123",
        record_id="rec456",
        hostname="example.com",
        record_type="A",
        ttl=120,
        proxied=True,
    )


@pytest.fixture
def primary():
    return Endpoint(Role.PRIMARY, PRIMARY_IP)


@pytest.fixture
def failover():
    return Endpoint(Role.FAILOVER, FAILOVER_IP)


@pytest.fixture
def read_error():
    return ProviderReadError("Cloudflare API Error", payload={"success": False}, status_code=500)


@pytest.fixture
def write_error():
    return ProviderWriteError("Cloudflare API Error", payload={"success": False}, status_code=400)
