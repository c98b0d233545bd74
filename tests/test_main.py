import pytest

import dns_failover.__main__ as entry
from dns_failover.config.config import Config
from dns_failover.controller.controller import EXIT_CONFIG_ERROR, EXIT_OK, EXIT_PROVIDER_ERROR
from dns_failover.models.models import HealthStatus

from conftest import FAILOVER_IP, PRIMARY_IP, FakeProbe, FakeStore

CONFIG_YAML = """
cloudflare:
  api_token: token-abc
record:
  zone_id: zone123
  record_id: rec456
  hostname: example.com
endpoints:
  primary: 192.168.1.100
  failover: 34.56.78.90
"""


class ClosingStore(FakeStore):
    closed = False

    async def close(self):
        self.closed = True


@pytest.fixture
def wired(monkeypatch):
    """Replace the network components built by the entry point."""
    store = ClosingStore(content=FAILOVER_IP)
    probe = FakeProbe(HealthStatus.HEALTHY)
    monkeypatch.setattr(entry, "CloudflareRecordStore", lambda **kwargs: store)
    monkeypatch.setattr(entry, "HealthProbe", lambda *args, **kwargs: probe)
    return store, probe


@pytest.mark.asyncio
async def test_run_switches_record_and_closes_store(wired):
    store, probe = wired

    code = await entry.run(Config.from_string(CONFIG_YAML))

    assert code == EXIT_OK
    assert store.writes == [PRIMARY_IP]
    assert probe.checked[0].address == PRIMARY_IP
    assert store.closed


@pytest.mark.asyncio
async def test_run_reports_provider_failure(wired, read_error):
    store, _ = wired
    store.read_error = read_error

    code = await entry.run(Config.from_string(CONFIG_YAML))

    assert code == EXIT_PROVIDER_ERROR
    assert store.writes == []
    assert store.closed


def test_main_rejects_invalid_config(tmp_path, monkeypatch):
    path = tmp_path / "dns-failover.yaml"
    path.write_text(CONFIG_YAML.replace("zone_id: zone123", "zone_id: ''"))
    monkeypatch.setattr("sys.argv", ["dns-failover", str(path)])

    assert entry.main() == EXIT_CONFIG_ERROR


def test_main_runs_once(tmp_path, monkeypatch, wired):
    store, _ = wired
    path = tmp_path / "dns-failover.yaml"
    path.write_text(CONFIG_YAML)
    monkeypatch.setattr("sys.argv", ["dns-failover", str(path)])

    assert entry.main() == EXIT_OK
    assert store.writes == [PRIMARY_IP]
