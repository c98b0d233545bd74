import asyncio

import httpx
import pytest

from dns_failover.controller.controller import (
    EXIT_OK,
    EXIT_PROVIDER_ERROR,
    Controller,
)
from dns_failover.controller.reconciler import Reconciler
from dns_failover.errors import ProviderReadError
from dns_failover.models.models import HealthStatus
from dns_failover.provider.cloudflare import CloudflareRecordStore

from conftest import FAILOVER_IP, PRIMARY_IP, FakeProbe, FakeStore


def make_controller(store, probe, record, primary, failover, **kwargs):
    reconciler = Reconciler(store, probe, record, primary, failover)
    return Controller(reconciler, **kwargs)


@pytest.mark.asyncio
async def test_failback_exits_zero(record, primary, failover):
    store = FakeStore(content=FAILOVER_IP)
    controller = make_controller(store, FakeProbe(HealthStatus.HEALTHY), record, primary, failover)

    assert await controller.run() == EXIT_OK
    assert store.writes == [PRIMARY_IP]
    assert controller.writes_total == 1
    assert controller.healthy


@pytest.mark.asyncio
async def test_provider_read_error_exits_non_zero(record, primary, failover):
    error = ProviderReadError("Cloudflare API Error", payload={"success": False}, status_code=500)
    store = FakeStore(read_error=error)
    controller = make_controller(store, FakeProbe(), record, primary, failover)

    assert await controller.run() == EXIT_PROVIDER_ERROR
    assert store.writes == []
    assert controller.failures_total == 1
    assert controller.last_error is error
    assert not controller.healthy


@pytest.mark.asyncio
async def test_recovers_after_failed_pass(record, primary, failover, read_error):
    store = FakeStore(content=PRIMARY_IP, read_error=read_error)
    controller = make_controller(store, FakeProbe(), record, primary, failover)

    await controller.run_once()
    store.read_error = None
    result_code = await controller.run_once()

    assert result_code == EXIT_OK
    assert controller.healthy
    assert controller.runs_total == 2
    assert controller.last_result.changed is False


@pytest.mark.asyncio
async def test_skips_pass_while_previous_is_running(record, primary, failover):
    store = FakeStore(content=FAILOVER_IP)
    controller = make_controller(store, FakeProbe(), record, primary, failover)

    async with controller._lock:
        assert await controller.run_once() == EXIT_OK

    assert store.reads == 0
    assert controller.runs_total == 0


@pytest.mark.asyncio
async def test_loop_keeps_running_after_errors(record, primary, failover, read_error):
    store = FakeStore(read_error=read_error)
    controller = make_controller(
        store, FakeProbe(), record, primary, failover, interval=0.01, once=False
    )

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(controller.run(), timeout=0.1)

    assert store.reads > 1
    assert store.writes == []
    assert controller.failures_total == store.reads


@pytest.mark.asyncio
async def test_server_error_on_read_never_writes(record, primary, failover):
    methods = []

    def handler(request):
        methods.append(request.method)
        return httpx.Response(500, json={"success": False, "errors": [], "result": None})

    store = CloudflareRecordStore(
        api_token="token-abc",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    probe = FakeProbe(HealthStatus.UNHEALTHY)
    controller = make_controller(store, probe, record, primary, failover)

    assert await controller.run() == EXIT_PROVIDER_ERROR
    assert methods == ["GET"]
    assert probe.checked == []
