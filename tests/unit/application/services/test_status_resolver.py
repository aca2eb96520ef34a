from __future__ import annotations

import pytest
from fixtures.probe_testkit import FakeClock, FakeReachabilityClient

from liveport.application.services.batch_scheduler import BatchScheduler
from liveport.application.services.probe_sequencer import ProbeSequencer
from liveport.application.services.status_resolver import StatusResolver
from liveport.domain.entities.project_port_query import ProjectPortQuery
from liveport.infrastructure.caching.port_result_cache import PortResultCache


def _resolver(client: FakeReachabilityClient, clock: FakeClock) -> StatusResolver:
    cache = PortResultCache(clock=clock)
    return StatusResolver(BatchScheduler(cache, ProbeSequencer(client)))


@pytest.mark.asyncio
async def test_shared_port_is_probed_once(clock: FakeClock) -> None:
    client = FakeReachabilityClient(serving={3005})
    resolver = _resolver(client, clock)

    result = await resolver.resolve(
        [
            ProjectPortQuery("matrix-cards", 3005),
            ProjectPortQuery("matrix-cards-v2", 3005),
            ProjectPortQuery("sleak-card", 3003),
        ]
    )

    assert result == {"matrix-cards": True, "matrix-cards-v2": True, "sleak-card": False}
    assert len(client.calls_for(3005)) == 1


@pytest.mark.asyncio
async def test_projects_without_port_are_not_running_and_not_probed(clock: FakeClock) -> None:
    client = FakeReachabilityClient(serving={3000})
    resolver = _resolver(client, clock)

    result = await resolver.resolve([{"id": "iframe-only"}, {"id": "app", "port": 3000}])

    assert result == {"iframe-only": False, "app": True}
    assert {c.port for c in client.calls} == {3000}


@pytest.mark.asyncio
async def test_no_ports_means_no_batch(clock: FakeClock) -> None:
    client = FakeReachabilityClient()
    resolver = _resolver(client, clock)

    assert await resolver.resolve([{"id": "a"}, {"id": "b", "port": None}]) == {
        "a": False,
        "b": False,
    }
    assert client.calls == []
    assert await resolver.resolve([]) == {}


@pytest.mark.asyncio
async def test_bad_limit_is_rejected_even_without_ports(clock: FakeClock) -> None:
    resolver = _resolver(FakeReachabilityClient(), clock)
    with pytest.raises(ValueError):
        await resolver.resolve([{"id": "a"}], concurrency_limit=0)
