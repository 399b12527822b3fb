"""Shared fakes for cache, selector and admin tests."""

import pytest

from inference_router import ServerDescriptor


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProber:
    """Returns canned servers and counts probe rounds."""

    def __init__(self, servers=None):
        self.servers = list(servers or [])
        self.calls = 0

    async def probe(self) -> list[ServerDescriptor]:
        self.calls += 1
        return list(self.servers)


def descriptor(port: int, model_id: str, healthy: bool = True) -> ServerDescriptor:
    return ServerDescriptor(
        port=port, model_id=model_id, base_url=f"http://127.0.0.1:{port}", healthy=healthy
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def prober():
    return FakeProber([descriptor(5005, "gemma-2-2b-it"), descriptor(5006, "gpt2")])
