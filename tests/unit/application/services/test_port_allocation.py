from __future__ import annotations

import pytest

from liveport.application.services.port_allocation import find_available_port


def _serving(*ports: int):
    checked: list[int] = []

    async def is_serving(port: int) -> bool:
        checked.append(port)
        return port in ports

    return is_serving, checked


@pytest.mark.asyncio
async def test_preferred_port_wins_when_free() -> None:
    is_serving, checked = _serving(3008)
    assert await find_available_port(3000, [3007, 3008], is_serving=is_serving) == 3000
    assert checked == [3000]


@pytest.mark.asyncio
async def test_taken_preferred_falls_back_in_order() -> None:
    is_serving, checked = _serving(3000, 3007)
    assert await find_available_port(3000, [3007, 3008, 3009], is_serving=is_serving) == 3008
    assert checked == [3000, 3007, 3008]


@pytest.mark.asyncio
async def test_preferred_is_not_rechecked_from_fallbacks() -> None:
    is_serving, checked = _serving(3007)
    assert await find_available_port(3007, [3007, 3008], is_serving=is_serving) == 3008
    assert checked == [3007, 3008]


@pytest.mark.asyncio
async def test_everything_taken_returns_none() -> None:
    is_serving, _ = _serving(3000, 3007, 3008)
    assert await find_available_port(3000, [3007, 3008], is_serving=is_serving) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("preferred", [None, 0])
async def test_missing_preferred_checks_nothing(preferred: int | None) -> None:
    is_serving, checked = _serving()
    assert await find_available_port(preferred, [3007], is_serving=is_serving) is None
    assert checked == []
