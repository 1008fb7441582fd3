import asyncio
import time

import pytest

from gokata.aggregator import (
    AggregationError,
    UserAggregator,
    fetch_orders,
    fetch_profile,
    main,
)


@pytest.mark.asyncio
async def test_success_case():
    agg = UserAggregator(timeout=1.0)
    result = await agg.aggregate(1)
    assert result == "Profile: Alice, Orders: 5"


@pytest.mark.asyncio
async def test_timeout_case():
    agg = UserAggregator(timeout=0.1)
    start = time.monotonic()
    with pytest.raises(AggregationError) as info:
        await agg.aggregate(1)
    assert "context deadline exceeded" in str(info.value)
    assert time.monotonic() - start < 0.45


@pytest.mark.asyncio
async def test_domino_effect_fails_fast():
    cancelled = []

    async def profile(user_id):
        raise RuntimeError("profile service exploded")

    async def orders(user_id):
        try:
            await asyncio.sleep(1.0)
        except asyncio.CancelledError:
            cancelled.append(user_id)
            raise
        return "5"

    agg = UserAggregator(timeout=2.0, profile_func=profile, order_func=orders)
    start = time.monotonic()
    with pytest.raises(AggregationError) as info:
        await agg.aggregate(7)
    duration = time.monotonic() - start
    assert "profile service exploded" in str(info.value)
    assert str(info.value).startswith("fetchProfile failed")
    assert isinstance(info.value.__cause__, RuntimeError)
    assert duration < 0.1
    assert cancelled == [7]


@pytest.mark.asyncio
async def test_orders_failure_is_labelled():
    async def profile(user_id):
        return "Bob"

    async def orders(user_id):
        raise ValueError("orders down")

    agg = UserAggregator(profile_func=profile, order_func=orders)
    with pytest.raises(AggregationError) as info:
        await agg.aggregate(1)
    assert str(info.value) == "fetchOrders failed: orders down"
    assert info.value.stage == "fetchOrders"


@pytest.mark.asyncio
async def test_custom_fetchers_receive_user_id():
    seen = []

    async def profile(user_id):
        seen.append(("p", user_id))
        return f"user{user_id}"

    async def orders(user_id):
        seen.append(("o", user_id))
        return "12"

    agg = UserAggregator(profile_func=profile, order_func=orders)
    assert await agg.aggregate(3) == "Profile: user3, Orders: 12"
    assert sorted(seen) == [("o", 3), ("p", 3)]


@pytest.mark.asyncio
async def test_default_fetchers():
    assert await fetch_profile(1) == "Alice"
    assert await fetch_orders(1) == "5"


def test_defaults():
    agg = UserAggregator()
    assert agg.timeout == 2.0
    assert agg.profile_func is fetch_profile
    assert agg.order_func is fetch_orders


def test_main_prints_result(capsys):
    assert main([]) == 0
    assert capsys.readouterr().out.strip() == "Final Output: Profile: Alice, Orders: 5"


def test_main_reports_timeout(capsys):
    assert main(["--timeout", "0.05"]) == 1
    assert "Final Output" not in capsys.readouterr().out