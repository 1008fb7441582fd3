"""Concurrent aggregation of a user's profile and orders under a deadline."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Awaitable, Callable

Fetcher = Callable[[int], Awaitable[str]]

DEFAULT_TIMEOUT = 2.0
DEADLINE_EXCEEDED = "context deadline exceeded"


class AggregationError(Exception):
    """Raised when one of the fetches fails or the deadline passes."""

    def __init__(self, stage: str, reason: BaseException | str) -> None:
        self.stage = stage
        self.reason = reason
        super().__init__(f"{stage} failed: {reason}")


async def fetch_profile(user_id: int) -> str:
    """Simulate a profile lookup that takes half a second."""
    await asyncio.sleep(0.5)
    return "Alice"


async def fetch_orders(user_id: int) -> str:
    """Simulate an order-count lookup that takes 0.7 seconds."""
    await asyncio.sleep(0.7)
    return "5"


class UserAggregator:
    """Runs the profile and order fetches concurrently and combines them.

    The first failure cancels the other fetch; the whole operation is
    bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
        profile_func: Fetcher = fetch_profile,
        order_func: Fetcher = fetch_orders,
    ) -> None:
        self.timeout = timeout
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.profile_func = profile_func
        self.order_func = order_func

    async def aggregate(self, user_id: int) -> str:
        """Return ``"Profile: <p>, Orders: <o>"`` or raise AggregationError."""
        stages = {
            "fetchProfile": asyncio.ensure_future(self.profile_func(user_id)),
            "fetchOrders": asyncio.ensure_future(self.order_func(user_id)),
        }
        try:
            done, pending = await asyncio.wait(
                stages.values(),
                timeout=self.timeout,
                return_when=asyncio.FIRST_EXCEPTION,
            )
            for stage, task in stages.items():
                if task in done and task.exception() is not None:
                    exc = task.exception()
                    raise AggregationError(stage, exc) from exc
            if pending:
                stage = next(name for name, task in stages.items() if task in pending)
                self.logger.debug("aggregation deadline passed for user %s", user_id)
                raise AggregationError(stage, DEADLINE_EXCEEDED) from TimeoutError(
                    DEADLINE_EXCEEDED
                )
            profile = stages["fetchProfile"].result()
            orders = stages["fetchOrders"].result()
        finally:
            leftover = [task for task in stages.values() if not task.done()]
            for task in leftover:
                task.cancel()
            if leftover:
                await asyncio.gather(*leftover, return_exceptions=True)
        return f"Profile: {profile}, Orders: {orders}"


def main(argv: list[str] | None = None) -> int:
    """Aggregate one user's data and print the result."""
    parser = argparse.ArgumentParser(description="Aggregate a user's profile and orders.")
    parser.add_argument("--user-id", type=int, default=1)
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    args = parser.parse_args(argv)

    aggregator = UserAggregator(timeout=args.timeout)
    try:
        result = asyncio.run(aggregator.aggregate(args.user_id))
    except AggregationError as exc:
        aggregator.logger.error("Aggregation failed: %s", exc)
        return 1
    print("Final Output:", result)
    return 0