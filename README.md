# gokata

Small, self-contained building blocks for concurrent Python code:

- **`gokata.aggregator`**: `UserAggregator` fetches a user's profile and
  orders concurrently under a single timeout. If either fetch fails, the
  other is cancelled at once and the failure surfaces as an
  `AggregationError`.
- **`gokata.sharded_map`**: `ShardedMap` is a thread-safe map that spreads
  keys over several independently locked shards, chosen by an FNV-1a 64-bit
  hash of the key's text form (`hash_key`), to keep lock contention low.
- **`gokata.propagator`**: typed errors for a cloud storage upload flow
  (`AuthError`, `MetadataError`, `StorageError`, `StorageQuotaError`,
  `ContextError` and the fixed failure kinds such as `TokenExpiredError`),
  a `CloudStorageGateway` that wraps failures with context at every step,
  and helpers `is_timeout`, `is_temporary` and `wrap_with_context` that look
  through the whole chain of causes.

No third-party dependencies are needed at run time.

## Installation

```
pip install gokata
```

To run the test suite:

```
pip install "gokata[test]"
pytest
```

## Command line

```
gokata-aggregate
```

runs the aggregator against the built-in simulated services and prints the
combined result:

```
Final Output: Profile: Alice, Orders: 5
```

Options:

- `--user-id N`: the user to aggregate (default `1`).
- `--timeout SECONDS`: the overall deadline (default `2.0`).

If aggregation fails, the error is logged and the command exits with
status 1; on success it exits with status 0.

## Aggregating concurrently

`UserAggregator.aggregate` is a coroutine. By default it uses the simulated
`fetch_profile` (0.5 s, returns `"Alice"`) and `fetch_orders` (0.7 s,
returns `"5"`) and a two-second timeout; any of these, and the logger, can
be replaced when the aggregator is built. A fetcher is any async callable
taking the user id and returning a string.

```python
import asyncio
from gokata.aggregator import AggregationError, UserAggregator

async def slow_profile(user_id):
    await asyncio.sleep(5)
    return "Alice"

async def run():
    print(await UserAggregator().aggregate(1))
    # Profile: Alice, Orders: 5

    try:
        await UserAggregator(timeout=0.1, profile_func=slow_profile).aggregate(1)
    except AggregationError as exc:
        print("failed:", exc)
        # failed: fetchProfile failed: context deadline exceeded

asyncio.run(run())
```

`AggregationError` carries the failing step in `stage` (`"fetchProfile"`
or `"fetchOrders"`) and the underlying exception, or the text
`"context deadline exceeded"` when the timeout passed, in `reason`. Any
fetch still running when `aggregate` returns or raises is cancelled.

## Sharded map

```python
from gokata.sharded_map import ShardedMap

counts = ShardedMap(16)
counts.set("users:alice", 100)
counts.set("users:bob", 200)

counts.get("users:alice")        # 100
counts.get("users:carol", 0)     # 0
"users:bob" in counts            # True
len(counts)                      # 2

counts.delete("users:bob")
sorted(counts.keys())            # ['users:alice']
counts.shard_index("users:alice")  # index of the shard holding the key
```

`keys()` returns a snapshot taken shard by shard; its order is not
guaranteed. `delete` of a missing key does nothing. A shard count below 1
is rejected with `ValueError`.

## Error propagation

Every step of `CloudStorageGateway.upload_file` adds context to a failure
while keeping the original exception as its `__cause__`, so callers can
still ask what went wrong underneath:

```python
from gokata.propagator import (
    AuthError,
    TokenExpiredError,
    is_temporary,
    is_timeout,
    wrap_with_context,
)

cause = AuthError(
    op="validate_token",
    user_id="user-1",
    api_key="placeholder",
    err=TokenExpiredError(),
    timeout=False,
    temporary=True,
)
err = wrap_with_context(cause, "upload failed: %s", "auth")

str(err)            # 'upload failed: auth: auth error during validate_token for user user-1 (key=): token expired'
is_temporary(err)   # True
is_timeout(err)     # False
```

The API key is never shown in an `AuthError` message. `is_timeout` is true
when the chain holds a `TimeoutError` or a `ContextError` for a passed
deadline, or when the first error in the chain that carries a timeout flag
has it set. `is_temporary` looks at the first error in the chain that
carries a temporary flag. Both return `False` for `None`, and
`wrap_with_context(None, ...)` returns `None`.

The gateway validates the token, creates a file record sized to the data,
uploads the data under the record's id and then marks the record
`"completed"`. If the upload to storage fails, it first tries to mark the
record `"failed"` (any error from that is ignored) and then raises the
storage error wrapped with `"upload failed: storage"`.

## What this package does not do

The gateway talks only to the `AuthService`, `MetadataService` and
`StorageService` protocols; no real authentication, database or blob
storage backend is included, so you supply your own implementations. The
aggregator's default fetchers are simulations that sleep and return fixed
values; they do not contact any service.