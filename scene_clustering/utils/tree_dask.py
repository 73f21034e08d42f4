"""Utilities to build independent subtrees concurrently using Dask futures."""

from __future__ import annotations

from typing import Any, Callable, Sequence, TypeVar

from dask.distributed import Client, Future

SubtreeT = TypeVar("SubtreeT")


def submit_subtree_builds(
    client: Client,
    build_fn: Callable[..., SubtreeT],
    shared: Any,
    subtree_args: Sequence[tuple[Any, ...]],
) -> list[Future]:
    """
    Submit one task per subtree, all reading the same shared, read-only payload.

    Args:
        client: Active Dask client used to submit tasks.
        build_fn: Callable invoked on a worker as ``build_fn(shared, *args)`` for every entry of `subtree_args`.
        shared: Payload scattered once to the workers (e.g. the scene graph) instead of once per task.
        subtree_args: Per-subtree positional arguments, in the order the subtrees should be returned.

    Returns:
        Futures in the same order as `subtree_args`.
    """
    [shared_future] = client.scatter([shared], broadcast=True)
    return [client.submit(build_fn, shared_future, *args, pure=False) for args in subtree_args]


def gather_subtrees(client: Client, futures: Sequence[Future]) -> tuple[SubtreeT, ...]:
    """
    Gather subtree futures back into concrete values, preserving their order.

    Args:
        client: Active Dask client used to gather results.
        futures: Futures returned by `submit_subtree_builds`.

    Returns:
        Tuple of built subtrees, one per future.
    """
    return tuple(client.gather(list(futures)))
