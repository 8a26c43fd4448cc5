"""Conflict resolution between the local and remote versions of a task.

Implements whole-record "last write wins":
1. The version with the more recent updated_at wins entirely
2. On an exact tie the local version wins
3. Fields are never merged; the loser is discarded

Always pass the local task as the first argument.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tasksync.client.models import Task


def resolve(local: Task, remote: Task) -> Task:
    """Pick the winning version of a task.

    Args:
        local: Task as stored in the local replica.
        remote: Task as reported by the remote authority.

    Returns:
        local if local.updated_at >= remote.updated_at, else remote.
    """
    if local.updated_at >= remote.updated_at:
        return local
    return remote
