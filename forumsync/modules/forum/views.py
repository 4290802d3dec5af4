"""
Read-side helpers for forum screens.

The cache keeps arrival order; these return display orderings and
filtered selections without touching it.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from forumsync.models.forum import Thread
from forumsync.models.user import Actor
from forumsync.modules.forum.permissions import actor_can_manage

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp; unparseable values sort as oldest.
    """
    if not value:
        return _EPOCH
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def sort_by_recency(threads: Iterable[Thread], newest_first: bool = True) -> list[Thread]:
    """Order threads by ``updated_at``."""
    return sorted(
        threads,
        key=lambda thread: parse_timestamp(thread.updated_at),
        reverse=newest_first,
    )


def filter_mine(threads: Iterable[Thread], actor: Actor | None) -> list[Thread]:
    """Threads the actor may manage."""
    return [thread for thread in threads if actor_can_manage(thread, actor)]


def search_threads(threads: Iterable[Thread], query: str) -> list[Thread]:
    """
    Case-insensitive match on title, content or any comment content.

    Args:
        threads: Threads to search
        query: Search text; blank matches everything

    Returns:
        Matching threads in input order
    """
    threads = list(threads)
    needle = query.strip().lower()
    if not needle:
        return threads

    return [
        thread
        for thread in threads
        if needle in thread.title.lower()
        or needle in thread.content.lower()
        or any(needle in comment.content.lower() for comment in thread.comments)
    ]
