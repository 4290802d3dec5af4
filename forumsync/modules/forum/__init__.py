"""
Forum Module - Discussion threads kept in sync with the forum service.

Features:
- Thread and comment cache with change listeners
- Remote-confirmed create/update/delete
- Payload normalization
- Placeholder content when the service is down
- Shared edit/delete eligibility checks
- Recency sort, "mine" filter and local search over the cache
"""

from forumsync.modules.forum.client import ForumAPIClient
from forumsync.modules.forum.permissions import can_delete_thread, can_manage
from forumsync.modules.forum.store import ForumSnapshot, ForumStore, get_forum_store
from forumsync.modules.forum.views import filter_mine, search_threads, sort_by_recency

__all__ = [
    "ForumAPIClient",
    "ForumSnapshot",
    "ForumStore",
    "can_delete_thread",
    "can_manage",
    "filter_mine",
    "get_forum_store",
    "search_threads",
    "sort_by_recency",
]
