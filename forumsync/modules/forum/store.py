"""
Forum Store - local thread cache kept in sync with the forum service.

The cache is an immutable tuple of threads that is replaced wholesale on
every change, so snapshots handed to listeners never change under them.
Mutations go to the remote service first; the cache only changes after
the service confirms.
"""

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from forumsync.core.exceptions import ForumClientError
from forumsync.models.forum import Comment, CommentRequest, Thread, ThreadRequest
from forumsync.modules.forum.client import ForumAPIClient
from forumsync.modules.forum.fallback import build_fallback_threads
from forumsync.modules.forum.ids import LocalId, PersistedId, classify_id
from forumsync.modules.forum.normalizer import (
    normalize_comment,
    normalize_thread,
    normalize_threads,
)

_UNSET: Any = object()


@dataclass(frozen=True)
class ForumSnapshot:
    """Point-in-time view of the store."""

    threads: tuple[Thread, ...]
    loading: bool
    error: str | None
    mutation_error: str | None


Listener = Callable[[ForumSnapshot], None]


class ForumStore:
    """
    Cache of forum threads with remote-confirmed mutations.

    ``loading`` and ``error`` describe the last thread fetch. Mutations
    report failure through their return value (None/False) and record
    the message in ``mutation_error``; they never raise for remote or
    network failures.

    Usage:
        async with ForumStore() as forum:
            thread = await forum.create_thread("Title", "Body", author_id=5)
            forum.add_listener(render)
    """

    def __init__(
        self,
        client: ForumAPIClient | None = None,
        fallback_factory: Callable[[], tuple[Thread, ...]] = build_fallback_threads,
    ) -> None:
        """
        Initialize forum store.

        Args:
            client: Forum API client (default: one built from settings)
            fallback_factory: Builds the placeholder threads shown when
                the first load fails
        """
        self.client = client or ForumAPIClient()
        self._fallback_factory = fallback_factory

        self._threads: tuple[Thread, ...] = ()
        self._loading = False
        self._error: str | None = None
        self._mutation_error: str | None = None

        self._listeners: list[Listener] = []
        self._refresh_seq = 0

    async def __aenter__(self) -> "ForumStore":
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Open the HTTP session and load the thread list."""
        await self.client.connect()
        await self.refresh()

    async def stop(self) -> None:
        """Close the HTTP session."""
        await self.client.disconnect()

    # ==================== State ====================

    @property
    def threads(self) -> tuple[Thread, ...]:
        return self._threads

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def mutation_error(self) -> str | None:
        return self._mutation_error

    def snapshot(self) -> ForumSnapshot:
        return ForumSnapshot(
            threads=self._threads,
            loading=self._loading,
            error=self._error,
            mutation_error=self._mutation_error,
        )

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked with a snapshot after each change."""
        self._listeners.append(listener)
        logger.debug(f"Forum listener added. Total: {len(self._listeners)}")

    def remove_listener(self, listener: Listener) -> None:
        """Unregister a callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)
            logger.debug(f"Forum listener removed. Total: {len(self._listeners)}")

    def _update(
        self,
        threads: tuple[Thread, ...] = _UNSET,
        loading: bool = _UNSET,
        error: str | None = _UNSET,
        mutation_error: str | None = _UNSET,
    ) -> None:
        """Apply state changes and notify listeners."""
        if threads is not _UNSET:
            self._threads = threads
        if loading is not _UNSET:
            self._loading = loading
        if error is not _UNSET:
            self._error = error
        if mutation_error is not _UNSET:
            self._mutation_error = mutation_error

        snapshot = self.snapshot()
        dead: list[Listener] = []
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"Dropping forum listener after error: {e}")
                dead.append(listener)
        for listener in dead:
            self.remove_listener(listener)

    def _mutation_failed(self, action: str, error: ForumClientError) -> None:
        logger.error(f"{action} error: {error.message}")
        self._update(mutation_error=error.message)

    def _map_thread(
        self,
        thread_id: str,
        change: Callable[[Thread], Thread],
    ) -> tuple[Thread, ...]:
        """Copy of the cache with ``change`` applied to one thread."""
        return tuple(
            change(thread) if thread.id == thread_id else thread
            for thread in self._threads
        )

    def _without_comment(self, thread_id: str, comment_id: str) -> tuple[Thread, ...]:
        return self._map_thread(
            thread_id,
            lambda thread: thread.model_copy(
                update={
                    "comments": tuple(
                        c for c in thread.comments if c.id != comment_id
                    )
                }
            ),
        )

    # ==================== Reads ====================

    async def refresh(self) -> None:
        """
        Reload the full thread list.

        Only the most recently issued refresh may write its result; a
        response that lands after a newer refresh started is discarded.
        When the load fails on an empty cache, placeholder content is
        shown and ``error`` keeps the failure message.
        """
        self._refresh_seq += 1
        seq = self._refresh_seq
        self._update(loading=True, error=None)

        try:
            payload = await self.client.list_threads()
        except ForumClientError as e:
            if seq != self._refresh_seq:
                logger.debug(f"Discarding stale forum fetch failure #{seq}")
                return
            logger.warning(f"Forum fetch error: {e.message}")
            threads = self._threads
            if not threads:
                logger.warning("Forum cache empty, showing placeholder content")
                threads = self._fallback_factory()
            self._update(threads=threads, loading=False, error=e.message)
            return
        except asyncio.CancelledError:
            if seq == self._refresh_seq:
                self._update(loading=False)
            raise

        if seq != self._refresh_seq:
            logger.debug(f"Discarding stale forum fetch #{seq}")
            return

        threads = normalize_threads(payload)
        logger.debug(f"Forum cache loaded with {len(threads)} threads")
        self._update(threads=threads, loading=False)

    def get_thread_by_id(self, thread_id: str) -> Thread | None:
        """
        Look a thread up in the cache.

        None means "not loaded yet", not "does not exist"; use
        fetch_thread_by_id() to ask the service.
        """
        return next((t for t in self._threads if t.id == thread_id), None)

    async def fetch_thread_by_id(self, thread_id: str) -> Thread | None:
        """
        Fetch one thread and merge it into the cache.

        An existing entry with the same id is replaced in place;
        otherwise the thread is prepended.

        Returns:
            The thread, or None on failure (``error`` is set)
        """
        try:
            payload = await self.client.get_thread(thread_id)
        except ForumClientError as e:
            logger.error(f"Forum thread fetch error: {e.message}")
            self._update(error=e.message)
            return None

        thread = normalize_thread(payload)
        if self.get_thread_by_id(thread.id) is not None:
            threads = self._map_thread(thread.id, lambda _: thread)
        else:
            threads = (thread, *self._threads)
        self._update(threads=threads)
        return thread

    async def search(self, query: str) -> list[Thread]:
        """
        Search threads server-side without touching the cache.

        Returns:
            Matching threads, or an empty list on failure
        """
        try:
            payload = await self.client.list_threads(query)
        except ForumClientError as e:
            self._mutation_failed("Forum search", e)
            return []
        return list(normalize_threads(payload))

    # ==================== Threads ====================

    async def create_thread(
        self,
        title: str,
        content: str,
        author_id: int | str | None,
        attachment: str | None = None,
    ) -> Thread | None:
        """
        Create a thread and put it at the head of the cache.

        Args:
            title: Thread title
            content: Thread body
            author_id: Creating user id
            attachment: Optional image data URI

        Returns:
            Created thread, or None on failure
        """
        request = ThreadRequest(
            title=title,
            content=content,
            author_id=author_id,
            attachment=attachment if isinstance(attachment, str) else None,
        )
        try:
            payload = await self.client.create_thread(request)
        except ForumClientError as e:
            self._mutation_failed("Create thread", e)
            return None

        thread = normalize_thread(payload)
        self._update(threads=(thread, *self._threads), mutation_error=None)
        return thread

    async def update_thread(
        self,
        thread_id: str,
        title: str,
        content: str,
        author_id: int | str | None = None,
        attachment: str | None = None,
    ) -> Thread | None:
        """
        Update a thread and replace the cached copy in place.

        Returns:
            Updated thread, or None on failure
        """
        request = ThreadRequest(
            title=title,
            content=content,
            author_id=author_id,
            attachment=attachment if isinstance(attachment, str) else None,
        )
        try:
            payload = await self.client.update_thread(thread_id, request)
        except ForumClientError as e:
            self._mutation_failed("Update thread", e)
            return None

        thread = normalize_thread(payload)
        self._update(
            threads=self._map_thread(thread.id, lambda _: thread),
            mutation_error=None,
        )
        return thread

    async def delete_thread(self, thread_id: str, author_id: int | str | None) -> bool:
        """
        Delete a thread.

        Placeholder threads (non-numeric ids) are removed locally without
        contacting the service.

        Args:
            thread_id: Thread id
            author_id: Acting user; None refuses the delete

        Returns:
            True if the thread was removed
        """
        if author_id is None:
            logger.warning(f"Refusing to delete thread {thread_id} without an author")
            return False

        ref = classify_id(thread_id)
        if isinstance(ref, LocalId):
            self._update(threads=tuple(t for t in self._threads if t.id != thread_id))
            return True

        try:
            await self.client.delete_thread(ref.value, author_id)
        except ForumClientError as e:
            self._mutation_failed("Delete thread", e)
            return False

        self._update(
            threads=tuple(t for t in self._threads if t.id != thread_id),
            mutation_error=None,
        )
        return True

    # ==================== Comments ====================

    async def add_comment(
        self,
        thread_id: str,
        content: str,
        author_id: int | str | None,
    ) -> Comment | None:
        """
        Post a comment and append it to its thread.

        The thread's ``updated_at`` follows the new comment.

        Returns:
            Created comment, or None on failure
        """
        request = CommentRequest(content=content, author_id=author_id)
        try:
            payload = await self.client.create_comment(thread_id, request)
        except ForumClientError as e:
            self._mutation_failed("Add comment", e)
            return None

        comment = normalize_comment(payload, thread_id=thread_id)
        threads = self._map_thread(
            thread_id,
            lambda thread: thread.model_copy(
                update={
                    "comments": (*thread.comments, comment),
                    "updated_at": comment.updated_at,
                }
            ),
        )
        self._update(threads=threads, mutation_error=None)
        return comment

    async def update_comment(
        self,
        thread_id: str,
        comment_id: str,
        content: str,
        author_id: int | str | None = None,
    ) -> Comment | None:
        """
        Update a comment and replace the cached copy.

        The owning thread is the one named in the response, falling back
        to ``thread_id``. If no cached thread matches, the cache is left
        alone.

        Returns:
            Updated comment, or None on failure
        """
        request = CommentRequest(content=content, author_id=author_id)
        try:
            payload = await self.client.update_comment(comment_id, request)
        except ForumClientError as e:
            self._mutation_failed("Update comment", e)
            return None

        owner = thread_id
        if isinstance(payload, Mapping) and payload.get("threadId") is not None:
            owner = str(payload["threadId"])

        comment = normalize_comment(payload, thread_id=owner)
        threads = self._map_thread(
            owner,
            lambda thread: thread.model_copy(
                update={
                    "comments": tuple(
                        comment if c.id == comment.id else c for c in thread.comments
                    ),
                    "updated_at": comment.updated_at,
                }
            ),
        )
        self._update(threads=threads, mutation_error=None)
        return comment

    async def delete_comment(
        self,
        thread_id: str,
        comment_id: str,
        author_id: int | str | None,
    ) -> bool:
        """
        Delete a comment.

        If either id is non-numeric the comment is placeholder content and
        is removed locally without contacting the service.

        Returns:
            True if the comment was removed
        """
        if author_id is None:
            logger.warning(f"Refusing to delete comment {comment_id} without an author")
            return False

        thread_ref = classify_id(thread_id)
        comment_ref = classify_id(comment_id)

        if not isinstance(comment_ref, PersistedId) or not isinstance(thread_ref, PersistedId):
            self._update(threads=self._without_comment(thread_id, comment_id))
            return True

        try:
            await self.client.delete_comment(comment_ref.value, author_id)
        except ForumClientError as e:
            self._mutation_failed("Delete comment", e)
            return False

        self._update(
            threads=self._without_comment(thread_id, comment_id),
            mutation_error=None,
        )
        return True


# Singleton instance shared by every screen
_forum_store: ForumStore | None = None
_forum_store_lock = asyncio.Lock()


async def get_forum_store() -> ForumStore:
    """
    Get or create the started forum store singleton.

    Concurrent first callers wait for the same start() to finish.
    """
    global _forum_store
    async with _forum_store_lock:
        if _forum_store is None:
            store = ForumStore()
            await store.start()
            _forum_store = store
    return _forum_store
