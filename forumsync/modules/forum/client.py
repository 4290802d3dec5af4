"""
Forum HTTP API Client.

Provides async interface to the remote forum service for:
- Thread listing, lookup and search
- Thread create/update/delete
- Comment create/update/delete

Methods return raw JSON payloads; normalization happens in the store.
"""

import asyncio
from typing import Any

import aiohttp
from loguru import logger

from forumsync.core.config import settings
from forumsync.core.exceptions import ForumRequestError, ForumUnavailableError
from forumsync.models.forum import AuthorRequest, CommentRequest, ThreadRequest


class ForumAPIClient:
    """
    Async client for the forum REST API.

    Usage:
        async with ForumAPIClient() as client:
            threads = await client.list_threads()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        """
        Initialize forum client.

        Args:
            base_url: Forum API root, e.g. http://host:3000/api/forum
                (default from settings)
            timeout: Total request timeout in seconds (default from
                settings; aiohttp's default when unset)
        """
        self.base_url = (base_url or settings.forum_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.forum_api_timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "ForumAPIClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()

    async def connect(self) -> None:
        """Create HTTP session."""
        if self._session is None or self._session.closed:
            if self.timeout is None:
                self._session = aiohttp.ClientSession()
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                self._session = aiohttp.ClientSession(timeout=timeout)
            logger.info(f"Forum client connected to {self.base_url}")

    async def disconnect(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.info("Forum client disconnected")

    async def _request(
        self,
        method: str,
        endpoint: str,
        error_message: str,
        expect_body: bool = True,
        **kwargs: Any,
    ) -> Any:
        """
        Make HTTP request to the forum API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            error_message: Message used when a failed response has no
                ``error`` field
            expect_body: Parse and return the JSON body on success
            **kwargs: Additional aiohttp request arguments

        Returns:
            Decoded JSON body, or None when expect_body is False

        Raises:
            ForumUnavailableError: If the service is unreachable
            ForumRequestError: On non-2xx status or an undecodable body
        """
        if self._session is None or self._session.closed:
            await self.connect()

        url = f"{self.base_url}{endpoint}"

        try:
            async with self._session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    raise ForumRequestError(
                        await self._error_message(response, error_message),
                        status_code=response.status,
                        details={"method": method, "endpoint": endpoint},
                    )
                if not expect_body:
                    return None
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
                if body is None:
                    raise ForumRequestError(
                        error_message,
                        status_code=response.status,
                        details={"method": method, "endpoint": endpoint, "body": "missing"},
                    )
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Cannot reach forum service at {url}: {e}")
            raise ForumUnavailableError(
                f"Forum service unreachable: {e}",
                details={"method": method, "endpoint": endpoint},
            ) from e

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse, default: str) -> str:
        """Extract the ``error`` field of a failed response."""
        try:
            body = await response.json(content_type=None)
        except (ValueError, aiohttp.ClientError):
            return default
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return default

    # ==================== Threads ====================

    async def list_threads(self, query: str | None = None) -> Any:
        """
        Get all threads, newest activity first.

        Args:
            query: Optional search term matched server-side against
                titles, bodies and comments

        Returns:
            List of raw thread objects
        """
        params = {"q": query} if query else None
        return await self._request(
            "GET",
            "/threads",
            error_message="Unable to load forum threads",
            params=params,
        )

    async def get_thread(self, thread_id: str) -> Any:
        """Get a single raw thread."""
        return await self._request(
            "GET",
            f"/threads/{thread_id}",
            error_message="Thread not found",
        )

    async def create_thread(self, payload: ThreadRequest) -> Any:
        """
        Create a thread.

        Args:
            payload: Title, content, author and optional attachment

        Returns:
            Raw thread object as stored by the service
        """
        return await self._request(
            "POST",
            "/threads",
            error_message="Unable to create thread",
            json=payload.model_dump(by_alias=True),
        )

    async def update_thread(self, thread_id: str, payload: ThreadRequest) -> Any:
        """Replace a thread's title, content and attachment."""
        return await self._request(
            "PUT",
            f"/threads/{thread_id}",
            error_message="Unable to update thread",
            json=payload.model_dump(by_alias=True),
        )

    async def delete_thread(self, thread_id: int, author_id: int | str) -> None:
        """
        Delete a thread.

        Args:
            thread_id: Persisted thread id
            author_id: Acting user, sent as the ``authorId`` query parameter
        """
        await self._request(
            "DELETE",
            f"/threads/{thread_id}",
            error_message="Unable to delete thread",
            expect_body=False,
            params={"authorId": str(author_id)},
        )

    # ==================== Comments ====================

    async def create_comment(self, thread_id: str, payload: CommentRequest) -> Any:
        """Post a comment to a thread; returns the raw comment."""
        return await self._request(
            "POST",
            f"/threads/{thread_id}/comments",
            error_message="Unable to post comment",
            json=payload.model_dump(by_alias=True),
        )

    async def update_comment(self, comment_id: str, payload: CommentRequest) -> Any:
        """Replace a comment's content; returns the raw comment."""
        return await self._request(
            "PUT",
            f"/comments/{comment_id}",
            error_message="Unable to update comment",
            json=payload.model_dump(by_alias=True),
        )

    async def delete_comment(self, comment_id: int, author_id: int | str) -> None:
        """
        Delete a comment.

        Args:
            comment_id: Persisted comment id
            author_id: Acting user, sent in the JSON body
        """
        await self._request(
            "DELETE",
            f"/comments/{comment_id}",
            error_message="Unable to delete comment",
            expect_body=False,
            json=AuthorRequest(author_id=author_id).model_dump(by_alias=True),
        )
