"""Fixtures running a fake forum service on a local port.

The fake keeps threads in memory and speaks the same JSON shapes as the
real service, including ``{"error": ...}`` bodies on failure.
"""

import socket
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from forumsync.modules.forum.client import ForumAPIClient

USERS: dict[int, dict[str, Any]] = {
    5: {"id": 5, "username": "alice", "email": "alice@example.com", "role": "Student"},
    7: {"id": 7, "username": "bob", "email": "bob@example.com", "role": "Teacher"},
}


class FakeForumService:
    """In-memory stand-in for the forum REST API."""

    def __init__(self) -> None:
        self.threads: dict[int, dict[str, Any]] = {}
        self.requests: list[tuple[str, str, Any]] = []
        self.fail_status: int | None = None
        self.fail_body: dict[str, Any] | None = None
        self.base_url = ""
        self._next_id = 100
        self._clock = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)

    # ==================== Helpers ====================

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _now(self) -> str:
        self._clock += timedelta(minutes=1)
        return self._clock.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def _author(self, author_id: Any) -> dict[str, Any] | None:
        try:
            return USERS.get(int(author_id))
        except (TypeError, ValueError):
            return None

    def _find_comment(self, comment_id: int) -> tuple[dict[str, Any], dict[str, Any]] | None:
        for thread in self.threads.values():
            for comment in thread["comments"]:
                if comment["id"] == comment_id:
                    return thread, comment
        return None

    def seed_thread(self, title: str, content: str, author_id: int = 5) -> dict[str, Any]:
        now = self._now()
        thread = {
            "id": self._new_id(),
            "title": title,
            "content": content,
            "attachment": None,
            "authorId": author_id,
            "author": self._author(author_id),
            "createdAt": now,
            "updatedAt": now,
            "comments": [],
        }
        self.threads[thread["id"]] = thread
        return thread

    def seed_comment(self, thread_id: int, content: str, author_id: int = 7) -> dict[str, Any]:
        now = self._now()
        comment = {
            "id": self._new_id(),
            "threadId": thread_id,
            "content": content,
            "authorId": author_id,
            "author": self._author(author_id),
            "createdAt": now,
            "updatedAt": now,
        }
        self.threads[thread_id]["comments"].append(comment)
        self.threads[thread_id]["updatedAt"] = now
        return comment

    # ==================== Application ====================

    def app(self) -> web.Application:
        @web.middleware
        async def record(request: web.Request, handler: Any) -> web.StreamResponse:
            body = await request.json() if request.can_read_body else None
            self.requests.append((request.method, request.path_qs, body))
            if self.fail_status is not None:
                return web.json_response(self.fail_body or {}, status=self.fail_status)
            return await handler(request)

        app = web.Application(middlewares=[record])
        app.router.add_get("/api/forum/threads", self.list_threads)
        app.router.add_post("/api/forum/threads", self.create_thread)
        app.router.add_get("/api/forum/threads/{id}", self.get_thread)
        app.router.add_put("/api/forum/threads/{id}", self.update_thread)
        app.router.add_delete("/api/forum/threads/{id}", self.delete_thread)
        app.router.add_post("/api/forum/threads/{id}/comments", self.create_comment)
        app.router.add_put("/api/forum/comments/{id}", self.update_comment)
        app.router.add_delete("/api/forum/comments/{id}", self.delete_comment)
        return app

    def _thread_or_error(self, request: web.Request) -> dict[str, Any] | web.Response:
        try:
            thread_id = int(request.match_info["id"])
        except ValueError:
            return web.json_response({"error": "Invalid thread id"}, status=400)
        thread = self.threads.get(thread_id)
        if thread is None:
            return web.json_response({"error": "Thread not found"}, status=404)
        return thread

    async def list_threads(self, request: web.Request) -> web.Response:
        term = request.query.get("q", "").strip()
        threads = [
            t for t in self.threads.values()
            if not term
            or term in t["title"]
            or term in t["content"]
            or any(term in c["content"] for c in t["comments"])
        ]
        threads.sort(key=lambda t: t["updatedAt"], reverse=True)
        return web.json_response(threads)

    async def get_thread(self, request: web.Request) -> web.Response:
        thread = self._thread_or_error(request)
        if isinstance(thread, web.Response):
            return thread
        return web.json_response(thread)

    async def create_thread(self, request: web.Request) -> web.Response:
        body = await request.json()
        if not body.get("title") or not body.get("content"):
            return web.json_response({"error": "Title and content are required"}, status=400)
        thread = self.seed_thread(body["title"], body["content"], body.get("authorId"))
        thread["attachment"] = body.get("attachment")
        return web.json_response(thread, status=201)

    async def update_thread(self, request: web.Request) -> web.Response:
        thread = self._thread_or_error(request)
        if isinstance(thread, web.Response):
            return thread
        body = await request.json()
        if body.get("authorId") != thread["authorId"]:
            return web.json_response({"error": "You can only edit your own threads"}, status=403)
        thread.update(
            title=body["title"],
            content=body["content"],
            attachment=body.get("attachment"),
            updatedAt=self._now(),
        )
        return web.json_response(thread)

    async def delete_thread(self, request: web.Request) -> web.Response:
        thread = self._thread_or_error(request)
        if isinstance(thread, web.Response):
            return thread
        if request.query.get("authorId") != str(thread["authorId"]):
            return web.json_response({"error": "You can only delete your own threads"}, status=403)
        del self.threads[thread["id"]]
        return web.Response(status=204)

    async def create_comment(self, request: web.Request) -> web.Response:
        thread = self._thread_or_error(request)
        if isinstance(thread, web.Response):
            return thread
        body = await request.json()
        comment = self.seed_comment(thread["id"], body["content"], body.get("authorId"))
        # The service answers without threadId; the client merges it in.
        return web.json_response({k: v for k, v in comment.items() if k != "threadId"}, status=201)

    async def update_comment(self, request: web.Request) -> web.Response:
        found = self._find_comment(int(request.match_info["id"]))
        if found is None:
            return web.json_response({"error": "Comment not found"}, status=404)
        thread, comment = found
        body = await request.json()
        now = self._now()
        comment.update(content=body["content"], updatedAt=now)
        thread["updatedAt"] = now
        return web.json_response(comment)

    async def delete_comment(self, request: web.Request) -> web.Response:
        found = self._find_comment(int(request.match_info["id"]))
        if found is None:
            return web.json_response({"error": "Comment not found"}, status=404)
        thread, comment = found
        body = await request.json()
        if body.get("authorId") != comment["authorId"]:
            return web.json_response({"error": "You can only delete your own comments"}, status=403)
        thread["comments"].remove(comment)
        return web.json_response({"success": True})


@pytest_asyncio.fixture
async def forum_service() -> AsyncGenerator[FakeForumService, None]:
    """Run the fake forum service for one test."""
    service = FakeForumService()
    server = TestServer(service.app())
    await server.start_server()
    service.base_url = str(server.make_url("/api/forum"))
    yield service
    await server.close()


@pytest_asyncio.fixture
async def forum_client(forum_service: FakeForumService) -> AsyncGenerator[ForumAPIClient, None]:
    """Provide a connected client pointed at the fake service."""
    async with ForumAPIClient(base_url=forum_service.base_url) as client:
        yield client


@pytest.fixture
def unreachable_url() -> str:
    """Provide a URL on a local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/api/forum"
