"""
Payload normalization.

Turns whatever the remote service returns for a thread or comment into
the canonical Thread/Comment models. Missing pieces resolve through
fallback chains; nothing here raises on malformed input.
"""

from collections.abc import Mapping
from typing import Any

from forumsync.core.config import settings
from forumsync.models.forum import Comment, Thread


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> str:
    """Coerce to str, treating None as empty."""
    if value is None:
        return ""
    return str(value)


def _first_present(*values: Any) -> str | None:
    """First value that is neither None nor an empty string."""
    for value in values:
        if value is None:
            continue
        text = str(value)
        if text:
            return text
    return None


def resolve_author_name(raw: Mapping[str, Any]) -> str:
    """
    Pick the display name for a thread or comment author.

    Order:
        1. top-level ``authorUsername``
        2. top-level ``authorEmail``
        3. ``author.username``
        4. ``author.email``
        5. the configured unknown-author label
    """
    author = _mapping(raw.get("author"))
    name = _first_present(
        raw.get("authorUsername"),
        raw.get("authorEmail"),
        author.get("username"),
        author.get("email"),
    )
    return name if name is not None else settings.forum_unknown_author


def resolve_author_role(raw: Mapping[str, Any]) -> str | None:
    """Nested author role, else sibling ``authorRole``, else None."""
    author = _mapping(raw.get("author"))
    role = author.get("role")
    if role is None:
        role = raw.get("authorRole")
    return None if role is None else str(role)


def _timestamps(raw: Mapping[str, Any]) -> tuple[str, str]:
    created_at = _text(raw.get("createdAt"))
    updated_at = _text(raw.get("updatedAt")) or created_at
    return created_at, updated_at


def normalize_comment(raw: Any, thread_id: str | None = None) -> Comment:
    """
    Normalize a raw comment payload.

    Args:
        raw: Comment object as returned by the remote service
        thread_id: Owning thread id; overrides the payload's ``threadId``

    Returns:
        Canonical comment
    """
    data = _mapping(raw)
    created_at, updated_at = _timestamps(data)

    return Comment(
        id=_text(data.get("id")),
        thread_id=thread_id if thread_id is not None else _text(data.get("threadId")),
        content=_text(data.get("content")),
        author_id=_text(data.get("authorId")),
        author_name=resolve_author_name(data),
        author_role=resolve_author_role(data),
        created_at=created_at,
        updated_at=updated_at,
    )


def normalize_thread(raw: Any) -> Thread:
    """
    Normalize a raw thread payload, including its comment list.

    Comments are pinned to the thread's id so the cache never holds a
    comment under a thread it does not claim.

    Args:
        raw: Thread object as returned by the remote service

    Returns:
        Canonical thread
    """
    data = _mapping(raw)
    thread_id = _text(data.get("id"))
    created_at, updated_at = _timestamps(data)

    raw_comments = data.get("comments")
    if not isinstance(raw_comments, list | tuple):
        raw_comments = []

    attachment = data.get("attachment")

    return Thread(
        id=thread_id,
        title=_text(data.get("title")),
        content=_text(data.get("content")),
        attachment=attachment if isinstance(attachment, str) else None,
        author_id=_text(data.get("authorId")),
        author_name=resolve_author_name(data),
        author_role=resolve_author_role(data),
        created_at=created_at,
        updated_at=updated_at,
        comments=tuple(normalize_comment(c, thread_id=thread_id) for c in raw_comments),
    )


def normalize_threads(raw: Any) -> tuple[Thread, ...]:
    """Normalize a list payload; anything but a list yields no threads."""
    if not isinstance(raw, list):
        return ()
    return tuple(normalize_thread(item) for item in raw)
