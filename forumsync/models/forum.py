"""
Forum models for the local thread cache.

Includes:
- Threads (top-level discussions)
- Comments (replies attached to one thread)
- Request payloads sent to the remote forum service
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ForumModel(BaseModel):
    """Immutable model with camelCase wire names."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Comment(ForumModel):
    """Forum comment/reply."""

    id: str
    thread_id: str
    content: str
    author_id: str = ""
    author_name: str
    author_role: str | None = None
    created_at: str = ""
    updated_at: str = ""

    def __repr__(self) -> str:
        return f"<Comment {self.id} in thread {self.thread_id}>"


class Thread(ForumModel):
    """Forum thread with its comments in arrival order."""

    id: str
    title: str
    content: str
    attachment: str | None = None  # data URI
    author_id: str = ""
    author_name: str
    author_role: str | None = None
    created_at: str = ""
    updated_at: str = ""
    comments: tuple[Comment, ...] = ()

    def __repr__(self) -> str:
        return f"<Thread {self.id} {self.title[:30]!r}>"

    def to_request(self) -> "ThreadRequest":
        """Build the create/update payload that reproduces this thread."""
        return ThreadRequest(
            title=self.title,
            content=self.content,
            author_id=self.author_id or None,
            attachment=self.attachment,
        )


# ==================== Request payloads ====================


class ThreadRequest(ForumModel):
    """Create or update a thread."""

    title: str
    content: str
    author_id: int | str | None = None
    attachment: str | None = None


class CommentRequest(ForumModel):
    """Create or update a comment."""

    content: str
    author_id: int | str | None = None


class AuthorRequest(ForumModel):
    """Identify the actor on a comment deletion."""

    author_id: int | str
