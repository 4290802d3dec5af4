"""
Edit/delete eligibility.

One predicate shared by every screen that shows edit or delete controls.
It is a display heuristic; the remote service enforces ownership itself.
"""

from forumsync.models.forum import Comment, Thread
from forumsync.models.user import Actor

TEACHER_ROLE = "Teacher"
STUDENT_ROLE = "Student"


def can_manage(
    entity: Thread | Comment,
    actor_id: int | str | None = None,
    username: str | None = None,
    email: str | None = None,
) -> bool:
    """
    Check whether an actor may edit or delete a thread or comment.

    A recorded author id decides on its own. Without one (placeholder
    content), the actor's username or email must equal, or be a
    case-sensitive prefix of, the entity's author name.

    Args:
        entity: Thread or comment
        actor_id: Current actor id
        username: Current actor username
        email: Current actor email

    Returns:
        True if edit/delete controls should be offered
    """
    if not actor_id and not username and not email:
        return False

    if entity.author_id and actor_id is not None:
        return entity.author_id == str(actor_id)

    identifier = username or email
    if not identifier:
        return False

    return entity.author_name.startswith(identifier)


def actor_can_manage(entity: Thread | Comment, actor: Actor | None) -> bool:
    """can_manage() for an Actor (None means signed out)."""
    if actor is None:
        return False
    return can_manage(entity, actor.id, actor.username, actor.email)


def can_delete_thread(thread: Thread, actor: Actor | None) -> bool:
    """
    Owners may delete their threads; teachers may also delete threads
    started by students.
    """
    if actor_can_manage(thread, actor):
        return True
    if actor is None:
        return False
    return actor.role == TEACHER_ROLE and thread.author_role == STUDENT_ROLE
