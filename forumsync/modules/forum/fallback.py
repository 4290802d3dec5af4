"""
Placeholder content shown when the first forum load fails.
"""

from datetime import datetime, timedelta, timezone

from forumsync.models.forum import Comment, Thread

FALLBACK_THREAD_ID = "sample-thread"
FALLBACK_COMMENT_ID = "sample-comment"


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_fallback_threads(now: datetime | None = None) -> tuple[Thread, ...]:
    """
    Build the single placeholder thread with its one comment.

    Both ids are non-numeric, so later deletes stay local.

    Args:
        now: Reference time for the relative timestamps (default: UTC now)

    Returns:
        Tuple holding the placeholder thread
    """
    now = now or datetime.now(timezone.utc)
    comment_time = _iso(now - timedelta(minutes=30))

    comment = Comment(
        id=FALLBACK_COMMENT_ID,
        thread_id=FALLBACK_THREAD_ID,
        content=(
            "I usually use sorting Lego bricks: map = repaint each brick, "
            "filter = only keep blue ones, reduce = count the total studs. "
            "Students grasp it quickly!"
        ),
        author_id="0",
        author_name="Aina (Teacher)",
        author_role="Teacher",
        created_at=comment_time,
        updated_at=comment_time,
    )

    thread = Thread(
        id=FALLBACK_THREAD_ID,
        title="Need help understanding JavaScript array methods",
        content=(
            "Hey everyone, I am trying to help my students differentiate "
            "between map, filter, and reduce. Does anyone have concrete "
            "classroom activities or metaphors that have worked well?"
        ),
        attachment=None,
        author_id="0",
        author_name="Community Mentor",
        created_at=_iso(now - timedelta(hours=5)),
        updated_at=_iso(now - timedelta(minutes=10)),
        comments=(comment,),
    )

    return (thread,)
