"""
Actor model consumed from the session provider.
"""

from pydantic import BaseModel, ConfigDict


class Actor(BaseModel):
    """The currently signed-in user, as far as the forum cares."""

    model_config = ConfigDict(frozen=True)

    id: int | str | None = None
    username: str | None = None
    email: str | None = None
    role: str | None = None

    def __repr__(self) -> str:
        return f"<Actor {self.username or self.email or self.id}>"
