"""
Session Entity

Server-side record of a signed-in browser session.
"""

from sqlalchemy import BigInteger, ForeignKey, Integer
from sqlmodel import Column, Field, SQLModel


class Session(SQLModel, table=True):
    """
    Session entity - maps a hashed session token to its user.

    Business Rules:
    - token is the keyed digest of the cookie value, never the raw token
    - expires_at is an absolute epoch-millisecond timestamp
    - A session is valid iff it exists and expires_at > now
    - Expired rows are deleted by the lookup that finds them
    - Deleting a user deletes its sessions
    """

    __tablename__ = "sessions"

    token: str = Field(primary_key=True, max_length=128)
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    expires_at: int = Field(sa_column=Column(BigInteger, nullable=False))

    def is_expired(self, now: int) -> bool:
        return self.expires_at <= now
