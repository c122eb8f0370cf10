"""
User Entity

An account that can sign in with email and password.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger
from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class User(SQLModel, table=True):
    """
    User entity - an email/password account.

    Business Rules:
    - Email is unique and stored lower-cased, so comparisons are case-insensitive
    - password_hash is a tagged hash string, never the raw password, never empty
    - reset_token holds the keyed digest of an outstanding reset token;
      reset_token and reset_expiry are set and cleared together
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)

    # Password reset (single-use, epoch milliseconds)
    reset_token: Optional[str] = Field(default=None, index=True, max_length=128)
    reset_expiry: Optional[int] = Field(
        default=None, sa_column=Column(BigInteger, nullable=True)
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
