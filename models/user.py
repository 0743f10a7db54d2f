"""
Provides the User model for the application's database schema.

A user row mirrors an identity held by Clerk. It is created lazily the first
time an authenticated request arrives for a Clerk subject and afterwards only
its contact details are refreshed.

Attributes
----------
clerk_user_id : sqlalchemy.Column
    Stable subject identifier issued by Clerk.
email : sqlalchemy.Column
    Primary email address reported by Clerk, if any.
name : sqlalchemy.Column
    Display name reported by Clerk, if any.

Relationships
-------------
chat_sessions : sqlalchemy.orm.relationship
    One-to-many relationship with the `ChatSession` model.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a user entity in the application.

    :ivar clerk_user_id: Unique identifier for the user provided by Clerk.
    :type clerk_user_id: str
    :ivar email: Email address of the user. Optional.
    :type email: str
    :ivar name: Display name of the user. Optional.
    :type name: str
    """

    __tablename__ = "users"

    clerk_user_id = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)

    # Relationships
    chat_sessions = relationship(
        "ChatSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
