# app/core/dependencies.py
import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import CallerIdentity, ClerkAuthenticator, IdentityResolver
from app.database import get_db
from app.domains.user.service import UserService
from app.exceptions.base import UnauthorizedError
from app.services.generation import ReplyGenerator, TitleGenerator
from models import User

logger = logging.getLogger(__name__)

auth = ClerkAuthenticator()


def get_identity_resolver() -> IdentityResolver:
    """Identity provider used by the request boundary."""
    return auth


async def get_caller_identity(
    request: Request,
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> CallerIdentity:
    """Resolve the caller or reject the request before any service logic runs.

    Raises:
        UnauthorizedError: If no identity can be resolved from the request
    """
    identity = await resolver.resolve_caller(request)
    if identity is None:
        raise UnauthorizedError("Authentication token is missing or invalid")
    return identity


async def get_current_user(
    request: Request,
    identity: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get the local user for the authenticated caller, creating it if absent.

    Returns:
        User: Current authenticated user
    """
    user_service = UserService(db)
    user = await user_service.upsert_from_identity(identity)

    # Add user info to request state for ownership checks and logging
    request.state.user_id = user.id
    request.state.clerk_user_id = identity.subject

    return user


def get_reply_generator(request: Request) -> ReplyGenerator:
    """Reply generator constructed in the application lifespan."""
    return request.app.state.reply_generator


def get_title_generator(request: Request) -> TitleGenerator:
    """Title generator constructed in the application lifespan."""
    return request.app.state.title_generator


__all__ = [
    "auth",
    "get_db",
    "get_identity_resolver",
    "get_caller_identity",
    "get_current_user",
    "get_reply_generator",
    "get_title_generator",
]
