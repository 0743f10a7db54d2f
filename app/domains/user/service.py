# app/domains/user/service.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import CallerIdentity
from models import User


logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_clerk_id(self, clerk_user_id: str) -> Optional[User]:
        """Get a user by Clerk user ID."""
        result = await self.db.execute(select(User).where(User.clerk_user_id == clerk_user_id))
        return result.scalar_one_or_none()

    async def upsert_from_identity(self, identity: CallerIdentity) -> User:
        """Get the local user for a Clerk identity, creating it if absent.

        Email and name are refreshed when the identity provider reports new
        non-empty values. A concurrent first request for the same subject may
        win the insert; the unique constraint is then resolved by re-reading.
        """
        user = await self.get_user_by_clerk_id(identity.subject)
        if user is None:
            user = User(clerk_user_id=identity.subject, email=identity.email, name=identity.name)
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                user = await self.get_user_by_clerk_id(identity.subject)
                if user is None:
                    raise
                logger.info("User %s was created concurrently", identity.subject)
            else:
                logger.info("Created local user for Clerk subject %s", identity.subject)
                return user

        changed = False
        if identity.email and identity.email != user.email:
            user.email = identity.email
            changed = True
        if identity.name and identity.name != user.name:
            user.name = identity.name
            changed = True

        if changed:
            try:
                await self.db.commit()
            except SQLAlchemyError:
                await self.db.rollback()
                raise
        return user
