"""User procedures: ``user.me``."""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_current_user
from app.schemas.user import UserResponse
from models.user import User

router = APIRouter(prefix="/api/trpc", tags=["user"])


@router.get("/user.me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information.

    The local user record is created on the first authenticated request, so
    this also serves as an explicit "sync my profile" call for clients.
    """
    return UserResponse.model_validate(current_user)
