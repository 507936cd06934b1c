"""Auth Router — registration, login and profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.api.deps import get_current_user
from civic_reporter.database import get_db
from civic_reporter.models.user import User
from civic_reporter.schemas.auth import LoginRequest, RegisterRequest
from civic_reporter.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/register", status_code=201)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Citizen self-registration. Returns the user and a 7-day token."""
    user, token = await auth_service.register(db, data)
    await db.commit()
    return {
        "success": True,
        "message": "User registered",
        "user": auth_service.build_user_response(user),
        "token": token,
    }


@router.post("/login")
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Email/password login."""
    user, token = await auth_service.login(db, data)
    return {
        "success": True,
        "message": "Logged in",
        "user": auth_service.build_user_response(user),
        "token": token,
    }


@router.get("/me")
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """Profile of the currently authenticated user."""
    return {"success": True, "user": auth_service.build_user_response(current_user)}
