"""
Users API - Sign-in codes, registration, login and user administration.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from .auth import require_admin, require_user
from .catalog_api import http_error
from .state import AppState, get_state

router = APIRouter(prefix="/api", tags=["users"])


class OtpRequest(BaseModel):
    phone: str


class RegisterRequest(BaseModel):
    name: str
    phone: str
    otp: str
    email: Optional[str] = None
    tier: str = "regular"


class LoginRequest(BaseModel):
    phone: str
    otp: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    tier: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None


@router.post("/auth/send-otp")
async def send_otp(req: OtpRequest, state: AppState = Depends(get_state)):
    """Issue a sign-in code for register or login."""
    try:
        code = state.users.request_otp(req.phone)
    except ValueError as e:
        raise http_error(e)

    # TODO: deliver the code by SMS once a gateway is configured
    response = {"message": "OTP sent successfully"}
    if state.settings.otp_debug:
        response["development"] = {"otp": code}
    return response


@router.post("/auth/register", status_code=201)
async def register(req: RegisterRequest, state: AppState = Depends(get_state)):
    try:
        user, token = state.users.register(name=req.name, phone=req.phone, otp=req.otp,
                                           email=req.email, tier=req.tier)
    except ValueError as e:
        raise http_error(e)
    return {"message": "Registration successful", "user": user, "token": token}


@router.post("/auth/login")
async def login(req: LoginRequest, state: AppState = Depends(get_state)):
    try:
        user, token = state.users.login(req.phone, req.otp)
    except ValueError as e:
        raise http_error(e)
    return {"message": "Login successful", "user": user, "token": token}


@router.get("/users/me")
async def me(user: dict = Depends(require_user)):
    return user


@router.get("/users")
async def list_users(tier: Optional[str] = None, state: AppState = Depends(get_state),
                     _admin: dict = Depends(require_admin)):
    return state.users.list_users(tier=tier)


@router.get("/users/{user_id}")
async def get_user(user_id: str, state: AppState = Depends(get_state), user: dict = Depends(require_user)):
    if user['id'] != user_id and not state.users.is_admin(user):
        raise HTTPException(status_code=403, detail="Unauthorized")
    found = state.users.get_user(user_id)
    if found is None:
        raise HTTPException(status_code=404, detail="User not found")
    return found


@router.put("/users/{user_id}")
async def update_user(user_id: str, updates: UserUpdate, state: AppState = Depends(get_state),
                      user: dict = Depends(require_user)):
    is_admin = state.users.is_admin(user)
    if user['id'] != user_id and not is_admin:
        raise HTTPException(status_code=403, detail="Unauthorized")

    try:
        updated = state.users.update_user(user_id, updates.model_dump(exclude_unset=True), as_admin=is_admin)
    except ValueError as e:
        raise http_error(e)
    return {"message": "User updated", "user": updated}
