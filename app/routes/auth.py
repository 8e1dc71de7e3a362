"""
Authentication Routes
Sign-up, login, logout, password change endpoints
"""

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel, Field

from app.auth import verify_password, hash_password, create_access_token, get_current_user
from app.schemas.common import Role
from app.schemas.user import User, SignupRequest, LoginRequest, TokenResponse
from app.services.result import ErrorKind
from app.services.profile_service import profile_service

router = APIRouter()


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)
    confirm_password: str


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest):
    """
    Create an account

    Process:
    1. Hash password
    2. Provision a MEMBER profile with the display name
    3. Create JWT token
    """
    result = await profile_service.create_profile(
        request.name.strip(),
        request.email,
        hash_password(request.password)
    )
    if result.is_error and result.error.kind == ErrorKind.CONFLICT:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists"
        )
    profile = result.unwrap("Account could not be created")

    access_token = create_access_token({"sub": str(profile["id"]), "role": Role.MEMBER.value})

    return TokenResponse(
        status="success",
        message="Account created",
        access_token=access_token,
        user_id=profile["id"],
        role=Role.MEMBER
    )


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest):
    """Password sign-in"""
    profile = (await profile_service.fetch_credentials(credentials.email)).unwrap_or(None)

    if not profile or not verify_password(credentials.password, profile["password_hash"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    access_token = create_access_token({"sub": str(profile["id"]), "role": profile["role"]})

    return TokenResponse(
        status="success",
        message="Login successful",
        access_token=access_token,
        user_id=profile["id"],
        role=Role(profile["role"])
    )


@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user)
):
    """
    Change password for current user
    """
    if request.new_password != request.confirm_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New passwords do not match"
        )

    profile = (await profile_service.fetch_credentials(current_user.email)).unwrap("User not found")

    if not verify_password(request.current_password, profile["password_hash"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect"
        )

    (await profile_service.update_password(current_user.id, hash_password(request.new_password))).unwrap(
        "User not found"
    )

    return {
        "status": "success",
        "message": "Password changed successfully"
    }


@router.post("/logout")
async def logout():
    """
    Logout endpoint (client should delete token)
    """
    return {
        "status": "success",
        "message": "Logged out successfully"
    }


@router.get("/me", response_model=User)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Current user with badges, certificates and notifications
    """
    return current_user
