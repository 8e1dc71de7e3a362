"""
User Routes
Profiles, user directory and role management
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status, Query, UploadFile, File, Form

from app.auth import get_current_user, require_admin
from app.schemas.common import Role
from app.schemas.user import User, UserListResponse, UpdateOfficerOrgRequest, RoleChangeResponse
from app.services.analytics_service import analytics_service
from app.services.profile_service import profile_service
from app.services.storage_service import storage_service
from app.services.workflow_service import workflow_service

router = APIRouter()


async def load_user(user_id: UUID) -> User:
    return (await profile_service.fetch_profile(user_id)).unwrap("User not found")


@router.get("", response_model=UserListResponse)
async def list_users(
    q: Optional[str] = Query(None, description="Match name or email"),
    current_admin: User = Depends(require_admin)
):
    """
    User directory (Admin only)
    """
    users = (await profile_service.list_users()).unwrap_or([])
    if q:
        users = analytics_service.search_users(users, q)
    return UserListResponse(total=len(users), users=users)


@router.patch("/me", response_model=User)
async def update_my_profile(
    name: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user)
):
    """
    Update display name and/or avatar

    A failed avatar upload keeps the previous avatar.
    """
    if name is not None and not name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name cannot be empty"
        )

    avatar_url = await storage_service.upload_file(avatar)
    updated = current_user.model_copy(update={
        "name": name.strip() if name else current_user.name,
        "avatar_url": avatar_url or current_user.avatar_url
    })
    (await profile_service.save_user(updated)).unwrap("User not found")
    return await load_user(current_user.id)


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: UUID, current_user: User = Depends(get_current_user)):
    """Profile of a user (self or Admin)"""
    if current_user.id != user_id and current_user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this profile"
        )
    return await load_user(user_id)


@router.post("/{user_id}/promote", response_model=RoleChangeResponse)
async def promote_user(user_id: UUID, current_admin: User = Depends(require_admin)):
    """MEMBER -> OFFICER (GENERAL) -> ADMIN"""
    target = await load_user(user_id)
    return await workflow_service.promote_user(current_admin, target)


@router.post("/{user_id}/demote", response_model=RoleChangeResponse)
async def demote_user(user_id: UUID, current_admin: User = Depends(require_admin)):
    """ADMIN -> OFFICER -> MEMBER"""
    target = await load_user(user_id)
    return await workflow_service.demote_user(current_admin, target)


@router.put("/{user_id}/officer-org", response_model=User)
async def update_officer_org(
    user_id: UUID,
    request: UpdateOfficerOrgRequest,
    current_admin: User = Depends(require_admin)
):
    """Assign an officer to an organization"""
    target = await load_user(user_id)
    return await workflow_service.update_officer_org(current_admin, target, request.organization)
