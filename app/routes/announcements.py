"""
Announcement Routes
Feed posts, likes and comments
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form

from app.auth import get_current_user, require_staff
from app.schemas.common import Organization
from app.schemas.user import User
from app.schemas.announcement import (
    Announcement,
    AnnouncementData,
    AnnouncementListResponse,
    AnnouncementComment,
    LikeToggleResponse,
)
from app.schemas.workshop import CommentRequest
from app.services.announcement_service import announcement_service
from app.services.storage_service import storage_service
from app.services.workflow_service import can_edit_announcement, ensure_can_manage

router = APIRouter()

POST_UPDATES = "post updates"


async def load_announcement(announcement_id: UUID) -> Announcement:
    return (await announcement_service.get_announcement(announcement_id)).unwrap("Announcement not found")


def ensure_can_edit(user: User, announcement: Announcement) -> None:
    if not can_edit_announcement(user, announcement):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only edit your own posts or posts of the organization you manage"
        )


@router.get("", response_model=AnnouncementListResponse)
async def list_announcements(
    organization: Optional[Organization] = None,
    current_user: User = Depends(get_current_user)
):
    """Feed, newest first"""
    announcements = (await announcement_service.list_announcements(organization)).unwrap_or([])
    return AnnouncementListResponse(total=len(announcements), announcements=announcements)


@router.get("/{announcement_id}", response_model=Announcement)
async def get_announcement(announcement_id: UUID, current_user: User = Depends(get_current_user)):
    return await load_announcement(announcement_id)


@router.post("", response_model=Announcement, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    title: str = Form(...),
    content: str = Form(...),
    organization: Organization = Form(Organization.GENERAL),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_staff)
):
    """Post an update (Officer or Admin)"""
    ensure_can_manage(current_user, organization, POST_UPDATES)

    data = AnnouncementData(
        title=title,
        content=content,
        organization=organization,
        image_url=await storage_service.upload_file(image)
    )
    created = (await announcement_service.create_announcement(data, current_user.id, current_user.role)).unwrap(
        "Announcement could not be created"
    )
    return await load_announcement(created.id)


@router.put("/{announcement_id}", response_model=Announcement)
async def update_announcement(
    announcement_id: UUID,
    title: str = Form(...),
    content: str = Form(...),
    organization: Organization = Form(Organization.GENERAL),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user)
):
    """Edit a post (author or organization manager)"""
    existing = await load_announcement(announcement_id)
    ensure_can_edit(current_user, existing)
    if organization != existing.organization:
        ensure_can_manage(current_user, organization, POST_UPDATES)

    data = AnnouncementData(
        title=title,
        content=content,
        organization=organization,
        image_url=await storage_service.upload_file(image) or existing.image_url
    )
    (await announcement_service.update_announcement(announcement_id, data)).unwrap("Announcement not found")
    return await load_announcement(announcement_id)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(announcement_id: UUID, current_user: User = Depends(get_current_user)):
    existing = await load_announcement(announcement_id)
    ensure_can_edit(current_user, existing)
    (await announcement_service.delete_announcement(announcement_id)).unwrap("Announcement not found")
    return None


@router.post("/{announcement_id}/like", response_model=LikeToggleResponse)
async def toggle_like(announcement_id: UUID, current_user: User = Depends(get_current_user)):
    """Like, or remove the like if already liked"""
    await load_announcement(announcement_id)
    liked = (await announcement_service.toggle_like(announcement_id, current_user.id)).unwrap_or(False)
    return LikeToggleResponse(announcement_id=announcement_id, liked=liked)


@router.post("/{announcement_id}/comments", response_model=AnnouncementComment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    announcement_id: UUID,
    request: CommentRequest,
    current_user: User = Depends(get_current_user)
):
    await load_announcement(announcement_id)
    comment = (
        await announcement_service.add_comment(announcement_id, current_user.id, request.content.strip())
    ).unwrap("Comment could not be saved")
    return comment.model_copy(update={"user_name": current_user.name, "user_avatar": current_user.avatar_url})
