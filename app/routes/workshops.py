"""
Workshop Routes
Workshop scheduling, registration, comments and award issuance
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from pydantic import BaseModel

from app.auth import get_current_user, require_staff
from app.schemas.common import Organization
from app.schemas.user import User
from app.schemas.workshop import (
    Workshop,
    WorkshopData,
    WorkshopListResponse,
    Comment,
    CommentRequest,
    JoinWorkshopResponse,
)
from app.schemas.award import AwardOutcome, BulkAwardRequest, BulkAwardReport, RevokeAwardsResponse
from app.services.storage_service import storage_service
from app.services.workflow_service import workflow_service, ensure_can_manage
from app.services.workshop_service import workshop_service

router = APIRouter()


class IssueAwardsRequest(BaseModel):
    user_id: UUID


async def load_workshop(workshop_id: UUID) -> Workshop:
    return (await workshop_service.get_workshop(workshop_id)).unwrap("Workshop not found")


@router.get("", response_model=WorkshopListResponse)
async def list_workshops(
    organization: Optional[Organization] = None,
    current_user: User = Depends(get_current_user)
):
    """All workshops, oldest first"""
    workshops = (await workshop_service.list_workshops()).unwrap_or([])
    if organization:
        workshops = [w for w in workshops if w.organization == organization]
    return WorkshopListResponse(total=len(workshops), workshops=workshops)


@router.get("/{workshop_id}", response_model=Workshop)
async def get_workshop(workshop_id: UUID, current_user: User = Depends(get_current_user)):
    return await load_workshop(workshop_id)


@router.post("", response_model=Workshop, status_code=status.HTTP_201_CREATED)
async def create_workshop(
    title: str = Form(...),
    date: datetime = Form(...),
    description: str = Form(""),
    organization: Organization = Form(Organization.GENERAL),
    limit: int = Form(0),
    banner: Optional[UploadFile] = File(None),
    badge: Optional[UploadFile] = File(None),
    certificate: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_staff)
):
    """
    Schedule a workshop (Officer or Admin)

    - **limit**: participant limit, 0 for unlimited
    - **banner / badge / certificate**: optional artwork images
    """
    ensure_can_manage(current_user, organization)

    data = WorkshopData(
        title=title,
        description=description,
        date=date,
        organization=organization,
        limit=limit,
        banner_url=await storage_service.upload_file(banner),
        badge_url=await storage_service.upload_file(badge),
        certificate_url=await storage_service.upload_file(certificate)
    )
    return (await workshop_service.create_workshop(data)).unwrap("Workshop could not be created")


@router.put("/{workshop_id}", response_model=Workshop)
async def update_workshop(
    workshop_id: UUID,
    title: str = Form(...),
    date: datetime = Form(...),
    description: str = Form(""),
    organization: Organization = Form(Organization.GENERAL),
    limit: int = Form(0),
    banner: Optional[UploadFile] = File(None),
    badge: Optional[UploadFile] = File(None),
    certificate: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_staff)
):
    """
    Edit a workshop (Officer or Admin)

    Artwork that is not re-uploaded, or whose upload fails, is kept.
    """
    existing = await load_workshop(workshop_id)
    ensure_can_manage(current_user, existing.organization)
    ensure_can_manage(current_user, organization)

    data = WorkshopData(
        title=title,
        description=description,
        date=date,
        organization=organization,
        limit=limit,
        banner_url=await storage_service.upload_file(banner) or existing.banner_url,
        badge_url=await storage_service.upload_file(badge) or existing.badge_url,
        certificate_url=await storage_service.upload_file(certificate) or existing.certificate_url
    )
    (await workshop_service.update_workshop(workshop_id, data)).unwrap("Workshop not found")
    return await load_workshop(workshop_id)


@router.delete("/{workshop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workshop(workshop_id: UUID, current_user: User = Depends(require_staff)):
    existing = await load_workshop(workshop_id)
    ensure_can_manage(current_user, existing.organization)
    (await workshop_service.delete_workshop(workshop_id)).unwrap("Workshop not found")
    return None


@router.post("/{workshop_id}/join", response_model=JoinWorkshopResponse)
async def join_workshop(workshop_id: UUID, current_user: User = Depends(get_current_user)):
    """Register the current user"""
    workshop = await load_workshop(workshop_id)
    return await workflow_service.join_workshop(workshop, current_user)


@router.delete("/{workshop_id}/participants/{user_id}")
async def remove_participant(
    workshop_id: UUID,
    user_id: UUID,
    current_user: User = Depends(require_staff)
):
    """Remove a participant and notify them (Officer or Admin)"""
    workshop = await load_workshop(workshop_id)
    ensure_can_manage(current_user, workshop.organization)
    return await workflow_service.remove_participant(current_user, workshop, user_id)


@router.post("/{workshop_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    workshop_id: UUID,
    request: CommentRequest,
    current_user: User = Depends(get_current_user)
):
    await load_workshop(workshop_id)
    comment = (await workshop_service.add_comment(workshop_id, current_user.id, request.content.strip())).unwrap(
        "Comment could not be saved"
    )
    return comment.model_copy(update={"user_name": current_user.name, "user_avatar": current_user.avatar_url})


@router.post("/{workshop_id}/awards", response_model=AwardOutcome)
async def issue_awards(
    workshop_id: UUID,
    request: IssueAwardsRequest,
    current_user: User = Depends(require_staff)
):
    """
    Issue the badge and certificate to one participant

    Returns the outcome, including any rolled back steps.
    """
    workshop = await load_workshop(workshop_id)
    ensure_can_manage(current_user, workshop.organization)

    participant = next((p for p in workshop.participants if p.id == request.user_id), None)
    if participant is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is not a participant of this workshop"
        )
    return await workflow_service.issue_awards(workshop, participant, current_user)


@router.post("/{workshop_id}/awards/bulk", response_model=BulkAwardReport)
async def bulk_issue_awards(
    workshop_id: UUID,
    request: BulkAwardRequest,
    current_user: User = Depends(require_staff)
):
    """Issue awards to every selected participant; reports each outcome"""
    workshop = await load_workshop(workshop_id)
    ensure_can_manage(current_user, workshop.organization)
    return await workflow_service.bulk_issue_awards(workshop, request.participant_ids, current_user)


@router.delete("/{workshop_id}/awards/{user_id}", response_model=RevokeAwardsResponse)
async def revoke_awards(
    workshop_id: UUID,
    user_id: UUID,
    current_user: User = Depends(require_staff)
):
    workshop = await load_workshop(workshop_id)
    ensure_can_manage(current_user, workshop.organization)
    return await workflow_service.revoke_awards(current_user, workshop, user_id)
