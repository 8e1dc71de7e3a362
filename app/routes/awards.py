"""
Award Routes
Badges and certificates of the signed-in user, certificate downloads
"""

from io import BytesIO
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from app.auth import get_current_user
from app.schemas.common import Role
from app.schemas.user import User
from app.schemas.award import AwardSet
from app.services.award_service import award_service
from app.services.certificate_service import certificate_service

router = APIRouter()


@router.get("/me", response_model=AwardSet)
async def my_awards(current_user: User = Depends(get_current_user)):
    return AwardSet(badges=current_user.badges, certificates=current_user.certificates)


@router.get("/certificates/{certificate_id}/download")
async def download_certificate(certificate_id: UUID, current_user: User = Depends(get_current_user)):
    """
    Render an issued certificate as PDF (owner or Admin)
    """
    found = (await award_service.get_certificate(certificate_id)).unwrap("Certificate not found")

    if str(found["user_id"]) != str(current_user.id) and current_user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to download this certificate"
        )

    pdf_bytes, filename = await certificate_service.generate_certificate_pdf(
        found["certificate"], found["owner_name"]
    )
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
