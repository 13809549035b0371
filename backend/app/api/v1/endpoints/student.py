"""
Student verification endpoints.

Each step reports into the activation gate:
update-details -> upload-document -> verify-face
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.modules.verification.activation_gate import ActivationGate
from app.schemas.student import (
    UpdateDetailsRequest,
    VerificationStatusResponse,
    VerificationStepResponse,
)
from app.services.document_service import DocumentService, document_service
from app.services.face_verification_service import (
    FaceVerificationService,
    face_verification_service,
)

router = APIRouter()


def get_document_service() -> DocumentService:
    return document_service


def get_face_verification_service() -> FaceVerificationService:
    return face_verification_service


def _step_response(user: User, success: bool, message: str):
    body = VerificationStepResponse(
        success=success,
        message=message,
        status=VerificationStatusResponse(**ActivationGate.status(user).to_dict()),
    )
    if success:
        return body
    return JSONResponse(status_code=400, content=body.model_dump())


@router.post("/update-details", response_model=VerificationStepResponse)
async def update_details(
    payload: UpdateDetailsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set matric number and full name"""
    user = await ActivationGate(db).set_details(current_user, payload.matric_number, payload.full_name)
    return _step_response(user, True, "Details updated successfully")


@router.post("/upload-document", response_model=VerificationStepResponse)
async def upload_document(
    document: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Upload and verify the course form (PDF)"""
    gate = ActivationGate(db)
    gate.require_details(current_user)

    if current_user.document_verified:
        return _step_response(current_user, True, "Course form already verified")

    content = await document.read()
    outcome = await service.verify_course_form(
        content,
        document.content_type,
        current_user.matric_number,
        current_user.full_name or "",
    )

    if await gate.record_document_verified(current_user, outcome):
        return _step_response(current_user, True, "Course form verified successfully")
    return _step_response(current_user, False, outcome.reason or "Course form verification failed")


@router.post("/verify-face", response_model=VerificationStepResponse)
async def verify_face(
    face_image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: FaceVerificationService = Depends(get_face_verification_service),
):
    """Register the student's face; success activates the account"""
    if current_user.is_activated:
        return _step_response(current_user, True, "Account already activated")

    gate = ActivationGate(db)
    gate.require_document_verified(current_user)

    content = await face_image.read()
    outcome = await service.verify_and_register(
        content, face_image.content_type, current_user.matric_number
    )
    if not outcome.verified:
        return _step_response(current_user, False, outcome.reason or "Face verification failed")

    user = await gate.record_face_verified(current_user, outcome.uid)
    return _step_response(user, True, "Face verified successfully. Your account is now activated")


@router.get("/verification-status", response_model=VerificationStatusResponse)
async def verification_status(current_user: User = Depends(get_current_user)):
    """Current verification stage and flags"""
    return VerificationStatusResponse(**ActivationGate.status(current_user).to_dict())
