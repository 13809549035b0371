"""
Activation Gate
===============

Tracks the verification stages an account passes through before it may vote:

    NEW -> HAS_MATRIC -> DOCUMENT_VERIFIED -> ACTIVATED

Stages only move forward. Outcomes come from the document and face
verification collaborators as VerificationOutcome values; the gate never
trusts client-supplied flags.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import MatricNumberInUseError, PreconditionError, ValidationError
from app.core.logging_config import logger
from app.models.user import User
from app.modules.verification.matric import validate_matric_number


class VerificationStage(str, enum.Enum):
    NEW = "NEW"
    HAS_MATRIC = "HAS_MATRIC"
    DOCUMENT_VERIFIED = "DOCUMENT_VERIFIED"
    ACTIVATED = "ACTIVATED"


@dataclass
class VerificationOutcome:
    """Result reported by a verification collaborator"""
    verified: bool
    url: Optional[str] = None
    uid: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class VerificationStatus:
    has_matric_number: bool
    matric_number: Optional[str]
    document_verified: bool
    face_verified: bool
    is_activated: bool
    stage: VerificationStage

    def to_dict(self) -> dict:
        return {
            "has_matric_number": self.has_matric_number,
            "matric_number": self.matric_number,
            "document_verified": self.document_verified,
            "face_verified": self.face_verified,
            "is_activated": self.is_activated,
            "stage": self.stage.value,
        }


def _normalize_name(full_name: str) -> str:
    return " ".join((full_name or "").split())


class ActivationGate:
    """Owns every write to an account's verification flags."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def stage(user: User) -> VerificationStage:
        if user.is_activated:
            return VerificationStage.ACTIVATED
        if user.document_verified:
            return VerificationStage.DOCUMENT_VERIFIED
        if user.matric_number:
            return VerificationStage.HAS_MATRIC
        return VerificationStage.NEW

    @staticmethod
    def is_activated(user: User) -> bool:
        return bool(user.is_activated)

    @classmethod
    def status(cls, user: User) -> VerificationStatus:
        return VerificationStatus(
            has_matric_number=bool(user.matric_number),
            matric_number=user.matric_number,
            document_verified=bool(user.document_verified),
            face_verified=bool(user.face_verified),
            is_activated=bool(user.is_activated),
            stage=cls.stage(user),
        )

    async def set_details(self, user: User, matric_number: str, full_name: str) -> User:
        """
        Record the account's matric number and full name.

        Idempotent. Details lock once the document is verified: resubmitting
        the same values is a no-op, changing them raises PreconditionError.
        """
        matric = validate_matric_number(matric_number)
        name = _normalize_name(full_name)
        if not name:
            raise ValidationError("Full name is required", field="full_name")

        if user.document_verified:
            if user.matric_number == matric and _normalize_name(user.full_name) == name:
                return user
            raise PreconditionError(
                "Details cannot be changed after the course form has been verified"
            )

        if user.matric_number == matric and user.full_name == name:
            return user

        result = await self.db.execute(
            select(User.id).where(User.matric_number == matric, User.id != user.id)
        )
        if result.scalar_one_or_none() is not None:
            logger.log_verification_event(user.id, "details", False, reason="matric in use")
            raise MatricNumberInUseError(matric)

        user.matric_number = matric
        user.full_name = name
        try:
            await self.db.commit()
        except IntegrityError:
            # Another account claimed the number between the check and the write
            await self.db.rollback()
            raise MatricNumberInUseError(matric)

        logger.log_verification_event(user.id, "details", True)
        return user

    def require_details(self, user: User) -> None:
        if not user.matric_number:
            raise PreconditionError("Set your matric number before uploading a course form")

    def require_document_verified(self, user: User) -> None:
        if not user.document_verified:
            raise PreconditionError("Upload and verify your course form before face verification")

    async def record_document_verified(self, user: User, outcome: VerificationOutcome) -> bool:
        """
        Apply a document-verification outcome.

        A failed outcome (or one without a stored document url) changes
        nothing and returns False.
        """
        self.require_details(user)

        if not outcome.verified or not outcome.url:
            logger.log_verification_event(user.id, "document", False, reason=outcome.reason)
            return False

        if user.is_activated:
            return True

        user.document_verified = True
        user.document_url = outcome.url
        await self.db.commit()

        logger.log_verification_event(user.id, "document", True)
        return True

    async def record_face_verified(self, user: User, biometric_uid: str) -> User:
        """Mark the face as verified and activate the account in one commit."""
        if user.is_activated:
            return user

        self.require_document_verified(user)

        user.face_verified = True
        user.is_activated = True
        user.biometric_uid = biometric_uid
        await self.db.commit()

        logger.log_verification_event(user.id, "face", True)
        return user
