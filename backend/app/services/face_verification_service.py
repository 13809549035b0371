"""
Face Verification Service - biometric registration over a REST face API

Flow for one capture:
1. Upload the image to storage (the face API fetches it by URL)
2. faces/detect    - a face tag must be present
3. faces/recognize - any match in the namespace above the threshold is a duplicate
4. tags/save       - register the tag under "{matric}@{namespace}"
5. faces/train     - train the uid
"""

from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamError
from app.core.logging_config import logger
from app.modules.verification.activation_gate import VerificationOutcome
from app.services.document_service import validate_upload
from app.services.storage_service import StorageService, storage_service

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png"]
FACE_FOLDER = "faces"


def biometric_uid_for(matric_number: str) -> str:
    return f"{matric_number}@{settings.BIOMETRIC_NAMESPACE}"


def first_tag(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    for photo in payload.get("photos") or []:
        for tag in photo.get("tags") or []:
            if tag.get("tid"):
                return tag
    return None


def best_match_confidence(payload: Dict[str, Any]) -> float:
    best = 0.0
    for photo in payload.get("photos") or []:
        for tag in photo.get("tags") or []:
            for match in tag.get("uids") or []:
                try:
                    best = max(best, float(match.get("confidence", 0)))
                except (TypeError, ValueError):
                    continue
    return best


class FaceVerificationService:
    def __init__(
        self,
        storage: Optional[StorageService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.storage = storage or storage_service
        self.base_url = settings.BIOMETRIC_API_URL.rstrip("/")
        self.timeout = settings.BIOMETRIC_TIMEOUT
        self._transport = transport

    def _credentials(self) -> Dict[str, str]:
        return {
            "api_key": settings.BIOMETRIC_API_KEY,
            "api_secret": settings.BIOMETRIC_API_SECRET,
        }

    async def _call(self, client: httpx.AsyncClient, endpoint: str, data: Dict[str, str]) -> Dict[str, Any]:
        """POST to the face API. Transport failures and 5xx raise UpstreamError."""
        try:
            response = await client.post(
                f"{self.base_url}/{endpoint}",
                data={**self._credentials(), **data},
            )
        except httpx.TimeoutException as e:
            logger.error(f"[Face] {endpoint} timed out: {e}")
            raise UpstreamError("biometric", f"{endpoint} timed out")
        except httpx.HTTPError as e:
            logger.error(f"[Face] {endpoint} transport error: {e}")
            raise UpstreamError("biometric", f"{endpoint} failed: {e}")

        if response.status_code >= 500:
            logger.error(f"[Face] {endpoint} returned {response.status_code}")
            raise UpstreamError("biometric", f"{endpoint} returned {response.status_code}")

        try:
            return response.json()
        except ValueError:
            raise UpstreamError("biometric", f"{endpoint} returned an invalid response")

    async def verify_and_register(
        self,
        content: bytes,
        content_type: Optional[str],
        matric_number: str,
    ) -> VerificationOutcome:
        """
        Register the face for matric_number unless it is missing or already
        registered to someone else. On success the outcome carries the uid.
        """
        validate_upload(content, content_type, ALLOWED_IMAGE_TYPES, settings.MAX_FACE_IMAGE_SIZE)

        key = self.storage.build_key(FACE_FOLDER, content_type, owner=matric_number)
        image_url = await self.storage.upload_bytes(content, key, content_type)
        uid = biometric_uid_for(matric_number)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            detected = await self._call(client, "faces/detect.json", {"urls": image_url})
            tag = first_tag(detected)
            if tag is None:
                logger.warning(f"[Face] No face detected for {matric_number}")
                return VerificationOutcome(verified=False, url=image_url, reason="No face detected in image")

            recognized = await self._call(
                client, "faces/recognize.json",
                {"urls": image_url, "namespace": settings.BIOMETRIC_NAMESPACE, "uids": f"all@{settings.BIOMETRIC_NAMESPACE}"},
            )
            if best_match_confidence(recognized) > settings.FACE_DUPLICATE_THRESHOLD:
                logger.warning(f"[Face] Duplicate face detected for {matric_number}")
                return VerificationOutcome(
                    verified=False, url=image_url, reason="This face is already registered to another account"
                )

            saved = await self._call(client, "tags/save.json", {"uid": uid, "tids": tag["tid"]})
            if saved.get("status") == "failure":
                return VerificationOutcome(verified=False, url=image_url, reason="Face could not be registered")

            trained = await self._call(client, "faces/train.json", {"uids": uid})
            if trained.get("status") == "failure":
                return VerificationOutcome(verified=False, url=image_url, reason="Face could not be registered")

        logger.info(f"[Face] Registered face for {matric_number} as {uid}")
        return VerificationOutcome(verified=True, url=image_url, uid=uid)


face_verification_service = FaceVerificationService()
