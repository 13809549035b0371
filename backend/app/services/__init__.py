from app.services.storage_service import StorageService, storage_service
from app.services.document_service import DocumentService, document_service
from app.services.face_verification_service import FaceVerificationService, face_verification_service
from app.services.auth_service import AuthService, auth_service
from app.services.admin_service import AdminService, admin_service

__all__ = [
    "StorageService",
    "storage_service",
    "DocumentService",
    "document_service",
    "FaceVerificationService",
    "face_verification_service",
    "AuthService",
    "auth_service",
    "AdminService",
    "admin_service",
]
