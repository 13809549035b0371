"""
Custom Exceptions for the e-Voting API
======================================

Use these instead of generic Exception so the API layer can map every
failure to a stable code and HTTP status.

Ballot rejections (not activated, voting closed, already voted, invalid
candidate) are NOT exceptions: they are returned as values by the vote
ledger. The classes here cover malformed input, out-of-order actions,
missing resources, conflicts and failing upstream collaborators.

Usage:
    from app.core.exceptions import PositionNotFoundError, UpstreamError

    if not position:
        raise PositionNotFoundError(position_id)
"""

from typing import Optional, Any, Dict


class EVotingError(Exception):
    """Base exception for all e-Voting errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(EVotingError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(EVotingError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(EVotingError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class PositionNotFoundError(ResourceNotFoundError):
    def __init__(self, position_id: str):
        super().__init__("Position", position_id)


class CandidateNotFoundError(ResourceNotFoundError):
    def __init__(self, candidate_id: str):
        super().__init__("Candidate", candidate_id)


class VotingSessionNotFoundError(ResourceNotFoundError):
    def __init__(self, session_id: str):
        super().__init__("Voting Session", session_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(EVotingError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidMatricNumberError(ValidationError):
    """Matric number does not match the institution format"""

    def __init__(self, matric_number: str):
        super().__init__(
            f"'{matric_number}' is not a valid matriculation number",
            field="matric_number"
        )
        self.code = "INVALID_MATRIC_NUMBER"


class MatricNumberInUseError(ValidationError):
    """Matric number is already registered to another account"""

    def __init__(self, matric_number: str):
        super().__init__(
            f"Matric number '{matric_number}' is already in use",
            field="matric_number"
        )
        self.code = "MATRIC_IN_USE"


class InvalidFileTypeError(ValidationError):
    """Uploaded file type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the size limit"""

    def __init__(self, size: int, max_size: int):
        super().__init__(f"File is too large ({size} bytes). Maximum is {max_size} bytes")
        self.code = "FILE_TOO_LARGE"
        self.details = {"size": size, "max_size": max_size}


# ============================================
# Workflow Errors
# ============================================

class PreconditionError(EVotingError):
    """Action attempted out of order"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="PRECONDITION_FAILED")


class ConflictError(EVotingError):
    """Storage-enforced uniqueness or referential guard violated"""

    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


# ============================================
# Upstream Collaborator Errors
# ============================================

class UpstreamError(EVotingError):
    """A third-party collaborator (storage, OCR, biometrics) failed or timed out"""

    status_code = 502

    def __init__(self, service: str, message: str = "Upstream service failed"):
        super().__init__(f"{service}: {message}", code="UPSTREAM_ERROR")
        self.details["service"] = service


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: EVotingError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "message": error.message,
        "error": error.to_dict()
    }
