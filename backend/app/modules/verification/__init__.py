# Identity verification module

from app.modules.verification.activation_gate import (
    ActivationGate,
    VerificationOutcome,
    VerificationStage,
    VerificationStatus,
)
from app.modules.verification.matric import (
    is_valid_matric_number,
    normalize_matric_number,
    validate_matric_number,
)

__all__ = [
    "ActivationGate",
    "VerificationOutcome",
    "VerificationStage",
    "VerificationStatus",
    "is_valid_matric_number",
    "normalize_matric_number",
    "validate_matric_number",
]
