"""Form state, approval gate and autosave."""

from .approval import ApprovalError, ApprovalGate, Idle, PendingApproval
from .state import FormState, FormValidationError

__all__ = [
    "ApprovalError",
    "ApprovalGate",
    "FormState",
    "FormValidationError",
    "Idle",
    "PendingApproval",
]
