from interpreter_portal.models.interpreter import (InterpreterCredential,
                                                   InterpreterProfile,
                                                   InterpreterStatus,
                                                   Specialization)
from interpreter_portal.models.user import ADMIN_ROLES, User, UserRole

__all__ = [
    "ADMIN_ROLES",
    "InterpreterCredential",
    "InterpreterProfile",
    "InterpreterStatus",
    "Specialization",
    "User",
    "UserRole",
]
