# Authentication module

from app.modules.auth.dependencies import (
    AuthenticatedAccount,
    get_current_user,
    get_current_account,
    get_activated_account,
    get_current_admin,
)

__all__ = [
    "AuthenticatedAccount",
    "get_current_user",
    "get_current_account",
    "get_activated_account",
    "get_current_admin",
]
