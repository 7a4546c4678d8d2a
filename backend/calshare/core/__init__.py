from .config import settings
from .security import (
    create_access_token,
    generate_invitation_token,
    mask_token,
    verify_token,
)

__all__ = [
    "settings",
    "create_access_token",
    "generate_invitation_token",
    "mask_token",
    "verify_token",
]
