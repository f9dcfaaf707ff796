from .user import User
from .account import Account
from .role_assignment import RoleAssignment
from .video import Video

__all__ = [
    "User",
    "Account",
    "RoleAssignment",
    "Video",
]
