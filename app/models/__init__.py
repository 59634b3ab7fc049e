from .base import Base  # noqa: F401
from .user import User  # noqa: F401
