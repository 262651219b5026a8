"""Design token sets and composition."""

from duet.tokens.merge import deep_merge, shadowed_containers
from duet.tokens.models import (
    PATH_SEPARATOR,
    InvalidTokenSetError,
    TokenSet,
    TokenValue,
)

__all__ = [
    "PATH_SEPARATOR",
    "InvalidTokenSetError",
    "TokenSet",
    "TokenValue",
    "deep_merge",
    "shadowed_containers",
]
