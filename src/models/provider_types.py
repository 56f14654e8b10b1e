"""Provider and cache backend definitions used by the startup selectors."""

from enum import Enum
from typing import Dict


class AiProvider(str, Enum):
    """Enum for supported AI backends."""
    GEMINI = "gemini"
    CLAUDE = "claude"


class CacheType(str, Enum):
    """Enum for supported explanation cache backends."""
    REDIS = "redis"
    MEMORY = "memory"
    NONE = "none"


# Extra spellings accepted in configuration, mapped to their canonical backend
CACHE_TYPE_ALIASES: Dict[str, CacheType] = {
    "inmemory": CacheType.MEMORY,
}
