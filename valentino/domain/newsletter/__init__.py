"""Newsletter domain - subscribers, drafts and idempotent sends"""

from .router import router

__all__ = ["router"]
