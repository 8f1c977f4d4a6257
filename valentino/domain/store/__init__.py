"""Store domain - product catalog, checkout and orders"""

from .router import router

__all__ = ["router"]
