"""Appointments domain - public booking and admin management"""

from .router import router

__all__ = ["router"]
