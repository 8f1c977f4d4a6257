"""
Admin Routes - login check for the dashboard
"""

from fastapi import APIRouter, Depends

from ..auth import require_admin

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.post("/login")
async def login():
    """Echo success when the shared admin password is accepted"""
    return {"message": "Authentication successful", "authenticated": True}
