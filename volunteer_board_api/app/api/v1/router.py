"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
When new domains are introduced, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import complaints, notifications, reports, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(reports.router, prefix="/reports", tags=["reports"])
router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
router.include_router(complaints.router, prefix="/complaints", tags=["complaints"])
