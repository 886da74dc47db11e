"""
API v1 routes.
"""

from fastapi import APIRouter

from openalpha.api.v1 import auth, coach, parent, progress, tutor

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(tutor.router, prefix="/tutor", tags=["Tutor"])
router.include_router(progress.router, prefix="/progress", tags=["Progress"])
router.include_router(parent.router, prefix="/parent", tags=["Parent"])
router.include_router(coach.router, prefix="/coach", tags=["Coach"])
