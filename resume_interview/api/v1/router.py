"""API v1 router aggregator.

All v1 endpoint routers are included here and mounted under /api/v1.
"""

from fastapi import APIRouter

from resume_interview.api.v1 import interview

router = APIRouter()

# =============================================================================
# Interview
# =============================================================================

router.include_router(interview.router, prefix="/interview", tags=["interview"])
