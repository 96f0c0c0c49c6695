"""
API routes for the RealROI calculator.
"""

from fastapi import APIRouter

from realroi.api import calculations

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
