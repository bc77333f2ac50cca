"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from booking_api.api.routes import bookings

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(bookings.router)
