"""Versioned API router."""

from fastapi import APIRouter

from . import (
    availability,
    bookings,
    disputes,
    health,
    messages,
    notifications,
    payments,
    reviews,
    search,
    spaces,
    vehicles,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(spaces.router)
router.include_router(availability.router)
router.include_router(reviews.router)
router.include_router(vehicles.router)
router.include_router(search.router)
router.include_router(bookings.router)
router.include_router(payments.router)
router.include_router(notifications.router)
router.include_router(messages.router)
router.include_router(disputes.router)

__all__ = ["router"]
