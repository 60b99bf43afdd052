"""Service layer exports."""
from parkshift.services import (
    availability_service,
    booking_calculator,
    booking_service,
    dispute_service,
    message_service,
    notification_service,
    payments_service,
    review_service,
    search_service,
    space_service,
    vehicle_service,
)

__all__ = [
    "availability_service",
    "booking_calculator",
    "booking_service",
    "dispute_service",
    "message_service",
    "notification_service",
    "payments_service",
    "review_service",
    "search_service",
    "space_service",
    "vehicle_service",
]
