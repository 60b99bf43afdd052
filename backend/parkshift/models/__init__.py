"""ORM models package export."""

from parkshift.models.availability import AvailabilitySlot
from parkshift.models.booking import Booking, BookingStatus
from parkshift.models.dispute import Dispute, DisputeReason, DisputeStatus
from parkshift.models.message import Message
from parkshift.models.notification import Notification, NotificationType
from parkshift.models.parking_space import ParkingSpace
from parkshift.models.profile import Profile
from parkshift.models.review import Review
from parkshift.models.vehicle import Vehicle

__all__ = [
    "AvailabilitySlot",
    "Booking",
    "BookingStatus",
    "Dispute",
    "DisputeReason",
    "DisputeStatus",
    "Message",
    "Notification",
    "NotificationType",
    "ParkingSpace",
    "Profile",
    "Review",
    "Vehicle",
]
