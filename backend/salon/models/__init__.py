from salon.models.booking import Booking
from salon.models.treatment import Treatment
from salon.models.user import User

__all__ = ["Booking", "Treatment", "User"]
