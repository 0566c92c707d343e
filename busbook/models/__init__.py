from .models import *

__all__ = [
    "Base",
    "User",
    "Bus",
    "Trip",
    "Reservation",
]
