"""Equal-split cost sharing among confirmed attendees"""

from .calculator import (
    calculate_equal_split,
    calculate_person_stats,
    confirmed_attendee_count,
    confirmed_participants,
    event_total_cents,
)

__all__ = [
    "calculate_equal_split",
    "calculate_person_stats",
    "confirmed_attendee_count",
    "confirmed_participants",
    "event_total_cents",
]
