"""
Pre-flight availability checks for booking an activity.

Everything here runs against the locally held activity snapshot, before any
request is sent. The API enforces the same rules on its side; a local OK
verdict does not guarantee the booking will be accepted.
"""
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from config.environment import max_tickets_per_booking
from serializers.activity import ActivitySchema, ActivityView
from .lifecycle import is_upcoming


class VerdictKind(str, enum.Enum):
    OK = "OK"
    PAST_ACTIVITY = "PAST_ACTIVITY"
    SOLD_OUT = "SOLD_OUT"
    INSUFFICIENT_SPOTS = "INSUFFICIENT_SPOTS"
    INVALID_QUANTITY = "INVALID_QUANTITY"


@dataclass(frozen=True)
class AvailabilityVerdict:
    kind: VerdictKind
    spots_left: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.kind == VerdictKind.OK

    @property
    def message(self) -> str:
        if self.kind == VerdictKind.OK:
            return f"{self.spots_left} spot{'s' if self.spots_left != 1 else ''} available"
        if self.kind == VerdictKind.PAST_ACTIVITY:
            return "Cannot book past activities."
        if self.kind == VerdictKind.SOLD_OUT:
            return "This activity is sold out."
        if self.kind == VerdictKind.INSUFFICIENT_SPOTS:
            return f"Only {self.spots_left} spot{'s' if self.spots_left != 1 else ''} available."
        return "Please select at least 1 ticket."


def spots_left(activity: ActivitySchema) -> int:
    """max_capacity - current_capacity, unclamped"""
    return activity.max_capacity - activity.current_capacity


def is_sold_out(activity: ActivitySchema) -> bool:
    return spots_left(activity) <= 0


def max_tickets(activity: ActivitySchema, ceiling: int = max_tickets_per_booking) -> int:
    """Largest quantity the booking form offers."""
    return min(max(spots_left(activity), 0), ceiling)


def check_availability(activity: ActivitySchema, requested: int, now: Optional[datetime] = None) -> AvailabilityVerdict:
    """
    Decide whether `requested` tickets can be booked.

    Checks run in a fixed order and the first failing one wins:
    past activity, sold out, insufficient spots, invalid quantity.
    """
    now = now or datetime.now()
    left = spots_left(activity)

    if not is_upcoming(activity.date_time, now):
        return AvailabilityVerdict(VerdictKind.PAST_ACTIVITY)
    if left <= 0:
        return AvailabilityVerdict(VerdictKind.SOLD_OUT, spots_left=0)
    if left < requested:
        return AvailabilityVerdict(VerdictKind.INSUFFICIENT_SPOTS, spots_left=left)
    if requested < 1:
        return AvailabilityVerdict(VerdictKind.INVALID_QUANTITY, spots_left=left)
    return AvailabilityVerdict(VerdictKind.OK, spots_left=left)


def activity_view(activity: ActivitySchema, now: Optional[datetime] = None) -> ActivityView:
    now = now or datetime.now()
    left = spots_left(activity)
    return ActivityView(
        activity=activity,
        spots_left=max(left, 0),
        max_tickets=max_tickets(activity),
        is_upcoming=is_upcoming(activity.date_time, now),
        is_sold_out=left <= 0,
    )
