import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Set

from config.environment import page_size
from controllers.listing import ListInputs
from core.availability import AvailabilityVerdict, activity_view, check_availability
from core.errors import Notice
from core.events import EventBus, Topic
from core.pipeline import (
    ACTIVITY_FIELDS,
    ListQuery,
    PageResult,
    StatusFilter,
    derive_categories,
    lifecycle_counts,
)
from core.reconciler import ViewStateReconciler
from serializers.activity import ActivitySchema, ActivityView
from serializers.user import CurrentUser
from services.activities import ActivitiesService
from services.bookings import BookingsService

logger = logging.getLogger(__name__)

# capacities move whenever someone books or cancels
BOOKING_TOPICS = (Topic.BOOKING_CREATED, Topic.BOOKING_CANCELLED)


@dataclass
class ActivityListView:
    page: PageResult
    categories: List[str]
    counts: dict
    booked_activity_ids: Set[int] = field(default_factory=set)
    notice: Optional[Notice] = None


class ActivityListController(ListInputs):
    """
    Activity list page: the activity collection, the customer's own bookings
    (for "already booked" badges) and the user's list inputs.
    """

    def __init__(
        self,
        activities: ActivitiesService,
        bookings: BookingsService,
        bus: EventBus,
        user: Optional[CurrentUser] = None,
        clock: Callable[[], datetime] = datetime.now,
        size: int = page_size,
    ):
        self.activities_service = activities
        self.user = user
        self.clock = clock
        self.query = ListQuery(status=StatusFilter.UPCOMING, page_size=size)
        # lifecycle filtering happens here against a fresh clock, so fetch everything
        self.activities = ViewStateReconciler(
            "activity-list",
            lambda: activities.index(upcoming_only=False),
            bus,
            topics=BOOKING_TOPICS,
        )
        self.my_bookings = ViewStateReconciler(
            "activity-list-bookings",
            bookings.get_my_bookings,
            bus,
            topics=BOOKING_TOPICS,
        )

    @property
    def is_customer(self) -> bool:
        return self.user is not None and not self.user.is_admin

    async def mount(self):
        if self.is_customer:
            await asyncio.gather(self.activities.mount(), self.my_bookings.mount())
        else:
            await self.activities.mount()

    def unmount(self):
        self.activities.unmount()
        self.my_bookings.unmount()

    async def settle(self):
        await asyncio.gather(self.activities.settle(), self.my_bookings.settle())

    def has_user_booked(self, activity_id: int) -> bool:
        if not self.is_customer:
            return False
        return any(b.activity_id == activity_id for b in self.my_bookings.state or [])

    def view(self) -> ActivityListView:
        items = self.activities.state or []
        now = self.clock()
        page = self.run_query(items, ACTIVITY_FIELDS, now)
        booked = {b.activity_id for b in self.my_bookings.state or []} if self.is_customer else set()
        return ActivityListView(
            page=page,
            categories=derive_categories(items),
            counts=lifecycle_counts(items, now),
            booked_activity_ids=booked,
            notice=self.activities.notice or self.my_bookings.notice,
        )


class ActivityDetailController:
    """One activity, refetched whenever a booking changes its capacity."""

    def __init__(
        self,
        activity_id: int,
        activities: ActivitiesService,
        bus: EventBus,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.activity_id = activity_id
        self.clock = clock
        self.activity = ViewStateReconciler(
            f"activity-{activity_id}",
            lambda: activities.show(activity_id),
            bus,
            topics=BOOKING_TOPICS,
        )

    async def mount(self):
        await self.activity.mount()

    def unmount(self):
        self.activity.unmount()

    def view(self) -> Optional[ActivityView]:
        if self.activity.state is None:
            return None
        return activity_view(self.activity.state, self.clock())

    def availability(self, quantity: int) -> Optional[AvailabilityVerdict]:
        snapshot: Optional[ActivitySchema] = self.activity.state
        if snapshot is None:
            return None
        return check_availability(snapshot, quantity, self.clock())
