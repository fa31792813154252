import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set

from core.availability import check_availability
from core.errors import ActionInProgress, CollaboratorError, ErrorKind, Notice, USER_MESSAGES
from core.events import EventBus, Topic
from core.lifecycle import booking_stats, can_cancel, classify, filter_bookings, is_upcoming
from core.reconciler import ActionGuard, ViewStateReconciler
from models.booking import BookingStatus
from serializers.booking import BookingSchema, BookingStats
from serializers.user import CurrentUser
from services.activities import ActivitiesService
from services.bookings import BookingsService

logger = logging.getLogger(__name__)

BOOKING_TOPICS = (Topic.BOOKING_CREATED, Topic.BOOKING_CANCELLED)


class BookingFormController:
    """
    Booking form for one activity.

    Submitting runs the availability check against the local snapshot first
    and only calls the API when it passes. The API can still refuse (another
    process may have taken the last seat); that refusal is shown like any
    other error and the snapshot is refetched.
    """

    def __init__(
        self,
        activity_id: int,
        activities: ActivitiesService,
        bookings: BookingsService,
        bus: EventBus,
        user: Optional[CurrentUser] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.activity_id = activity_id
        self.bookings_service = bookings
        self.bus = bus
        self.user = user
        self.clock = clock
        self.guard = ActionGuard()
        self.notice: Optional[Notice] = None
        self.activity = ViewStateReconciler(
            f"booking-form-{activity_id}",
            lambda: activities.show(activity_id),
            bus,
            topics=BOOKING_TOPICS,
        )

    @property
    def submitting(self) -> bool:
        return self.guard.is_pending("submit")

    async def mount(self):
        await self.activity.mount()

    def unmount(self):
        self.activity.unmount()

    def dismiss_notice(self):
        if self.notice is not None:
            self.notice.dismiss()
            self.notice = None

    async def submit(self, tickets_number: int) -> Optional[BookingSchema]:
        """Returns the created booking, or None with `notice` explaining why not."""
        self.notice = None

        if self.user is None:
            self.notice = Notice(ErrorKind.NOT_SIGNED_IN.value, USER_MESSAGES[ErrorKind.NOT_SIGNED_IN])
            return None
        if self.user.is_admin:
            self.notice = Notice(ErrorKind.ACTOR_NOT_ALLOWED.value, USER_MESSAGES[ErrorKind.ACTOR_NOT_ALLOWED])
            return None

        snapshot = self.activity.state
        if snapshot is None:
            self.notice = Notice(ErrorKind.NOT_FOUND.value, USER_MESSAGES[ErrorKind.NOT_FOUND])
            return None

        verdict = check_availability(snapshot, tickets_number, self.clock())
        if not verdict.ok:
            logger.info("Booking of activity %s refused locally: %s", self.activity_id, verdict.kind.value)
            self.notice = Notice(verdict.kind.value, verdict.message)
            return None

        try:
            async with self.guard.hold("submit"):
                booking = await self.bookings_service.create_booking(snapshot.id, tickets_number)
        except ActionInProgress:
            logger.debug("Booking submit already in flight for activity %s", self.activity_id)
            return None
        except CollaboratorError as error:
            self.notice = Notice.from_error(error)
            if error.kind == ErrorKind.CAPACITY_EXCEEDED:
                await self.activity.refresh()
            return None

        logger.info("Booked %d ticket(s) for activity %s", tickets_number, self.activity_id)
        self.bus.publish(Topic.BOOKING_CREATED)
        return booking


@dataclass
class ProfileBookingsView:
    bookings: List[BookingSchema]
    stats: BookingStats
    cancellable_ids: Set[int] = field(default_factory=set)
    # display badge from the activity time; `status` stays what the API said
    badges: Dict[int, BookingStatus] = field(default_factory=dict)
    notice: Optional[Notice] = None


class ProfileBookingsController:
    """The bookings tab of the profile page."""

    def __init__(
        self,
        bookings: BookingsService,
        bus: EventBus,
        user: Optional[CurrentUser] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.bookings_service = bookings
        self.bus = bus
        self.user = user
        self.clock = clock
        self.status_filter = "all"
        self.guard = ActionGuard()
        self.notice: Optional[Notice] = None
        self.bookings = ViewStateReconciler(
            "profile-bookings",
            bookings.get_my_bookings,
            bus,
            topics=BOOKING_TOPICS,
        )

    async def mount(self):
        await self.bookings.mount()

    def unmount(self):
        self.bookings.unmount()

    def set_status_filter(self, status: str):
        if status != "all":
            BookingStatus(status)
        self.status_filter = status

    def can_cancel(self, booking: BookingSchema) -> bool:
        return can_cancel(booking, booking.activity, self.user, self.clock())

    def is_cancelling(self, booking_id: int) -> bool:
        return self.guard.is_pending(booking_id)

    def view(self) -> ProfileBookingsView:
        bookings = self.bookings.state or []
        now = self.clock()
        return ProfileBookingsView(
            bookings=filter_bookings(bookings, self.status_filter),
            stats=booking_stats(bookings),
            cancellable_ids={b.id for b in bookings if self.can_cancel(b)},
            badges={b.id: classify(b.activity.date_time, now) for b in bookings if b.activity is not None},
            notice=self.notice or self.bookings.notice,
        )

    async def cancel(self, booking_id: int) -> bool:
        self.notice = None
        booking = next((b for b in self.bookings.state or [] if b.id == booking_id), None)
        if booking is None:
            self.notice = Notice(ErrorKind.NOT_FOUND.value, "Booking not found.")
            return False
        if booking.activity is None:
            self.notice = Notice(ErrorKind.NOT_FOUND.value, "The activity for this booking is no longer available.")
            return False

        if not self.can_cancel(booking):
            started = booking.status == BookingStatus.PAST or not is_upcoming(booking.activity.date_time, self.clock())
            if started:
                self.notice = Notice(ErrorKind.PAST_ACTIVITY.value, "Cannot cancel booking for past activities.")
            else:
                self.notice = Notice(ErrorKind.FORBIDDEN.value, "You can only cancel your own bookings.")
            return False

        try:
            async with self.guard.hold(booking_id):
                await self.bookings_service.cancel_booking(booking_id)
        except ActionInProgress:
            return False
        except CollaboratorError as error:
            self.notice = Notice.from_error(error)
            return False

        logger.info("Cancelled booking %s", booking_id)
        self.bus.publish(Topic.BOOKING_CANCELLED)
        return True
