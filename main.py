import argparse
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from config.environment import backend_url, log_level, signal_db_URI
from controllers.activities import ActivityDetailController, ActivityListController
from controllers.bookings import BookingFormController, ProfileBookingsController
from controllers.favorites import FavoritesController
from controllers.products import ProductListController
from core.availability import activity_view
from core.events import EventBus
from core.signal import CrossTabSignal
from database import make_session_factory
from serializers.user import CurrentUser
from services.activities import ActivitiesService
from services.bookings import BookingsService
from services.client import ApiClient
from services.favorites import FavoritesService
from services.products import ProductsService

logger = logging.getLogger("farmventure")


def setup_logging(level: str = log_level):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class ClientApp:
    """
    One client context (one "tab"): a bus shared by all of its views, the
    cross-tab signal, the API services, and factories for view controllers.
    """

    def __init__(
        self,
        base_url: str = backend_url,
        token: Optional[str] = None,
        user: Optional[CurrentUser] = None,
        db_URI: str = signal_db_URI,
        transport=None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.user = user
        self.clock = clock
        self.client = ApiClient(base_url, token=token, transport=transport)
        self.bus = EventBus()
        self.signal = CrossTabSignal(make_session_factory(db_URI))

        self.activities = ActivitiesService(self.client)
        self.bookings = BookingsService(self.client)
        self.favorites = FavoritesService(self.client)
        self.products = ProductsService(self.client)

    def activity_list(self) -> ActivityListController:
        return ActivityListController(self.activities, self.bookings, self.bus, self.user, self.clock)

    def activity_detail(self, activity_id: int) -> ActivityDetailController:
        return ActivityDetailController(activity_id, self.activities, self.bus, self.clock)

    def booking_form(self, activity_id: int) -> BookingFormController:
        return BookingFormController(activity_id, self.activities, self.bookings, self.bus, self.user, self.clock)

    def profile_bookings(self) -> ProfileBookingsController:
        return ProfileBookingsController(self.bookings, self.bus, self.user, self.clock)

    def favorites_view(self) -> FavoritesController:
        return FavoritesController(self.favorites, self.bus, self.signal, self.user)

    def product_list(self, favorites: Optional[FavoritesController] = None) -> ProductListController:
        return ProductListController(self.products, self.bus, favorites)

    async def aclose(self):
        self.signal.stop()
        await self.client.aclose()


async def show_activities(app: ClientApp, search: str = "", category: str = "all", status: str = "upcoming", sort: Optional[str] = None, page: int = 1):
    controller = app.activity_list()
    await controller.mount()
    controller.set_search(search)
    controller.set_category(category)
    controller.set_status(status)
    controller.set_sort(sort)
    controller.go_to_page(page)
    view = controller.view()
    controller.unmount()

    if view.notice is not None:
        logger.error(view.notice.message)
        return view

    logger.info("%d upcoming, %d past, %d total", view.counts["upcoming"], view.counts["past"], view.counts["total"])
    for activity in view.page.items:
        card = activity_view(activity, app.clock())
        logger.info("#%s %s | %s | BHD%.2f | %s spots left", activity.id, activity.title, activity.date_time, activity.price, card.spots_left)
    pages = " ".join(str(token) for token in view.page.window)
    logger.info("Page %d of %d: %s", view.page.page, view.page.total_pages, pages)
    return view


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="List FarmVenture activities")
    parser.add_argument("--search", default="")
    parser.add_argument("--category", default="all")
    parser.add_argument("--status", default="upcoming", choices=["all", "upcoming", "past"])
    parser.add_argument("--sort", default=None)
    parser.add_argument("--page", type=int, default=1)
    return parser.parse_args(argv)


async def main(argv=None):
    args = parse_args(argv)
    setup_logging()
    app = ClientApp()
    try:
        await show_activities(app, args.search, args.category, args.status, args.sort, args.page)
    finally:
        await app.aclose()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
