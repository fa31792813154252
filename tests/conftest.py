"""
Pytest configuration and fixtures
"""
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from database import make_session_factory  # noqa: E402
from models.booking import BookingStatus  # noqa: E402
from models.user import UserRole  # noqa: E402
from serializers.activity import ActivitySchema  # noqa: E402
from serializers.booking import BookingSchema  # noqa: E402
from serializers.user import CurrentUser  # noqa: E402

NOW = datetime(2026, 3, 14, 12, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def customer():
    return CurrentUser(id=1, username="farmer_fan", role=UserRole.CUSTOMER)


@pytest.fixture
def other_customer():
    return CurrentUser(id=3, username="someone_else", role=UserRole.CUSTOMER)


@pytest.fixture
def admin():
    return CurrentUser(id=2, username="barn_admin", role=UserRole.ADMIN)


def build_activity(id=1, title="Goat Yoga", days=3, max_capacity=10, current_capacity=0, **overrides):
    data = {
        "id": id,
        "title": title,
        "description": f"{title} at the farm",
        "date_time": NOW + timedelta(days=days),
        "duration_minutes": 60,
        "price": 10.0,
        "max_capacity": max_capacity,
        "current_capacity": current_capacity,
        "category": "Workshop",
        "location": "North field",
        "image_url": "https://example.com/a.jpg",
    }
    data.update(overrides)
    return ActivitySchema(**data)


def build_booking(id=1, user_id=1, activity=None, status=BookingStatus.UPCOMING, tickets_number=1):
    activity = activity or build_activity()
    return BookingSchema(
        id=id,
        user_id=user_id,
        activity_id=activity.id,
        tickets_number=tickets_number,
        status=status,
        booked_at=NOW - timedelta(days=1),
        activity=activity,
    )


@pytest.fixture
def make_activity():
    return build_activity


@pytest.fixture
def make_booking():
    return build_booking


@pytest.fixture
def signal_sessions(tmp_path):
    """Session factory for a signal database shared by every context in a test."""
    return make_session_factory(f"sqlite:///{tmp_path / 'signals.db'}")
