import enum


class BookingStatus(str, enum.Enum):
    PAST = "past"
    TODAY = "today"
    UPCOMING = "upcoming"
