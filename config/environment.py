import os
from dotenv import load_dotenv

load_dotenv()

# Collaborator (FarmVenture API)
backend_url = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")
request_timeout = float(os.getenv("REQUEST_TIMEOUT", "30"))

# Shared store used to signal sibling processes
signal_db_URI = os.getenv("SIGNAL_DATABASE_URL", "sqlite:///farmventure_signals.db")
signal_poll_interval = float(os.getenv("SIGNAL_POLL_INTERVAL", "1.0"))

# List views
page_size = int(os.getenv("PAGE_SIZE", "9"))

# Booking form ceiling, independent of remaining capacity
max_tickets_per_booking = int(os.getenv("MAX_TICKETS_PER_BOOKING", "50"))

log_level = os.getenv("LOG_LEVEL", "INFO")
