"""
IP-based rate limiting for the scrape and write endpoints.
"""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address

_is_dev = os.getenv("TRACKER_ENV") == "dev"

# Scrape hits third-party sites, so it gets the tighter budget
RATE_LIMIT_SCRAPE = os.getenv("RATE_LIMIT_SCRAPE", "40/minute" if _is_dev else "20/minute")
RATE_LIMIT_WRITE = os.getenv("RATE_LIMIT_WRITE", "120/minute" if _is_dev else "60/minute")

limiter = Limiter(key_func=get_remote_address)
