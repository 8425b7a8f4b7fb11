"""
Prometheus counters for scrape requests and application writes.
"""
import logging

from prometheus_client import Counter, make_asgi_app

logger = logging.getLogger(__name__)

SCRAPE_OUTCOMES = ("success", "missing_url", "fetch_error", "parse_error", "error")
APPLICATION_OPERATIONS = ("insert", "update", "update_status", "delete")

scrape_requests = Counter(
    "tracker_scrape_requests_total",
    "Scrape requests by outcome",
    ["outcome"],
)
application_writes = Counter(
    "tracker_application_writes_total",
    "Application rows written by operation",
    ["operation"],
)


def record_scrape(outcome: str):
    """Increment the scrape counter for one of SCRAPE_OUTCOMES."""
    if outcome not in SCRAPE_OUTCOMES:
        logger.warning(f"[metrics] Unknown scrape outcome: {outcome}")
        return
    scrape_requests.labels(outcome=outcome).inc()


def record_application_write(operation: str):
    if operation not in APPLICATION_OPERATIONS:
        logger.warning(f"[metrics] Unknown application operation: {operation}")
        return
    application_writes.labels(operation=operation).inc()


metrics_app = make_asgi_app()
