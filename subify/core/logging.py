import logging
import os


def configure_logging() -> None:
    """Configure structured logging defaults for the application."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # Stripe's SDK logs request lines at INFO; keep them out unless debugging.
    if level != "DEBUG":
        logging.getLogger("stripe").setLevel(logging.WARNING)
