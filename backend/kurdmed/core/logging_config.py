import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler; safe to call more than once."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # The SDK's HTTP client logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
