import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(log_level: str = "INFO") -> None:
    """Install the root console handler once for both servers."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
