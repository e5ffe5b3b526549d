"""
Logging configuration.
"""
import logging

from relay.config.settings import Settings

LOG_FORMAT = "%(asctime)s [relay] %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install the root handler once, at the level the settings ask for."""
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)

    # httpx logs every request at INFO; keep it out of the relay's output
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
