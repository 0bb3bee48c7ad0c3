import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls are no-ops because basicConfig keeps existing handlers."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
