import logging

from asgi_correlation_id import CorrelationIdFilter

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(correlation_id)s]: %(message)s"


def configure_logging(level: str) -> None:
    """Install the root handler with request correlation ids on every record."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter(uuid_length=12, default_value="-"))
