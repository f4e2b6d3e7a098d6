import logging
import sys

# third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "slowapi")


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the service.

    Format: time level logger message k=v ...
    Credentials (passwords, tokens) are never passed to log calls.
    """
    root = logging.getLogger()
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if root.handlers:
        # Respect existing (e.g., uvicorn, pytest) but align level
        root.setLevel(level.upper())
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root.addHandler(handler)
    root.setLevel(level.upper())
