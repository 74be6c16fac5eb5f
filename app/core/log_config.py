import logging

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once; uvicorn's own loggers are left alone."""
    root = logging.getLogger()
    if any(getattr(h, "_villa_handler", False) for h in root.handlers):
        root.setLevel(level.upper())
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._villa_handler = True
    root.addHandler(handler)
    root.setLevel(level.upper())
