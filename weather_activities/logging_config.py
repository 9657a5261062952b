import logging

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    """Configure the root logger with a single console handler.

    Safe to call more than once: handlers are only attached the first time,
    later calls just adjust the level.
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
