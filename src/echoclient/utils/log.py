import logging
import sys

_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def make_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    # stdout carries the reply line only
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(h)
    logger.propagate = False
    return logger


def set_level(level: str) -> None:
    # module loggers are left at NOTSET and inherit this
    logging.getLogger("echoclient").setLevel(level)
