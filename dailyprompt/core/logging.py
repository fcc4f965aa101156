import logging, sys

from dailyprompt.core.config import cfg as c


def configure_logging(level: str | None = None):
    log = logging.getLogger()
    log.setLevel((level or c.LOG_LEVEL).upper())
    h = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s")
    h.setFormatter(fmt)
    log.handlers.clear()
    log.addHandler(h)
