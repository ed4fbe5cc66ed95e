"""Root logger setup for the placekeep CLI."""

from __future__ import annotations

import logging

# request-level chatter from the HTTP stack
NOISY_LOGGERS = ("httpx", "httpcore", "hishel")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Log to stderr at INFO, or DEBUG with ``verbose``.

    Outside verbose mode the HTTP client libraries are held at WARNING so sync
    and refresh output stays readable.
    """

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else logging.WARNING)
