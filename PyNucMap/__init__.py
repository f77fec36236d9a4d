"""PyNucMap: nucleosome positioning and verification from bigWig midpoint tracks."""
import logging
import sys
import traceback
import multiprocessing
from functools import wraps
from typing import Any, Callable

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def logging_version(logger: Any) -> None:
    logger.info("PyNucMap version {} with Python{}.{}.{}".format(
                *[VERSION] + list(sys.version_info[:3])))
    for line in sys.version.split('\n'):
        logger.debug(line)


def _ensure_spawn() -> None:
    # Workers open their own pyBigWig handles; forked handles are not safe to share.
    if multiprocessing.get_start_method(allow_none=True) == "spawn":
        return
    try:
        multiprocessing.set_start_method("spawn")
    except RuntimeError:
        logger.warning("Start method already fixed; parallel scanning keeps '{}'.".format(
            multiprocessing.get_start_method()))


def entrypoint(logger: Any) -> Callable[[Callable[[], None]], Callable[[], None]]:
    """Wrap ``pynucmap`` and ``pynucmap-verify`` main functions.

    Ctrl-C clears the progress line and exits quietly; SystemExit from
    configuration errors passes through.
    """
    def _decorate(main_func: Callable[[], None]) -> Callable[[], None]:
        @wraps(main_func)
        def _inner() -> None:
            try:
                _ensure_spawn()
                main_func()
                logger.info("PyNucMap finished.")
            except KeyboardInterrupt:
                sys.stderr.write("\r\033[K")
                sys.stderr.flush()
                logger.info("Got KeyboardInterrupt. bye")
                if 0 < logger.level <= logging.DEBUG:
                    traceback.print_exc()
        return _inner
    return _decorate
