"""Root logger setup for the PyNucMap command-line tools."""
import logging
from typing import Optional, Dict

LOGGING_FORMAT: str = "[%(asctime)s | %(levelname)s] %(name)10s : %(message)s"


def set_rootlogger(colorize: bool, log_level: int) -> logging.Logger:
    rl = logging.getLogger('')

    h = logging.StreamHandler()
    h.setFormatter(ColorfulFormatter(fmt=LOGGING_FORMAT, colorize=colorize))

    rl.addHandler(h)
    rl.setLevel(log_level)

    return rl


class ColorfulFormatter(logging.Formatter):
    """Level names in ANSI colors; ERROR and CRITICAL messages in bold.

    Without ``colorize`` only the level name padding is applied, so plain
    log files line up the same way.
    """
    DEFAULT_COLOR: int = 39
    # INFO cyan, WARNING yellow, ERROR red, CRITICAL magenta
    LOGLEVEL2COLOR: Dict[int, int] = {
        logging.INFO: 36, logging.WARNING: 33, logging.ERROR: 31, logging.CRITICAL: 35
    }

    _fmt: str

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, colorize: bool = True) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.colorize = colorize
        levelname = "%(levelname)8s"
        message = "%(message)s"
        if colorize:
            levelname = "\033[{col}m" + levelname + "\033[0m"
            message = "\033[{msg}m" + message + "\033[0m"
        self._fmt = self._fmt.replace("%(levelname)s", levelname).replace("%(message)s", message)

    def fill_format(self, record: logging.LogRecord) -> str:
        fmt = self._fmt
        if self.colorize:
            fmt = fmt.format(col=self.LOGLEVEL2COLOR.get(record.levelno, self.DEFAULT_COLOR),
                             msg=1 if record.levelno >= logging.ERROR else 0)
        return fmt % record.__dict__

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        s = self.fill_format(record)

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            s = s.rstrip("\n") + "\n" + record.exc_text

        return s
