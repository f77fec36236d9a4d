"""Terminal progress display for chromosome scans.

- ProgressBar: single-line bar written to stderr while one chromosome is scanned
- ProgressHook: the same bar, forwarded from a worker process through its report queue
- MultiLineProgressManager: one line per chromosome scanned concurrently

All indicators are switched off when stderr is not a terminal or when
``--disable-progress`` is given.
"""
from __future__ import annotations

import sys
import array
import fcntl
from abc import ABC, abstractmethod
from multiprocessing.queues import Queue
from termios import TIOCGWINSZ
from typing import Any, Callable, Dict, Generic, TextIO, TypeVar, Union

BAR_BODY = "<1II1>" * 12


class ProgressBase(ABC):
    """Base class for progress indicators.

    Attributes:
        global_switch: Class-level flag enabling every indicator
    """

    global_switch: bool = sys.stderr.isatty()

    @classmethod
    def _pass(cls, *args: Any, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def enable_bar(self) -> None:
        pass

    @abstractmethod
    def disable_bar(self) -> None:
        pass


OutputT = TypeVar("OutputT", TextIO, Queue)


class SingleProgressBar(ProgressBase, Generic[OutputT], ABC):
    """A bar tracking the scan position on one chromosome."""
    format: Callable[[str], None]
    clean: Callable[[], None]
    update: Callable[[Union[int, float]], None]

    def _init_config(self, body: str, prefix: str, suffix: str) -> None:
        self.body = body
        self.fmt = "\r" + prefix + "{:<" + str(len(body)) + "}" + suffix
        if self.global_switch:
            self.enable_bar()
        else:
            self.disable_bar()

    def enable_bar(self) -> None:
        if self.global_switch:
            self.format = self._format
            self.clean = self._clean
            self.update = self._update

    def disable_bar(self) -> None:
        self.format = self.clean = self.update = self._pass

    @abstractmethod
    def _format(self, s: str) -> None:
        pass

    @abstractmethod
    def _clean(self) -> None:
        pass

    def set(self, name: str, maxval: Union[int, float]) -> None:
        """Restart the bar for a chromosome of length ``maxval``."""
        self.name = name
        self._unit = float(maxval) / len(self.body)
        self.pos = 0
        self._next_update = self._unit

    def _update(self, val: Union[int, float]) -> None:
        if val > self._next_update:
            while val > self._next_update and self.pos < len(self.body):
                self.pos += 1
                self._next_update += self._unit
            self.format(self.body[:self.pos])


class ProgressBar(SingleProgressBar[TextIO]):
    """Single-line progress bar written to a text stream."""
    def __init__(self, output: TextIO = sys.stderr, body: str = BAR_BODY,
                 prefix: str = ">", suffix: str = "<") -> None:
        self._init_config(body, prefix, suffix)
        self.output = output

    def _format(self, s: str) -> None:
        self.output.write(self.fmt.format(s))

    def _clean(self) -> None:
        self.output.write("\r\033[K")
        self.output.flush()


class ProgressHook(SingleProgressBar[Queue]):
    """Progress bar of a worker process.

    Bar bodies are put on the report queue as ``(None, (chrom, body))`` so
    the main process can tell them apart from chromosome results.
    """
    def __init__(self, output: Queue, body: str = BAR_BODY,
                 prefix: str = ">", suffix: str = "<") -> None:
        self._init_config(body, prefix, suffix)
        self.output = output

    def _clean(self) -> None:
        pass

    def _format(self, s: str) -> None:
        self.output.put((None, (self.name, self.fmt.format(s).lstrip("\r"))))


class MultiLineProgressManager(ProgressBase):
    """Keep one progress line per chromosome being scanned by a worker.

    Lines are added on the first update for a chromosome and removed by
    erase() once its result has arrived.
    """
    erase: Callable[[str], None]
    clean: Callable[[], None]
    update: Callable[[str, str], None]

    def __init__(self, output: TextIO = sys.stderr) -> None:
        self.output = output
        if not self.output.isatty():
            self.global_switch = False

        if not self.global_switch:
            self.disable_bar()
            return None
        self.enable_bar()

        buf = array.array('H', ([0] * 4))
        fcntl.ioctl(self.output.fileno(), TIOCGWINSZ, buf, True)
        self.max_height, self.max_width = buf[:2]
        self.max_width -= 1
        self.key2lineno: Dict[str, int] = {}
        self.lineno2key: Dict[int, str] = {}
        self.key2body: Dict[str, str] = {}
        self.nlines = 0

    def enable_bar(self) -> None:
        if self.global_switch:
            self.erase = self._erase
            self.clean = self._clean
            self.update = self._update

    def disable_bar(self) -> None:
        self.erase = self.clean = self.update = self._pass

    def _up(self, n: int) -> None:
        if n > 0:
            self._write("\033[{}F".format(n))

    def _down(self, n: int) -> None:
        if n > 0:
            self._write("\033[{}E".format(n))

    def _reset_line(self) -> None:
        self._write("\033[K")

    def _write(self, line: str) -> None:
        self.output.write(line[:self.max_width])
        self.output.flush()

    def _redraw(self, first: int, last: int) -> None:
        for lineno in range(first, last):
            key = self.lineno2key[lineno]
            self._reset_line()
            self._write("{} {}".format(self.key2body[key], key))
            if lineno < self.nlines:
                self._write("\n")

    def _update(self, key: str, body: str) -> None:
        if key not in self.key2lineno:
            self.nlines += 1
            self.key2lineno[key] = self.nlines
            self.lineno2key[self.nlines] = key
        self.key2body[key] = body
        self._redraw(1, self.nlines + 1)
        self._up(self.nlines - 1)
        if self.nlines == 1:
            self._write("\033[G")

    def _erase(self, key: str) -> None:
        if key not in self.key2lineno:
            return None
        lineno = self.key2lineno[key]
        self._redraw(1, lineno)
        if lineno == self.nlines:
            self._reset_line()
        for i in range(lineno + 1, self.nlines + 1):
            moved = self.lineno2key[i - 1] = self.lineno2key[i]
            self.key2lineno[moved] -= 1
            self._write("{} {}\n".format(self.key2body[moved], moved))

        del self.lineno2key[self.nlines]
        self.nlines -= 1
        self._reset_line()
        self._up(self.nlines)
        if self.nlines == 1:
            self._write("\033[G")

        del self.key2lineno[key], self.key2body[key]

    def _clean(self) -> None:
        self._reset_line()
        for _ in range(self.nlines - 1):
            self._down(1)
            self._reset_line()
        self._up(self.nlines - 1)
