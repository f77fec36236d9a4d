"""Worker process scanning chromosomes for the parallel positioning run.

Each worker opens its own signal accessor, then takes chromosome names from
the order queue until it receives None. Calls found on a chromosome are
reported as ``(chrom, calls)``; a failure is reported as
``('__ERROR__', traceback)`` before the worker exits.
"""
import logging
import os
import sys
import traceback
from multiprocessing import Process, Queue
from multiprocessing.synchronize import Lock
from typing import Callable, Dict, List, Optional

from PyNucMap.interfaces.config import PositioningConfig
from PyNucMap.interfaces.signal import SignalAccessor
from PyNucMap.core.engine import PositioningEngine
from PyNucMap.core.models import Nucleosome
from PyNucMap.utils.progress import ProgressHook

logger = logging.getLogger(__name__)


class PositioningWorker(Process):
    """Scan chromosomes handed out by the main process.

    Attributes:
        config: Positioning configuration
        order_queue: Queue of chromosome names, None terminates the worker
        report_queue: Queue receiving results, progress and errors
        logger_lock: Lock serializing log output between processes
        opener: Picklable callable returning a signal accessor
    """

    def __init__(self,
                 config: PositioningConfig,
                 order_queue: Queue,
                 report_queue: Queue,
                 logger_lock: Lock,
                 opener: Callable[[], SignalAccessor],
                 chrom2length: Dict[str, int]) -> None:
        super().__init__()

        self.config = config
        self.order_queue = order_queue
        self.report_queue = report_queue
        self.logger_lock = logger_lock
        self.opener = opener
        self.chrom2length = chrom2length

        self._progress = ProgressHook(report_queue)

    def run(self) -> None:
        accessor: Optional[SignalAccessor] = None
        try:
            accessor = self.opener()
            engine = PositioningEngine(accessor, self.config)

            while True:
                chrom = self.order_queue.get()
                if chrom is None:
                    break

                calls = self._process_chromosome(engine, chrom)
                self.report_queue.put((chrom, calls))

        except KeyboardInterrupt:
            if 0 < logger.level <= logging.DEBUG:
                raise

        except Exception as e:
            with self.logger_lock:
                logger.error("{}: Error in worker: {}".format(self.name, e))

            tb = traceback.format_exc()
            self.report_queue.put(('__ERROR__', tb))
            sys.stderr.write(tb)
            sys.stderr.flush()
            os._exit(1)

        finally:
            with self.logger_lock:
                logger.debug("{}: Shutting down worker".format(self.name))
            if accessor is not None:
                accessor.close()

    def _process_chromosome(self, engine: PositioningEngine, chrom: str) -> List[Nucleosome]:
        """Scan one chromosome and return its calls."""
        length = self.chrom2length[chrom]
        with self.logger_lock:
            logger.debug("{}: Scanning {}".format(self.name, chrom))

        self._progress.enable_bar()
        self._progress.set(chrom, length)
        calls = engine.scan_chromosome(chrom, length, self._progress.update)

        with self.logger_lock:
            logger.info("Found {} nucleosomes on {}".format(len(calls), chrom))
        return calls
