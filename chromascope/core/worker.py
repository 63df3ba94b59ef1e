"""Background extraction for UI callers.

Requests run one at a time on a single worker thread. Each request gets a
generation number; when it finishes, its result is published only if no
newer request has been submitted in the meantime, so the plot always shows
the most recently requested parameters and two extractions are never mixed.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from chromascope.core.models import PlotSeries
from chromascope.core.session import ExtractionParameters, Session

logger = logging.getLogger(__name__)


class ExtractionWorker:
    """Runs Session extractions off the calling thread.

    Usage:
        worker = ExtractionWorker(session)
        future = worker.submit("xic", "positive", mass=722.43, tolerance=10)
        plot_series = future.result()  # None if superseded

    Cancellation of a running pass is not supported; a superseded pass runs
    to completion and its result is dropped.
    """

    def __init__(self, session: Session):
        self.session = session
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chromascope-extract")
        self._generation = 0
        self._generation_lock = threading.Lock()

    def submit(self, plot_type=None, polarity=None, mass=None, tolerance=None, smoothing=None) -> Future:
        """Queue an extraction.

        Parameters are validated immediately, so InvalidParameter is raised
        here rather than from the future.

        Returns:
            Future resolving to the published PlotSeries, or None when a newer
            request superseded this one. Engine errors are set on the future.
        """
        parameters = ExtractionParameters.create(plot_type, polarity, mass, tolerance, smoothing)
        with self._generation_lock:
            self._generation += 1
            generation = self._generation
        return self._executor.submit(self._run, parameters, generation)

    def _run(self, parameters: ExtractionParameters, generation: int) -> Optional[PlotSeries]:
        if self.is_superseded(generation):
            logger.debug("Skipping superseded request %d", generation)
            return None
        result = self.session.compute(parameters)
        if self.is_superseded(generation):
            logger.debug("Dropping result of superseded request %d", generation)
            return None
        if not self.session.publish(result):
            return None
        return result.plot_series

    def is_superseded(self, generation: int) -> bool:
        with self._generation_lock:
            return generation != self._generation

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ExtractionWorker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
