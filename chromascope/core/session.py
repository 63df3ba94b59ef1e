"""Per-file engine session.

A Session owns one open run file and every series derived from it. The UI
layer keeps one Session per opened file and calls into it; results are
published through the session's EventBus.

State machine:
    UNOPENED --open_file--> OPENED --extract--> EXTRACTED --extract--> EXTRACTED
    any state --reset / open_file--> UNOPENED (then OPENED on success)

All reader access happens under a single lock held for the whole extraction
or lookup. Results are swapped in only after the full pipeline succeeded, so
a failed extraction leaves the previous plot in place.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Optional

from chromascope.core.config import DEFAULTS, FILE_FORMAT
from chromascope.core.errors import (
    EngineError,
    InvalidParameter,
    NoIndexAvailable,
    OpenError,
    ReaderUnavailable,
)
from chromascope.core.events import EventBus, EventType
from chromascope.core.models import (
    ChromatogramSeries,
    MassSpectrum,
    PlotSeries,
    PlotType,
    Polarity,
    RetentionTimeIndex,
    RunSummary,
)
from chromascope.loaders import RunReader, is_supported_file, open_run_file, summarize_run
from chromascope.processing import (
    build_retention_time_index,
    extract,
    locate_by_index,
    locate_by_retention_time,
    prepare_for_plot,
    smooth,
    validate_xic_parameters,
)
from chromascope.utils.coordinate_transform import PlotAxisTransform

logger = logging.getLogger(__name__)


class SessionState(Enum):
    UNOPENED = auto()
    OPENED = auto()
    EXTRACTED = auto()


def _parse_half_window(value) -> int:
    try:
        half_window = int(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"Smoothing half-window must be an integer, got {value!r}") from None
    if half_window < 0:
        raise InvalidParameter(f"Smoothing half-window must be non-negative, got {half_window}")
    return half_window


@dataclass(frozen=True)
class ExtractionParameters:
    """Everything that selects a chromatogram."""

    plot_type: PlotType = PlotType.TIC
    polarity: Polarity = Polarity.POSITIVE
    mass: Optional[float] = None
    tolerance_ppm: Optional[float] = None
    smoothing: int = DEFAULTS.SMOOTHING_WINDOW

    @classmethod
    def create(cls, plot_type=None, polarity=None, mass=None, tolerance=None, smoothing=None) -> "ExtractionParameters":
        """Parse and validate user-level values; XIC parameters are checked here."""
        plot_type = PlotType.parse(plot_type if plot_type is not None else DEFAULTS.PLOT_TYPE)
        polarity = Polarity.parse(polarity if polarity is not None else DEFAULTS.POLARITY)
        smoothing = DEFAULTS.SMOOTHING_WINDOW if smoothing is None else _parse_half_window(smoothing)
        if plot_type is PlotType.XIC:
            mass, tolerance = validate_xic_parameters(mass, tolerance)
        return cls(plot_type, polarity, mass, tolerance, smoothing)


@dataclass(frozen=True)
class ExtractionResult:
    """Output of one full extract -> prepare -> smooth pass."""

    parameters: ExtractionParameters
    series: ChromatogramSeries
    prepared: PlotSeries
    plot_series: PlotSeries
    rt_index: RetentionTimeIndex
    reader: RunReader


class Session:
    """Engine state for one opened run file.

    Example usage:
        session = Session()
        session.open_file("data.mzML")
        session.extract(PlotType.XIC, Polarity.POSITIVE, mass=722.43, tolerance=10)
        points = session.current_plot_series.points
        spectrum = session.locate_spectrum_at(10.92)
    """

    def __init__(self, reader_factory: Callable[[str], RunReader] = open_run_file):
        self._reader_factory = reader_factory
        self._lock = threading.RLock()
        self.events = EventBus()

        # ========== FILE ==========
        self._reader: Optional[RunReader] = None
        self._path: Optional[str] = None
        self._state = SessionState.UNOPENED

        # ========== DERIVED DATA (replaced as a whole) ==========
        self._result: Optional[ExtractionResult] = None
        self._mass_spectrum: Optional[MassSpectrum] = None

    # ========== GETTERS ==========

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def reader(self) -> Optional[RunReader]:
        return self._reader

    @property
    def parameters(self) -> Optional[ExtractionParameters]:
        """Parameters of the most recent successful extraction."""
        return self._result.parameters if self._result else None

    @property
    def current_series(self) -> Optional[ChromatogramSeries]:
        return self._result.series if self._result else None

    @property
    def current_prepared_series(self) -> Optional[PlotSeries]:
        return self._result.prepared if self._result else None

    @property
    def current_plot_series(self) -> Optional[PlotSeries]:
        """Latest smoothed series, ready to render."""
        return self._result.plot_series if self._result else None

    @property
    def retention_time_index(self) -> Optional[RetentionTimeIndex]:
        return self._result.rt_index if self._result else None

    @property
    def mass_spectrum(self) -> Optional[MassSpectrum]:
        return self._mass_spectrum

    # ========== FILE LIFECYCLE ==========

    @staticmethod
    def is_supported_file(path) -> bool:
        """Case-sensitive check for the mzML filename suffix."""
        return is_supported_file(path)

    def open_file(self, path) -> None:
        """Open a run file, discarding the previous one and everything derived from it.

        The previous file is dropped before the new one is read, so a failed
        open leaves the session UNOPENED rather than showing stale data.

        Raises:
            OpenError: wrong suffix, missing, unreadable or malformed file
        """
        path = str(path)
        if not is_supported_file(path):
            logger.warning("Rejected %s: not an %s file", path, FILE_FORMAT)
            raise OpenError(path, f"not an {FILE_FORMAT} file")

        with self._lock:
            self._clear()
            try:
                reader = self._reader_factory(path)
            except OpenError:
                raise
            except Exception as e:
                raise OpenError(path, str(e)) from e
            self._reader = reader
            self._path = path
            self._state = SessionState.OPENED
        logger.info("Opened %s (%d spectra)", Path(path).name, len(reader))
        self.events.emit(EventType.FILE_OPENED, path=path)

    def reset(self) -> None:
        """Close the run file and drop all derived data."""
        with self._lock:
            self._clear()
        self.events.emit(EventType.SESSION_RESET)

    def _clear(self) -> None:
        if self._reader is not None:
            self._reader.close()
        self._reader = None
        self._path = None
        self._result = None
        self._mass_spectrum = None
        self._state = SessionState.UNOPENED

    def _require_reader(self) -> RunReader:
        if self._reader is None:
            raise ReaderUnavailable()
        return self._reader

    # ========== EXTRACTION ==========

    def compute(self, parameters: ExtractionParameters) -> ExtractionResult:
        """Run extract -> prepare -> smooth without touching the session's results.

        Raises:
            ReaderUnavailable: no file is open
            EngineError: any extraction failure
        """
        with self._lock:
            reader = self._require_reader()
            series = extract(
                reader,
                parameters.plot_type,
                parameters.polarity,
                mass=parameters.mass,
                tolerance=parameters.tolerance_ppm,
            )
        prepared = prepare_for_plot(series)
        return ExtractionResult(
            parameters=parameters,
            series=series,
            prepared=prepared,
            plot_series=smooth(prepared, parameters.smoothing),
            rt_index=build_retention_time_index(series),
            reader=reader,
        )

    def publish(self, result: ExtractionResult) -> bool:
        """Make ``result`` the current one.

        Returns False (and changes nothing) if the result was computed
        against a file that is no longer open.
        """
        with self._lock:
            if result.reader is not self._reader:
                logger.info("Discarding result for a file that is no longer open")
                return False
            self._result = result
            self._state = SessionState.EXTRACTED
        self.events.emit(
            EventType.SERIES_CHANGED,
            plot_type=result.parameters.plot_type,
            plot_series=result.plot_series,
        )
        return True

    def extract(self, plot_type=None, polarity=None, mass=None, tolerance=None, smoothing=None) -> PlotSeries:
        """Extract a chromatogram and make it current.

        Args:
            plot_type: PlotType or its name ("tic", "bpc", "xic")
            polarity: Polarity or its name
            mass: Target m/z (XIC only)
            tolerance: Mass tolerance in ppm (XIC only)
            smoothing: Moving-average half-window

        Returns:
            The new current plot series

        Raises:
            InvalidParameter: bad parameters, raised before the file is read
            ReaderUnavailable: no file is open
            CentroidingFailed, NoMatchingPeaks: XIC failures; previous results stay
        """
        parameters = ExtractionParameters.create(plot_type, polarity, mass, tolerance, smoothing)
        logger.debug("Extracting %s", parameters)
        try:
            result = self.compute(parameters)
        except EngineError as e:
            logger.warning("Extraction failed (%s): %s", type(e).__name__, e)
            raise
        self.publish(result)
        return result.plot_series

    def resmooth(self, half_window: int) -> PlotSeries:
        """Re-smooth the current prepared series without re-reading the file.

        Raises:
            NoIndexAvailable: nothing has been extracted yet
        """
        with self._lock:
            current = self._result
            if current is None:
                raise NoIndexAvailable()
            parameters = ExtractionParameters(
                current.parameters.plot_type,
                current.parameters.polarity,
                current.parameters.mass,
                current.parameters.tolerance_ppm,
                _parse_half_window(half_window),
            )
            self._result = ExtractionResult(
                parameters=parameters,
                series=current.series,
                prepared=current.prepared,
                plot_series=smooth(current.prepared, parameters.smoothing),
                rt_index=current.rt_index,
                reader=current.reader,
            )
            plot_series = self._result.plot_series
        self.events.emit(EventType.SERIES_CHANGED, plot_type=parameters.plot_type, plot_series=plot_series)
        return plot_series

    # ========== SPECTRUM LOOKUP ==========

    def locate_spectrum_at(self, retention_time: float) -> MassSpectrum:
        """Show the spectrum nearest to ``retention_time`` in the current chromatogram.

        Raises:
            ReaderUnavailable: no file is open
            NoIndexAvailable: no chromatogram extracted yet
            SpectrumMissing: the resolved index is not in the file
        """
        with self._lock:
            reader = self._require_reader()
            index = locate_by_retention_time(self.retention_time_index, retention_time)
            spectrum = locate_by_index(reader, index)
            self._mass_spectrum = spectrum
        logger.info("Spectrum %d at RT %.4f: %d peaks", index, retention_time, len(spectrum))
        self.events.emit(EventType.SPECTRUM_CHANGED, mass_spectrum=spectrum)
        return spectrum

    def locate_spectrum_at_pixel(self, pixel_x: float, left: float, width: float, rt_range=None) -> MassSpectrum:
        """Show the spectrum under a click on the chromatogram plot.

        Args:
            pixel_x: Screen x-coordinate of the click
            left: Screen x-coordinate of the plot's left edge
            width: Plot width in pixels
            rt_range: (min, max) retention time shown on the plot; defaults to
                the range of the current plot series

        Raises:
            NoIndexAvailable: no chromatogram extracted yet
        """
        if rt_range is None:
            plot_series = self.current_plot_series
            if plot_series is None or len(plot_series) == 0:
                raise NoIndexAvailable()
            rt_range = (float(plot_series.x[0]), float(plot_series.x[-1]))
        transform = PlotAxisTransform(left, width, rt_range[0], rt_range[1])
        return self.locate_spectrum_at(transform.pixel_to_rt(pixel_x))

    def locate_spectrum_at_index(self, index: int) -> MassSpectrum:
        """Show the spectrum at ``index``; an empty spectrum when it cannot be found."""
        with self._lock:
            try:
                spectrum = locate_by_index(self._require_reader(), index)
            except EngineError as e:
                logger.warning("No spectrum for index %s: %s", index, e)
                spectrum = MassSpectrum.empty(index=int(index))
            self._mass_spectrum = spectrum
        self.events.emit(EventType.SPECTRUM_CHANGED, mass_spectrum=spectrum)
        return spectrum

    # ========== SUMMARY ==========

    def run_summary(self) -> RunSummary:
        """Summarize the open run file (one full pass).

        Raises:
            ReaderUnavailable: no file is open
        """
        with self._lock:
            return summarize_run(self._require_reader())

    # ========== EVENT BUS DELEGATION ==========

    def on_series_changed(self, callback: Callable) -> Callable:
        """Register a callback for new plot series.

        Callback signature: callback(plot_type: PlotType, plot_series: PlotSeries)
        """
        return self.events.subscribe(EventType.SERIES_CHANGED, callback)

    def on_spectrum_changed(self, callback: Callable) -> Callable:
        """Register a callback for a new mass spectrum.

        Callback signature: callback(mass_spectrum: MassSpectrum)
        """
        return self.events.subscribe(EventType.SPECTRUM_CHANGED, callback)

    def on_file_opened(self, callback: Callable) -> Callable:
        """Callback signature: callback(path: str)"""
        return self.events.subscribe(EventType.FILE_OPENED, callback)
