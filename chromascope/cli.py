"""Command-line interface for chromascope.

This module provides a Click-based CLI for inspecting run files from a
terminal: run summaries, chromatograms and single spectra as CSV.
"""

import logging
import os
import sys

import click

from chromascope import __version__
from chromascope.core.config import DEFAULTS
from chromascope.core.errors import EngineError
from chromascope.core.models import PlotType, Polarity
from chromascope.core.session import Session
from chromascope.processing import locate_by_time

# Set OpenMP threads for pyOpenMS
cpu_count = os.cpu_count() or 1
os.environ.setdefault("OMP_NUM_THREADS", str(cpu_count))

_POLARITY_CHOICES = [p.value for p in Polarity]
_PLOT_TYPE_CHOICES = [p.value for p in PlotType]


def _open_session(path: str) -> Session:
    session = Session()
    try:
        session.open_file(path)
    except EngineError as e:
        raise click.ClickException(str(e)) from e
    return session


@click.group()
@click.option("--verbose", "-v", count=True, help="Increase log output (-v info, -vv debug)")
@click.version_option(version=__version__, prog_name="chromascope")
def main(verbose):
    """chromascope - chromatograms and spectra from mzML files.

    \b
    Examples:
        chromascope info sample.mzML
        chromascope chromatogram sample.mzML --type bpc --smoothing 3
        chromascope chromatogram sample.mzML --type xic --mass 722.43 --tolerance 10
        chromascope spectrum sample.mzML --rt 10.92
    """
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def info(file):
    """Print a summary of FILE."""
    session = _open_session(file)
    summary = session.run_summary()
    click.echo(f"File:       {summary.path}")
    click.echo(f"Spectra:    {summary.n_spectra}")
    if summary.index_range is not None:
        click.echo(f"Index:      {summary.index_range[0]}-{summary.index_range[1]}")
    if summary.rt_range is not None:
        click.echo(f"RT (min):   {summary.rt_range[0]:.4f}-{summary.rt_range[1]:.4f}")
    for level, count in summary.ms_levels.items():
        click.echo(f"MS{level}:        {count}")
    for polarity, count in summary.polarities.items():
        click.echo(f"{polarity:<11} {count}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--type", "-t", "plot_type", type=click.Choice(_PLOT_TYPE_CHOICES), default=DEFAULTS.PLOT_TYPE,
              show_default=True, help="Chromatogram type")
@click.option("--polarity", "-p", type=click.Choice(_POLARITY_CHOICES), default=DEFAULTS.POLARITY,
              show_default=True, help="Scan polarity")
@click.option("--mass", "-m", type=float, default=None, help="Target m/z (XIC)")
@click.option("--tolerance", type=float, default=DEFAULTS.XIC_TOLERANCE_PPM, show_default=True,
              help="Mass tolerance in ppm (XIC)")
@click.option("--smoothing", "-s", type=click.IntRange(0, DEFAULTS.MAX_SMOOTHING_WINDOW),
              default=DEFAULTS.SMOOTHING_WINDOW, show_default=True, help="Moving-average half-window")
@click.option("--raw", is_flag=True, help="Print the unaggregated samples instead of plot points")
def chromatogram(file, plot_type, polarity, mass, tolerance, smoothing, raw):
    """Print a chromatogram of FILE as CSV."""
    session = _open_session(file)
    try:
        session.extract(plot_type, polarity, mass=mass, tolerance=tolerance, smoothing=smoothing)
    except EngineError as e:
        raise click.ClickException(str(e)) from e

    df = session.current_series.to_dataframe() if raw else session.current_plot_series.to_dataframe()
    click.echo(df.to_csv(index=False), nl=False)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--rt", type=float, default=None, help="Retention time in minutes (nearest spectrum)")
@click.option("--index", "-i", type=int, default=None, help="Spectrum index")
def spectrum(file, rt, index):
    """Print one spectrum of FILE as CSV."""
    if (rt is None) == (index is None):
        raise click.UsageError("Give exactly one of --rt or --index")

    session = _open_session(file)
    try:
        if rt is not None:
            mass_spectrum = locate_by_time(session.reader, rt)
        else:
            mass_spectrum = session.locate_spectrum_at_index(index)
    except EngineError as e:
        raise click.ClickException(str(e)) from e

    click.echo(mass_spectrum.to_dataframe().to_csv(index=False), nl=False)


if __name__ == "__main__":
    main()
