"""
Command-line interface for raster_edt.

Runs either engine on a raster stored on disk or on a synthesized demo
pattern, and writes the field as .npy and/or a grayscale PNG.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path

import click
import numpy as np
from matplotlib import image as mpimg
from tqdm import tqdm

from raster_edt import __version__
from raster_edt.alg import ExactEDT, FastMarching
from raster_edt.core.patterns import PATTERNS
from raster_edt.core.raster import Raster
from raster_edt.hooks import CompositeHooks, FastMarchingHooks, FrameRecorder
from raster_edt.utils.comparison import compare_fields
from raster_edt.utils.exceptions import RasterTransformError
from raster_edt.utils.logging import configure_logging
from raster_edt.visualization import nearest_to_rgb, save_png, save_rgb_png


class TqdmProgress(FastMarchingHooks):
    """Advance a tqdm bar once per freeze event."""

    def __init__(self, total: int, disable: bool = False):
        self.bar = tqdm(total=total, desc="Fast Marching", unit="px", disable=disable, file=sys.stderr)

    def on_freeze(self, event):
        self.bar.update(1)
        return None

    def on_march_end(self, result):
        self.bar.close()


def load_raster_array(path: Path) -> np.ndarray:
    """Read a 2D raster from .npy, text (.txt/.csv) or image files."""
    suffix = path.suffix.lower()
    if suffix == ".npy":
        array = np.load(path)
    elif suffix in (".txt", ".csv"):
        array = np.loadtxt(path, delimiter="," if suffix == ".csv" else None, ndmin=2)
    else:
        array = mpimg.imread(path)
        if array.ndim == 3:
            # Any non-zero color channel counts as set
            array = array[..., :3].max(axis=2)
    if array.ndim != 2:
        raise click.BadParameter(f"expected a 2D raster, got shape {array.shape}", param_hint="INPUT")
    return array


def _run(raster: Raster, method: str, parallel: bool, workers: int | None, squared: bool, nearest: bool, hooks):
    if method == "exact":
        engine = ExactEDT(parallel=parallel, max_workers=workers, return_squared=squared, return_nearest=nearest)
        return engine.solve(raster)
    engine = FastMarching(return_nearest=nearest)
    return engine.solve(raster, progress=hooks)


@click.group()
@click.version_option(version=__version__, prog_name="raster-edt")
@click.option("--verbose", "-v", is_flag=True, help="Enable DEBUG logging from the engines")
def main(verbose):
    """
    raster-edt: exact and Fast Marching Euclidean distance transforms for 2D rasters.
    """
    if verbose:
        configure_logging(level="DEBUG", use_colors=True)


@main.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--method", "-m", type=click.Choice(["exact", "fmm"]), default="exact", show_default=True, help="Transform engine"
)
@click.option("--parallel", is_flag=True, help="Run the exact engine on a thread pool")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Thread pool size for --parallel")
@click.option("--invert", is_flag=True, help="Treat zero pixels as features")
@click.option("--squared", is_flag=True, help="Write squared distances (exact engine only)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write field as .npy")
@click.option("--png", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write grayscale PNG")
@click.option("--progress", is_flag=True, help="Show a progress bar (fmm only)")
@click.option("--frames-every", type=click.IntRange(min=1), default=None, help="Save a PNG every N freeze events (fmm)")
@click.option(
    "--frames-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("frames"),
    show_default=True,
    help="Directory for --frames-every images",
)
def transform(input_path, method, parallel, workers, invert, squared, output, png, progress, frames_every, frames_dir):
    """
    Compute the distance transform of INPUT (.npy, .txt, .csv or image).

    Examples:
        raster-edt transform mask.npy -o dist.npy
        raster-edt transform shape.png --invert --method fmm --png dist.png --progress
    """
    if squared and method != "exact":
        raise click.UsageError("--squared is only available with --method exact")
    if (progress or frames_every) and method != "fmm":
        raise click.UsageError("--progress and --frames-every require --method fmm")

    array = load_raster_array(input_path)
    try:
        raster = Raster.from_array(array, invert=invert)
    except RasterTransformError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Raster {raster.width}x{raster.height}, {raster.feature_count} feature pixels")

    recorder = FrameRecorder(every=frames_every) if frames_every else None
    bar = TqdmProgress(total=raster.size - raster.feature_count) if progress else None
    hooks = CompositeHooks(recorder, bar) if (recorder or bar) else None

    start = time.perf_counter()
    try:
        result = _run(raster, method, parallel, workers, squared, False, hooks)
    except RasterTransformError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"{method} transform finished in {(time.perf_counter() - start) * 1e3:.3f} ms")

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        np.save(output, result.as_image())
        click.echo(f"Field written to {output}")
    if png is not None:
        save_png(png, result.distances, result.width, result.height)
        click.echo(f"Image written to {png}")
    if recorder is not None:
        for step, frame, _ in recorder.frames:
            save_png(frames_dir / f"edt{step}.png", frame, result.width, result.height)
        click.echo(f"{len(recorder.frames)} frames written to {frames_dir}")


@main.command()
@click.argument("pattern", type=click.Choice(sorted(PATTERNS)))
@click.option("--size", "-s", type=click.IntRange(min=1), default=128, show_default=True, help="Raster side length")
@click.option(
    "--method", "-m", type=click.Choice(["exact", "fmm"]), default="exact", show_default=True, help="Transform engine"
)
@click.option("--parallel", is_flag=True, help="Run the exact engine on a thread pool")
@click.option("--diff", is_flag=True, help="Report Fast Marching error against the exact transform")
@click.option("--png", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write grayscale PNG")
@click.option(
    "--nearest-png",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write RGB PNG of distance and offset to the nearest feature",
)
def demo(pattern, size, method, parallel, diff, png, nearest_png):
    """
    Transform a synthesized PATTERN; distances are measured inside the shape.

    Examples:
        raster-edt demo cross --size 512 --png cross.png
        raster-edt demo circle --diff
    """
    shape = PATTERNS[pattern](size)
    raster = Raster.from_array(shape, invert=True)

    start = time.perf_counter()
    result = _run(raster, method, parallel, None, False, nearest_png is not None, None)
    click.echo(f"{pattern} {size}x{size} {method}: {(time.perf_counter() - start) * 1e3:.3f} ms")

    if diff:
        exact = result if method == "exact" else ExactEDT().solve(raster)
        approx = result if method == "fmm" else FastMarching().solve(raster)
        stats = compare_fields(exact.distances, approx.distances)
        click.echo(
            f"max abs error: {stats['max_abs_error']:.4f}, "
            f"max rel error: {stats['max_rel_error']:.4f}, "
            f"mean rel error: {stats['mean_rel_error']:.4f}"
        )

    if png is not None:
        save_png(png, result.distances, size, size)
        click.echo(f"Image written to {png}")
    if nearest_png is not None:
        save_rgb_png(nearest_png, nearest_to_rgb(result.distances, result.nearest_x, result.nearest_y, size, size))
        click.echo(f"Image written to {nearest_png}")


if __name__ == "__main__":
    main()
