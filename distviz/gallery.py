# distviz/gallery.py
"""
Renders every chart type over the cars dataset and exports each one.

Run with ``python -m distviz.gallery --config gallery.yml`` or the
``distviz-gallery`` console script.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import matplotlib
import matplotlib.pyplot as plt

from .config_manager import ConfigManager
from .data_viz import DataVisualizer
from .datasets import count_by, load_dataset, select_samples, summarize_by
from .error_handling import ErrorHandler
from .estimators import BinSpec
from .logging_setup import setup_logging
from .performance import PerformanceMonitor

logger = logging.getLogger(__name__)

SPLOM_COLUMNS = ['mpg', 'hp', 'wt', 'qsec']


def _histogram_spec(config: ConfigManager, samples) -> BinSpec:
    return BinSpec.covering(
        samples,
        config.get('histogram.bin_width'),
        out_of_range=config.get('histogram.out_of_range', 'drop'),
    )


def build_charts(viz: DataVisualizer, df, config: ConfigManager) -> Dict[str, Callable]:
    """
    Maps chart names to zero-argument functions that return a Figure.

    Each function performs its own reshaping, so one failing chart does
    not prevent the others from rendering.
    """
    def mpg():
        return select_samples(df, 'mpg')

    bin_width = config.get('histogram.bin_width')
    density_kwargs = dict(
        kernel=config.get('density.kernel'),
        bandwidth=config.get('density.bandwidth'),
        resolution=config.get('density.resolution'),
        cut=config.get('density.cut'),
    )

    def dotplot():
        return viz.dotplot(mpg(), bin_width, title='Fuel economy', xlabel='mpg')

    def boxplot():
        return viz.boxplot(df, x='cylinders', y='mpg', title='mpg by cylinder count')

    def histogram():
        samples = mpg()
        return viz.histogram(samples, _histogram_spec(config, samples), title='Fuel economy', xlabel='mpg')

    def density():
        samples = mpg()
        return viz.density(samples, overlay=_histogram_spec(config, samples), title='Fuel economy density',
                           xlabel='mpg', **density_kwargs)

    def violin():
        return viz.violin(df, x='transmission', y='mpg', title='mpg by transmission')

    def bar():
        return viz.bar(count_by(df, 'cylinders'), title='Cars per cylinder count', ylabel='cars')

    def stacked_bar():
        return viz.bar(count_by(df, 'cylinders', stack='transmission'), stacked=True,
                       title='Transmission mix per cylinder count', ylabel='cars')

    def pie():
        return viz.pie(count_by(df, 'transmission')['count'], title='Share by transmission')

    def line():
        summary = summarize_by(df, 'gear', 'mpg')
        return viz.line(summary, x='gear', y='mpg', title='Mean mpg by gear count')

    def scatter():
        return viz.scatter(df, x='wt', y='mpg', hue='cylinders', title='Weight vs mpg')

    def bubble():
        return viz.bubble(df, x='wt', y='mpg', size='hp', hue='transmission', title='Weight vs mpg (size = hp)')

    def facets():
        return viz.facets(df, value='mpg', by='cylinders', bin_width=bin_width, title='mpg per cylinder count')

    def scatter_matrix():
        return viz.scatter_matrix(df, SPLOM_COLUMNS, kernel=density_kwargs['kernel'],
                                  resolution=density_kwargs['resolution'], title='Scatterplot matrix')

    return {
        'dotplot': dotplot,
        'boxplot': boxplot,
        'histogram': histogram,
        'density': density,
        'violin': violin,
        'bar': bar,
        'stacked_bar': stacked_bar,
        'pie': pie,
        'line': line,
        'scatter': scatter,
        'bubble': bubble,
        'facets': facets,
        'scatter_matrix': scatter_matrix,
    }


def run_gallery(config: ConfigManager,
                dataset_path: Optional[str] = None,
                only: Optional[List[str]] = None,
                error_handler: Optional[ErrorHandler] = None) -> Dict[str, Path]:
    """
    Renders and saves every chart (or just those in ``only``).

    Returns:
        Mapping of chart name to the exported file, for charts that succeeded.
        Failures are recorded on ``error_handler``.
    """
    handler = error_handler or ErrorHandler()
    monitor = PerformanceMonitor()
    viz = DataVisualizer(
        style=config.get('style'),
        fig_size=config.get('figure_size'),
        output_dir=config.output_dir,
        fmt=config.get('format'),
        dpi=config.get('dpi'),
    )
    df = load_dataset(dataset_path)
    charts = build_charts(viz, df, config)

    if only:
        unknown = sorted(set(only) - set(charts))
        if unknown:
            raise ValueError(f"Unknown chart(s): {unknown}. Available: {list(charts)}")
        charts = {name: fn for name, fn in charts.items() if name in only}

    written: Dict[str, Path] = {}
    for name, render in charts.items():
        open_before = set(plt.get_fignums())
        with handler.catch_errors(f"render {name}"):
            fig = monitor.time_this(render)()
            written[name] = viz.save_figure(fig, name)
        # a chart that failed part-way leaves its figure open
        for num in set(plt.get_fignums()) - open_before:
            plt.close(num)

    logger.info(f"Gallery finished: {len(written)} charts written to {viz.output_dir}, "
                f"{handler.error_count} failed, {monitor.total():.2f}s total.")
    return written


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Render the statistical chart gallery.")
    parser.add_argument('--config', help="YAML or JSON config file")
    parser.add_argument('--output', help="Output directory (overrides the config)")
    parser.add_argument('--dataset', help="CSV file to use instead of the bundled cars table")
    parser.add_argument('--chart', action='append', dest='charts', help="Render only this chart (repeatable)")
    parser.add_argument('--log-level', default=None, help="DEBUG, INFO, WARNING, ...")
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)
    matplotlib.use('Agg')

    config = ConfigManager(args.config)
    if args.output:
        config.set('output_dir', args.output)

    handler = ErrorHandler()
    run_gallery(config, dataset_path=args.dataset, only=args.charts, error_handler=handler)
    return 1 if handler.error_count else 0


if __name__ == "__main__":
    sys.exit(main())
