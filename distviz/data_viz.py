"""
Chart gallery built on matplotlib and seaborn.

Distribution charts (dotplot, histogram, density, facets, the scatterplot
matrix diagonal) are drawn from ``distviz.estimators`` results; the other
chart types hand the data straight to seaborn or pandas plotting.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

from .estimators import (
    DEFAULT_CUT,
    DEFAULT_KERNEL,
    DEFAULT_RESOLUTION,
    BinSpec,
    HistogramBin,
    compute_histogram,
    compute_kde,
    normalized_histogram,
)

logger = logging.getLogger(__name__)

BAR_COLOR = 'steelblue'
EDGE_COLOR = 'black'


class DataVisualizer:
    """
    Create the gallery's charts with sensible defaults and export them.

    Examples:
        >>> viz = DataVisualizer(output_dir='charts')
        >>> fig = viz.histogram(df['mpg'], BinSpec.from_width(2, 10, 34), title='MPG')
        >>> viz.save_figure(fig, 'histogram')
    """

    def __init__(self,
                 style: str = 'whitegrid',
                 fig_size: Tuple[float, float] = (8, 5),
                 output_dir: Union[str, Path] = 'charts',
                 fmt: str = 'png',
                 dpi: int = 100):
        sns.set_theme(style=style)
        self.fig_size = tuple(fig_size)
        self.output_dir = Path(output_dir)
        self.fmt = fmt.lstrip('.')
        self.dpi = dpi

    def _new_axes(self, title: Optional[str], xlabel: Optional[str] = None, ylabel: Optional[str] = None):
        fig, ax = plt.subplots(figsize=self.fig_size)
        if title:
            ax.set_title(title)
        if xlabel:
            ax.set_xlabel(xlabel)
        if ylabel:
            ax.set_ylabel(ylabel)
        return fig, ax

    @staticmethod
    def _draw_bins(ax, bins: Sequence[HistogramBin], heights: Optional[Sequence[float]] = None, **kwargs) -> None:
        if not bins:
            return
        lefts = [b.lower for b in bins]
        widths = [b.width for b in bins]
        heights = [b.count for b in bins] if heights is None else heights
        ax.bar(lefts, heights, width=widths, align='edge',
               color=kwargs.pop('color', BAR_COLOR), edgecolor=EDGE_COLOR, **kwargs)

    # --- Distributions ---

    def dotplot(self,
                samples: Sequence[float],
                bin_width: float,
                title: str = None,
                xlabel: str = None) -> Figure:
        """
        Wilkinson dot plot: one dot per sample, stacked within its bin.

        Args:
            samples: Numeric values
            bin_width: Width of the stacking bins
            title: Plot title
            xlabel: X-axis label
        """
        bins = compute_histogram(samples, BinSpec.covering(samples, bin_width))
        fig, ax = self._new_axes(title, xlabel, 'Count')
        xs: List[float] = []
        ys: List[int] = []
        for b in bins:
            xs.extend([b.midpoint] * b.count)
            ys.extend(range(1, b.count + 1))
        ax.scatter(xs, ys, s=120, color=BAR_COLOR, edgecolor=EDGE_COLOR)
        ax.set_ylim(0, max(ys, default=0) + 1)
        ax.yaxis.set_major_locator(MaxNLocator(integer=True))
        return fig

    def histogram(self,
                  samples: Sequence[float],
                  bin_spec: BinSpec,
                  title: str = None,
                  xlabel: str = None,
                  ylabel: str = 'Frequency') -> Figure:
        """
        Plot the bucketed counts of numerical data.

        Args:
            samples: Array-like data to bin
            bin_spec: Bin edges and out-of-range policy
            title: Plot title
            xlabel: X-axis label
            ylabel: Y-axis label
        """
        bins = compute_histogram(samples, bin_spec)
        fig, ax = self._new_axes(title, xlabel, ylabel)
        self._draw_bins(ax, bins)
        if bin_spec.domain is not None:
            ax.set_xlim(*bin_spec.domain)
        return fig

    def density(self,
                samples: Sequence[float],
                kernel: str = DEFAULT_KERNEL,
                bandwidth: Optional[Union[float, str]] = None,
                resolution: int = DEFAULT_RESOLUTION,
                cut: float = DEFAULT_CUT,
                overlay: Optional[BinSpec] = None,
                title: str = None,
                xlabel: str = None) -> Figure:
        """
        Plot a kernel density estimate, optionally over a normalized histogram.

        Args:
            samples: Array-like data
            kernel: Kernel name
            bandwidth: Explicit bandwidth or rule name; Silverman's rule when None
            resolution: Number of evaluation points
            cut: Extend the curve this many bandwidths past the data
            overlay: Draw the density-normalized histogram for these bins underneath
            title: Plot title
            xlabel: X-axis label
        """
        kde = compute_kde(samples, kernel=kernel, bandwidth=bandwidth)
        lo, hi = kde.default_range(cut)
        xs, ys = kde.evaluate_grid(lo, hi, resolution)

        fig, ax = self._new_axes(title, xlabel, 'Density')
        if overlay is not None:
            bins = compute_histogram(samples, overlay)
            self._draw_bins(ax, bins, normalized_histogram(bins, kde.n_samples), alpha=0.4)
        ax.plot(xs, ys, linewidth=2, color=BAR_COLOR, label=f'{kernel} KDE (h={kde.bandwidth:.3g})')
        ax.fill_between(xs, ys, alpha=0.3, color=BAR_COLOR)
        ax.legend()
        return fig

    def boxplot(self, df: pd.DataFrame, x: str, y: str, title: str = None) -> Figure:
        fig, ax = self._new_axes(title)
        sns.boxplot(data=df, x=x, y=y, ax=ax)
        return fig

    def violin(self, df: pd.DataFrame, x: str, y: str, title: str = None) -> Figure:
        fig, ax = self._new_axes(title)
        sns.violinplot(data=df, x=x, y=y, ax=ax, inner='quartile')
        return fig

    # --- Categorical summaries ---

    def bar(self,
            table: pd.DataFrame,
            stacked: bool = False,
            title: str = None,
            xlabel: str = None,
            ylabel: str = None) -> Figure:
        """
        Bar chart of a table indexed by category, one series per column.

        Args:
            table: e.g. the output of ``datasets.count_by``
            stacked: Stack the columns instead of placing them side by side
        """
        fig, ax = self._new_axes(title, xlabel, ylabel)
        table.plot.bar(ax=ax, stacked=stacked, edgecolor=EDGE_COLOR, rot=0, legend=table.shape[1] > 1)
        return fig

    def pie(self, values: pd.Series, title: str = None) -> Figure:
        """Pie chart of a Series; the index supplies the wedge labels."""
        fig, ax = self._new_axes(title)
        ax.pie(values.to_numpy(), labels=[str(i) for i in values.index], autopct='%1.1f%%', startangle=90)
        ax.axis('equal')
        return fig

    # --- Relationships ---

    def line(self, df: pd.DataFrame, x: str, y: str, hue: str = None, title: str = None) -> Figure:
        fig, ax = self._new_axes(title)
        sns.lineplot(data=df, x=x, y=y, hue=hue, marker='o', ax=ax)
        return fig

    def scatter(self, df: pd.DataFrame, x: str, y: str, hue: str = None, title: str = None) -> Figure:
        fig, ax = self._new_axes(title)
        sns.scatterplot(data=df, x=x, y=y, hue=hue, ax=ax)
        return fig

    def bubble(self,
               df: pd.DataFrame,
               x: str,
               y: str,
               size: str,
               hue: str = None,
               title: str = None) -> Figure:
        """Scatter plot whose marker area encodes a third variable."""
        fig, ax = self._new_axes(title)
        sns.scatterplot(data=df, x=x, y=y, size=size, hue=hue, sizes=(20, 400), alpha=0.6, ax=ax)
        return fig

    # --- Small multiples ---

    def facets(self,
               df: pd.DataFrame,
               value: str,
               by: str,
               bin_width: float,
               title: str = None) -> Figure:
        """
        The same histogram repeated for each level of ``by``.

        All panels share one bin spec covering the whole column, so bar
        heights are comparable across panels.
        """
        spec = BinSpec.covering(df[value].dropna().to_numpy(dtype=float), bin_width)
        levels = sorted(df[by].dropna().unique())
        fig, axes = plt.subplots(1, len(levels), figsize=self.fig_size, sharey=True, squeeze=False)
        for ax, level in zip(axes[0], levels):
            subset = df.loc[df[by] == level, value].dropna().to_numpy(dtype=float)
            self._draw_bins(ax, compute_histogram(subset, spec))
            ax.set_title(f'{by} = {level}')
            ax.set_xlabel(value)
        axes[0][0].set_ylabel('Frequency')
        if title:
            fig.suptitle(title)
        fig.tight_layout()
        return fig

    def scatter_matrix(self,
                       df: pd.DataFrame,
                       columns: Sequence[str],
                       kernel: str = DEFAULT_KERNEL,
                       resolution: int = DEFAULT_RESOLUTION,
                       title: str = None) -> Figure:
        """
        Scatterplot matrix over every pair of ``columns``.

        Panel (i, j) plots columns[j] against columns[i], so the grid is
        symmetric about the diagonal; diagonal panels show each column's KDE.
        """
        k = len(columns)
        side = max(self.fig_size) * k / 3
        fig, axes = plt.subplots(k, k, figsize=(side, side), squeeze=False)
        for i, row_col in enumerate(columns):
            for j, col_col in enumerate(columns):
                ax = axes[i][j]
                if i == j:
                    samples = df[row_col].dropna().to_numpy(dtype=float)
                    kde = compute_kde(samples, kernel=kernel)
                    xs, ys = kde.evaluate_grid(resolution=resolution)
                    ax.plot(xs, ys, color=BAR_COLOR)
                    ax.fill_between(xs, ys, alpha=0.3, color=BAR_COLOR)
                else:
                    ax.scatter(df[col_col], df[row_col], s=12, color=BAR_COLOR, alpha=0.7)
                if i == k - 1:
                    ax.set_xlabel(col_col)
                if j == 0:
                    ax.set_ylabel(row_col)
        if title:
            fig.suptitle(title)
        fig.tight_layout()
        return fig

    # --- Export ---

    def save_figure(self, fig: Figure, name: str) -> Path:
        """
        Write ``fig`` to ``<output_dir>/<name>.<fmt>`` and close it.

        Returns:
            Path of the written file
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{name}.{self.fmt}"
        try:
            fig.savefig(path, dpi=self.dpi, bbox_inches='tight', format=self.fmt)
        finally:
            plt.close(fig)
        logger.info(f"Saved chart '{name}' to {path}")
        return path
