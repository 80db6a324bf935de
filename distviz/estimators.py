"""
Distribution Estimator
======================
Histogram binning and kernel density estimation over a single numeric
sample set. Results are plain values (bin triples, evaluable densities)
that the plotting layer draws as bars or curves.

All functions are pure: they copy their inputs and never mutate them.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .error_handling import InvalidConfiguration, InvalidInput

logger = logging.getLogger(__name__)

# --- Constants ---
DEFAULT_KERNEL = 'gaussian'
DEFAULT_RESOLUTION = 200
DEFAULT_CUT = 3.0
OUT_OF_RANGE_POLICIES = ('drop', 'clip')

# Tolerance used when deriving the number of bins from a width, so that
# (hi - lo) / w == 4.999999999 still gives 5 bins.
_EDGE_EPS = 1e-9

ArrayLike = Union[Sequence[float], np.ndarray]


# --- Helper Functions ---

def _as_samples(samples: ArrayLike) -> np.ndarray:
    """Returns a read-only 1-D float copy of ``samples``."""
    try:
        x = np.array(samples, dtype=float).ravel()
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Samples must be numeric: {e}") from e
    if x.size == 0:
        raise InvalidInput("Sample set is empty.")
    if not np.all(np.isfinite(x)):
        raise InvalidInput("Sample set contains NaN or infinite values.")
    x.setflags(write=False)
    return x


def _check_bandwidth(bandwidth: float) -> float:
    try:
        h = float(bandwidth)
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"Bandwidth must be a number, got {bandwidth!r}.") from e
    if not math.isfinite(h) or h <= 0:
        raise InvalidConfiguration(f"Bandwidth must be positive, got {bandwidth!r}.")
    return h


# --- Bin Specification ---

class HistogramBin(NamedTuple):
    """One histogram bucket: samples with ``lower <= x < upper`` (last bin closed)."""
    lower: float
    upper: float
    count: int

    @property
    def width(self) -> float:
        return self.upper - self.lower

    @property
    def midpoint(self) -> float:
        return (self.lower + self.upper) / 2.0


@dataclass(frozen=True)
class BinSpec:
    """
    Bin edges plus the policy for samples outside them.

    Build one with ``BinSpec.from_width`` or ``BinSpec.from_edges``.

    Attributes:
    -----------
    edges : tuple of float
        Strictly increasing bin edges. Fewer than two edges means zero bins.
    out_of_range : str
        'drop' excludes samples outside [edges[0], edges[-1]] from every count;
        'clip' counts them in the first or last bin.
    """
    edges: Tuple[float, ...]
    out_of_range: str = 'drop'

    def __post_init__(self):
        edges = tuple(float(e) for e in self.edges)
        if not all(math.isfinite(e) for e in edges):
            raise InvalidConfiguration("Bin edges must be finite.")
        if any(b <= a for a, b in zip(edges, edges[1:])):
            raise InvalidConfiguration(f"Bin edges must be strictly increasing: {edges}")
        if self.out_of_range not in OUT_OF_RANGE_POLICIES:
            raise InvalidConfiguration(
                f"Invalid out_of_range policy: '{self.out_of_range}'. "
                f"Choose from {OUT_OF_RANGE_POLICIES}."
            )
        object.__setattr__(self, 'edges', edges)

    @classmethod
    def from_edges(cls, edges: ArrayLike, out_of_range: str = 'drop') -> 'BinSpec':
        return cls(edges=tuple(np.asarray(edges, dtype=float).ravel()), out_of_range=out_of_range)

    @classmethod
    def from_width(cls,
                   width: float,
                   lo: float,
                   hi: float,
                   out_of_range: str = 'drop') -> 'BinSpec':
        """
        Derives edges lo, lo+w, lo+2w, ... until ``hi`` is covered.

        The last edge may overshoot ``hi`` when the domain is not a whole
        number of widths. A degenerate domain (lo == hi) gives zero bins.

        Raises:
        ------
        InvalidConfiguration
            If width is not positive or hi < lo.
        """
        w = float(width)
        lo, hi = float(lo), float(hi)
        if not math.isfinite(w) or w <= 0:
            raise InvalidConfiguration(f"Bin width must be positive, got {width!r}.")
        if hi < lo:
            raise InvalidConfiguration(f"Bin domain is reversed: [{lo}, {hi}].")
        if hi == lo:
            return cls(edges=(lo,), out_of_range=out_of_range)
        n_bins = max(1, int(math.ceil((hi - lo) / w - _EDGE_EPS)))
        while lo + n_bins * w < hi:
            n_bins += 1
        edges = lo + w * np.arange(n_bins + 1)
        return cls(edges=tuple(edges), out_of_range=out_of_range)

    @classmethod
    def covering(cls, samples: ArrayLike, width: float, out_of_range: str = 'drop') -> 'BinSpec':
        """Width-based spec whose domain is the sample range."""
        x = _as_samples(samples)
        return cls.from_width(width, x.min(), x.max(), out_of_range=out_of_range)

    @property
    def n_bins(self) -> int:
        return max(0, len(self.edges) - 1)

    @property
    def domain(self) -> Optional[Tuple[float, float]]:
        if not self.edges:
            return None
        return self.edges[0], self.edges[-1]


# --- Histogram ---

def compute_histogram(samples: ArrayLike, bin_spec: BinSpec) -> Tuple[HistogramBin, ...]:
    """
    Counts samples into the bins of ``bin_spec``.

    Parameters:
    ----------
    samples : array-like
        Non-empty sequence of finite numbers.
    bin_spec : BinSpec
        Edges and out-of-range policy.

    Returns:
    -------
    tuple of HistogramBin
        One (lower, upper, count) triple per bin, in edge order. Empty when
        the spec has zero bins.

    Raises:
    ------
    InvalidInput
        If the sample set is empty or holds non-finite values.

    Examples:
    --------
    >>> spec = BinSpec.from_edges([0, 2, 4, 6, 8, 10])
    >>> [b.count for b in compute_histogram([1, 2, 2, 3, 5, 8, 8, 8], spec)]
    [1, 3, 1, 0, 3]
    """
    x = _as_samples(samples)
    edges = np.asarray(bin_spec.edges, dtype=float)
    n_bins = bin_spec.n_bins
    if n_bins == 0:
        logger.debug("Bin spec has zero bins; returning an empty histogram.")
        return ()

    if bin_spec.out_of_range == 'clip':
        x = np.clip(x, edges[0], edges[-1])

    # side='right' puts a sample on an interior edge into the next bin
    idx = np.searchsorted(edges, x, side='right') - 1
    idx[x == edges[-1]] = n_bins - 1  # last bin is closed on the right
    inside = (idx >= 0) & (idx < n_bins)
    counts = np.bincount(idx[inside], minlength=n_bins)

    dropped = int(x.size - inside.sum())
    if dropped:
        logger.debug(f"Dropped {dropped} of {x.size} samples outside [{edges[0]}, {edges[-1]}].")

    return tuple(
        HistogramBin(float(edges[i]), float(edges[i + 1]), int(counts[i]))
        for i in range(n_bins)
    )


def normalized_histogram(bins: Sequence[HistogramBin], n_samples: int) -> np.ndarray:
    """Per-bin density ``count / (n_samples * width)``, comparable to a KDE."""
    if n_samples <= 0:
        raise InvalidInput("n_samples must be positive to normalize a histogram.")
    return np.array([b.count / (n_samples * b.width) for b in bins], dtype=float)


# --- Kernels ---

def gaussian_kernel(u: np.ndarray) -> np.ndarray:
    return np.exp(-0.5 * u * u) / math.sqrt(2.0 * math.pi)


def rectangular_kernel(u: np.ndarray) -> np.ndarray:
    """
    Unit-height box on (-1/2, 1/2].

    At a bin midpoint m with width h this selects the samples in
    [m - h/2, m + h/2), the histogram rule. The match with
    ``compute_histogram`` is exact only when the edges and midpoints are
    exact in floating point (e.g. integer or power-of-two widths); with a
    width like 0.1, a sample lying on an edge can fall on the other side
    of the box than of the histogram edge.
    """
    return ((u > -0.5) & (u <= 0.5)).astype(float)


def epanechnikov_kernel(u: np.ndarray) -> np.ndarray:
    return np.where(np.abs(u) <= 1.0, 0.75 * (1.0 - u * u), 0.0)


KERNELS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    'gaussian': gaussian_kernel,
    'rectangular': rectangular_kernel,
    'boxcar': rectangular_kernel,
    'epanechnikov': epanechnikov_kernel,
}


def get_kernel(name: str) -> Callable[[np.ndarray], np.ndarray]:
    try:
        return KERNELS[name.lower()]
    except (KeyError, AttributeError):
        raise InvalidConfiguration(
            f"Unknown kernel: '{name}'. Choose from {sorted(KERNELS)}."
        ) from None


# --- Bandwidth Selection ---

def _spread(x: np.ndarray) -> float:
    """min(std, IQR/1.349), ignoring zero terms; 1.0 if the sample has no spread."""
    std = float(x.std(ddof=1)) if x.size > 1 else 0.0
    q75, q25 = np.percentile(x, [75, 25])
    candidates = [v for v in (std, float(q75 - q25) / 1.349) if v > 0]
    return min(candidates) if candidates else 1.0


def silverman_bandwidth(samples: ArrayLike) -> float:
    """Silverman's rule of thumb: 0.9 * min(std, IQR/1.349) * n^(-1/5)."""
    x = _as_samples(samples)
    return 0.9 * _spread(x) * x.size ** (-0.2)


def scott_bandwidth(samples: ArrayLike) -> float:
    """Scott's rule: 1.06 * std * n^(-1/5)."""
    x = _as_samples(samples)
    std = float(x.std(ddof=1)) if x.size > 1 else 0.0
    return 1.06 * (std if std > 0 else 1.0) * x.size ** (-0.2)


BANDWIDTH_RULES: Dict[str, Callable[[ArrayLike], float]] = {
    'silverman': silverman_bandwidth,
    'scott': scott_bandwidth,
}


# --- Kernel Density Estimate ---

@dataclass(frozen=True, eq=False)
class DensityEstimate:
    """
    A kernel density estimate, callable on scalars or arrays.

    The density at x is mean_i K((x - s_i) / h) / h.

    Attributes:
    -----------
    samples : numpy.ndarray
        Read-only sample set the estimate is built on.
    bandwidth : float
        Positive smoothing width h.
    kernel : str
        Name of the kernel in ``KERNELS``.
    """
    samples: np.ndarray = field(repr=False)
    bandwidth: float
    kernel: str = DEFAULT_KERNEL

    def __call__(self, x: Union[float, ArrayLike]) -> Union[float, np.ndarray]:
        query = np.asarray(x, dtype=float)
        k = get_kernel(self.kernel)
        u = (query.reshape(-1, 1) - self.samples.reshape(1, -1)) / self.bandwidth
        density = k(u).mean(axis=1) / self.bandwidth
        if query.ndim == 0:
            return float(density[0])
        return density.reshape(query.shape)

    @property
    def n_samples(self) -> int:
        return int(self.samples.size)

    def default_range(self, cut: float = DEFAULT_CUT) -> Tuple[float, float]:
        """Support extended ``cut`` bandwidths beyond the sample extremes."""
        return (float(self.samples.min() - cut * self.bandwidth),
                float(self.samples.max() + cut * self.bandwidth))

    def evaluate_grid(self,
                      lo: Optional[float] = None,
                      hi: Optional[float] = None,
                      resolution: int = DEFAULT_RESOLUTION) -> Tuple[np.ndarray, np.ndarray]:
        """
        Samples the density on ``resolution`` evenly spaced points in [lo, hi].

        Missing bounds default to ``default_range()``.

        Returns:
        -------
        (numpy.ndarray, numpy.ndarray)
            Ascending x values and their densities.
        """
        if int(resolution) != resolution or resolution < 2:
            raise InvalidInput(f"Resolution must be an integer >= 2, got {resolution!r}.")
        default_lo, default_hi = self.default_range()
        lo = default_lo if lo is None else float(lo)
        hi = default_hi if hi is None else float(hi)
        if not hi > lo:
            raise InvalidConfiguration(f"Evaluation range is empty: [{lo}, {hi}].")
        xs = np.linspace(lo, hi, int(resolution))
        return xs, self(xs)


def compute_kde(samples: ArrayLike,
                kernel: str = DEFAULT_KERNEL,
                bandwidth: Optional[Union[float, str]] = None) -> DensityEstimate:
    """
    Builds a kernel density estimate of ``samples``.

    Parameters:
    ----------
    samples : array-like
        Non-empty sequence of finite numbers.
    kernel : str, optional
        One of ``KERNELS`` (default: 'gaussian').
    bandwidth : float or str, optional
        Explicit positive bandwidth, or the name of a rule in
        ``BANDWIDTH_RULES``. None uses Silverman's rule.

    Returns:
    -------
    DensityEstimate

    Raises:
    ------
    InvalidInput
        If the sample set is empty or holds non-finite values.
    InvalidConfiguration
        If the kernel is unknown or the bandwidth is not positive.
    """
    x = _as_samples(samples)
    get_kernel(kernel)

    if bandwidth is None:
        h = silverman_bandwidth(x)
    elif isinstance(bandwidth, str):
        rule = BANDWIDTH_RULES.get(bandwidth.lower())
        if rule is None:
            raise InvalidConfiguration(
                f"Unknown bandwidth rule: '{bandwidth}'. Choose from {sorted(BANDWIDTH_RULES)}."
            )
        h = rule(x)
    else:
        h = _check_bandwidth(bandwidth)

    logger.debug(f"KDE over {x.size} samples: kernel={kernel}, bandwidth={h:.6g}")
    return DensityEstimate(samples=x, bandwidth=h, kernel=kernel.lower())


def trapezoid(y: ArrayLike, x: ArrayLike) -> float:
    """Trapezoid-rule integral of sampled values ``y`` over ascending ``x``."""
    y = np.asarray(y, dtype=float)
    x = np.asarray(x, dtype=float)
    if x.shape != y.shape or x.size < 2:
        raise InvalidInput("trapezoid needs matching x and y with at least two points.")
    return float(np.sum(np.diff(x) * (y[1:] + y[:-1]) / 2.0))
