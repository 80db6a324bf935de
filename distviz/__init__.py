"""
distviz: histogram binning, kernel density estimation and a gallery of
standard statistical charts over a small fixed dataset.
"""

from .error_handling import DistributionError, InvalidConfiguration, InvalidInput
from .estimators import (
    BinSpec,
    DensityEstimate,
    HistogramBin,
    compute_histogram,
    compute_kde,
    normalized_histogram,
    scott_bandwidth,
    silverman_bandwidth,
    trapezoid,
)

__version__ = "0.1.0"

__all__ = [
    'BinSpec',
    'DensityEstimate',
    'DistributionError',
    'HistogramBin',
    'InvalidConfiguration',
    'InvalidInput',
    'compute_histogram',
    'compute_kde',
    'normalized_histogram',
    'scott_bandwidth',
    'silverman_bandwidth',
    'trapezoid',
]
