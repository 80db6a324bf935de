"""
Dataset Utilities
=================

Loads the bundled Motor Trend cars table and reshapes it for the chart
gallery: column extraction, renaming of coded columns, grouping and
aggregation.

Key Features:
    - CSV loading with pandas
    - Numeric column extraction for the distribution estimator
    - Grouped summaries for bar, pie and line charts
"""

import logging
import os
from typing import Optional

import numpy as np
import pandas as pd

from .error_handling import InvalidInput

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')
DEFAULT_DATASET = os.path.join(DATA_DIR, 'mtcars.csv')

# Coded columns -> readable labels used as chart categories
TRANSMISSION_LABELS = {0: 'automatic', 1: 'manual'}
ENGINE_LABELS = {0: 'V-shaped', 1: 'straight'}


def load_dataset(path: Optional[str] = None, labelled: bool = True, **kwargs) -> pd.DataFrame:
    """
    Reads the cars table (or another CSV) into a DataFrame.

    Parameters:
        path (str): CSV file to read; the bundled table when omitted
        labelled (bool): Add readable 'transmission', 'engine' and
            'cylinders' category columns derived from am, vs and cyl
        **kwargs: Additional arguments passed to pd.read_csv

    Returns:
        pd.DataFrame: The loaded table

    Raises:
        FileNotFoundError: If ``path`` does not exist

    Example:
        >>> df = load_dataset()
        >>> df.groupby('cylinders').size()
    """
    path = path or DEFAULT_DATASET
    if not os.path.exists(path):
        raise FileNotFoundError(f"Dataset not found at {path}")
    df = pd.read_csv(path, **kwargs)
    logger.info(f"Loaded dataset '{os.path.basename(path)}' with {len(df)} rows, {len(df.columns)} columns.")

    if labelled and {'am', 'vs', 'cyl'}.issubset(df.columns):
        df = df.assign(
            transmission=df['am'].map(TRANSMISSION_LABELS),
            engine=df['vs'].map(ENGINE_LABELS),
            cylinders=df['cyl'].astype(int).astype(str) + ' cyl',
        )
    return df


def select_samples(df: pd.DataFrame, column: str) -> np.ndarray:
    """
    Extracts one numeric column as a sample set, dropping missing values.

    Raises:
        InvalidInput: If the column is missing, not numeric, or has no values
    """
    if column not in df.columns:
        raise InvalidInput(f"Column '{column}' not found. Available: {df.columns.tolist()}")
    series = df[column]
    if not pd.api.types.is_numeric_dtype(series):
        raise InvalidInput(f"Column '{column}' is not numeric (dtype={series.dtype}).")
    values = series.dropna().to_numpy(dtype=float)
    if values.size == 0:
        raise InvalidInput(f"Column '{column}' has no values.")
    return values


def summarize_by(df: pd.DataFrame, group: str, value: str, agg: str = 'mean') -> pd.DataFrame:
    """Aggregates ``value`` per ``group``; returns columns [group, value] sorted by group."""
    for col in (group, value):
        if col not in df.columns:
            raise InvalidInput(f"Column '{col}' not found.")
    return (
        df.groupby(group, as_index=False)[value]
        .agg(agg)
        .sort_values(group)
        .reset_index(drop=True)
    )


def count_by(df: pd.DataFrame, group: str, stack: Optional[str] = None) -> pd.DataFrame:
    """
    Row counts per ``group``, optionally split by ``stack``.

    Without ``stack`` the result has a single 'count' column; with it, one
    column per ``stack`` level (missing combinations are 0), ready for a
    stacked bar chart.
    """
    if group not in df.columns or (stack is not None and stack not in df.columns):
        raise InvalidInput(f"Cannot count by '{group}'/'{stack}': column not found.")
    if stack is None:
        return df.groupby(group).size().to_frame('count')
    return df.groupby([group, stack]).size().unstack(fill_value=0)
