"""
Data Loading and Preprocessing Module
======================================

Functions for loading, transforming, and standardizing data for factor analysis.
"""

import pandas as pd
import numpy as np
import requests
from sklearn.preprocessing import StandardScaler

from . import config
from . import web


def load_csv(filepath: str = None) -> pd.DataFrame:
    """
    Load CSV file with basic validation.

    Parameters:
        filepath: Path to CSV file. Defaults to config.FOREST_FIRES_FILE

    Returns:
        DataFrame with loaded data
    """
    if filepath is None:
        filepath = config.FOREST_FIRES_FILE

    df = pd.read_csv(filepath)
    print(f"Loaded {len(df):,} records with {len(df.columns)} columns from {filepath}")
    return df


def load_forest_fires(
    filepath: str = None,
    url: str = None,
    session: requests.Session = None
) -> pd.DataFrame:
    """
    Load the UCI forest fires dataset, downloading it on first use.

    Parameters:
        filepath: Local cache path. Defaults to config.FOREST_FIRES_FILE
        url: Source URL. Defaults to config.FOREST_FIRES_URL
        session: Optional HTTP session

    Returns:
        DataFrame with the raw dataset
    """
    if filepath is None:
        filepath = config.FOREST_FIRES_FILE
    if url is None:
        url = config.FOREST_FIRES_URL

    path = web.download_if_absent(url, filepath, session)
    return load_csv(str(path))


def _check_columns(df: pd.DataFrame, columns: list[str]) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"Columns not found in data: {', '.join(missing)}")


def select_numeric_features(df: pd.DataFrame, exclude: list[str] = None) -> list[str]:
    """
    Return numeric column names, minus any excluded ones.

    Parameters:
        df: Input DataFrame
        exclude: Columns to leave out (e.g. coordinates or the outcome)

    Returns:
        List of column names in their original order
    """
    exclude = set(exclude or [])
    return [col for col in df.select_dtypes(include='number').columns if col not in exclude]


def log_transform(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """
    Apply log(1 + x) to skewed, non-negative columns.

    Parameters:
        df: Input DataFrame
        columns: Columns to transform in place on a copy

    Returns:
        Copy of df with transformed columns
    """
    _check_columns(df, columns)
    df = df.copy()
    for col in columns:
        if (df[col] < 0).any():
            raise ValueError(f"log1p needs non-negative values; {col} has negatives")
        df[col] = np.log1p(df[col])

    print(f"Applied log1p to: {', '.join(columns)}")
    return df


def describe_features(df: pd.DataFrame, columns: list[str] = None) -> pd.DataFrame:
    """
    Summary statistics including skewness for the selected columns.

    Parameters:
        df: Input DataFrame
        columns: Columns to describe. Defaults to config.FOREST_FIRES_FEATURES

    Returns:
        DataFrame indexed by column with mean, std, min, max, skew
    """
    if columns is None:
        columns = config.FOREST_FIRES_FEATURES
    _check_columns(df, columns)

    summary = pd.DataFrame({
        'mean': df[columns].mean(),
        'std': df[columns].std(),
        'min': df[columns].min(),
        'max': df[columns].max(),
        'skew': df[columns].skew(),
    })

    print("\nFeature summary:")
    print(summary.round(3).to_string())
    return summary


def standardize_features(
    df: pd.DataFrame,
    columns: list[str] = None
) -> tuple[np.ndarray, pd.DataFrame, pd.Index, StandardScaler]:
    """
    Z-score normalize selected columns.

    Parameters:
        df: Input DataFrame
        columns: Columns to standardize. Defaults to config.FOREST_FIRES_FEATURES

    Returns:
        Tuple of (scaled array, scaled DataFrame, valid indices, fitted scaler)
    """
    if columns is None:
        columns = config.FOREST_FIRES_FEATURES
    _check_columns(df, columns)

    # Get rows with complete data
    data = df[columns].dropna()
    valid_indices = data.index

    print(f"Records with complete data: {len(data):,}")
    if len(data) < 2:
        raise ValueError(f"Need at least 2 complete records to standardize, got {len(data)}")

    scaler = StandardScaler()
    scaled_array = scaler.fit_transform(data)
    scaled_df = pd.DataFrame(scaled_array, columns=columns, index=valid_indices)

    print(f"Standardization complete (mean≈0, std≈1 for each variable)")

    return scaled_array, scaled_df, valid_indices, scaler


def get_default_efa_features() -> list[str]:
    """
    Return the standard forest fires variable list for EFA.

    Returns:
        List of column names for EFA
    """
    return config.FOREST_FIRES_FEATURES.copy()
