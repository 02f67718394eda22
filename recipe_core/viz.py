"""
Visualization Utilities Module
==============================

Style setup, helpers, and the figures used by both recipes.
Plot functions return the figure; saving is left to output.save_figure.
"""

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving plots

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from . import config


def setup_style() -> None:
    """
    Configure matplotlib and seaborn style settings.

    Sets:
    - Seaborn whitegrid style
    - Consistent font sizes
    """
    plt.style.use('seaborn-v0_8-whitegrid')
    plt.rcParams.update({
        'figure.figsize': (10, 6),
        'font.size': 10,
        'axes.titlesize': 12,
        'axes.labelsize': 11,
        'legend.fontsize': 10,
    })


def get_colors() -> dict:
    """
    Return consistent color palette for plots.

    Returns:
        Dictionary with named colors
    """
    return {
        'primary': '#3498db',      # Blue
        'secondary': '#2ecc71',    # Green
        'accent': '#e74c3c',       # Red
        'neutral': '#95a5a6',      # Gray
        'highlight': '#f39c12',    # Orange
        'positive': '#3498db',
        'negative': '#e74c3c',
    }


def get_cmap(style: str = 'diverging') -> str:
    """
    Return appropriate colormap name.

    Parameters:
        style: 'diverging' for correlation/loadings, 'sequential' for counts

    Returns:
        Colormap name string
    """
    if style == 'diverging':
        return 'RdBu_r'
    elif style == 'sequential':
        return 'Blues'
    else:
        return 'viridis'


def create_figure(nrows: int = 1, ncols: int = 1, figsize: tuple = None) -> tuple:
    """
    Create figure with subplots using consistent settings.

    Parameters:
        nrows: Number of subplot rows
        ncols: Number of subplot columns
        figsize: Optional figure size (width, height)

    Returns:
        Tuple of (fig, axes)
    """
    if figsize is None:
        figsize = (5 * ncols, 5 * nrows)

    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, squeeze=False)
    fig.set_facecolor('white')
    if nrows == 1 and ncols == 1:
        return fig, axes[0, 0]
    return fig, axes.ravel()


# =============================================================================
# FACTOR ANALYSIS FIGURES
# =============================================================================
def plot_correlation_matrix(corr_matrix: pd.DataFrame) -> plt.Figure:
    """Heatmap of the correlation matrix."""
    fig, ax = create_figure(figsize=(10, 8))
    sns.heatmap(corr_matrix, annot=True, cmap=get_cmap('diverging'), center=0,
                fmt='.2f', square=True, linewidths=0.5, vmin=-1, vmax=1, ax=ax)
    ax.set_title('Correlation Matrix')
    return fig


def plot_kmo(kmo_per_variable: dict[str, float], threshold: float = None) -> plt.Figure:
    """
    Horizontal bars of per-variable KMO with the adequacy threshold.

    Parameters:
        kmo_per_variable: Mapping of variable name to KMO
        threshold: Line to draw. Defaults to config.MIN_VARIABLE_KMO
    """
    if threshold is None:
        threshold = config.MIN_VARIABLE_KMO

    colors = get_colors()
    names = list(kmo_per_variable)
    values = [kmo_per_variable[name] for name in names]
    bar_colors = [colors['secondary'] if v >= threshold else colors['accent'] for v in values]

    fig, ax = create_figure(figsize=(10, 6))
    bars = ax.barh(names, values, color=bar_colors)
    ax.axvline(x=threshold, color=colors['highlight'], linestyle='--',
               label=f'Minimum adequacy ({threshold})')
    ax.set_xlim(0, 1)
    ax.set_xlabel('KMO')
    ax.set_title('Per-variable Sampling Adequacy (KMO)')
    ax.invert_yaxis()
    ax.legend(loc='lower right')

    for bar, value in zip(bars, values):
        ax.text(value + 0.01, bar.get_y() + bar.get_height() / 2,
                f'{value:.2f}', va='center', fontsize=9)

    return fig


def plot_scree(eigenvalues: np.ndarray) -> plt.Figure:
    """Create scree plot showing eigenvalues."""
    fig, ax = create_figure(figsize=(10, 6))

    positions = range(1, len(eigenvalues) + 1)
    ax.plot(positions, eigenvalues, 'bo-', linewidth=2, markersize=8)
    ax.axhline(y=1, color='r', linestyle='--', label='Kaiser Criterion (eigenvalue=1)')
    ax.set_xlabel('Factor Number')
    ax.set_ylabel('Eigenvalue')
    ax.set_title('Scree Plot - Finding the "Elbow"')
    ax.legend()
    ax.grid(True, alpha=0.3)
    ax.set_xticks(list(positions))

    return fig


def plot_loadings_heatmap(loadings: pd.DataFrame, rotation: str = None) -> plt.Figure:
    """Create factor loadings heatmap."""
    fig, ax = create_figure(figsize=(max(6, 2 * len(loadings.columns) + 4), 8))

    sns.heatmap(loadings, annot=True, cmap=get_cmap('diverging'), center=0,
                fmt='.2f', linewidths=0.5, vmin=-1, vmax=1, ax=ax)
    title = 'Factor Loadings'
    if rotation:
        title += f' ({rotation.capitalize()} Rotation)'
    ax.set_title(title)

    return fig


def plot_loadings_bars(loadings: pd.DataFrame, threshold: float = None) -> plt.Figure:
    """
    One bar panel per factor, with the high-loading band marked.

    Parameters:
        loadings: Factor loadings DataFrame (variables x factors)
        threshold: Absolute loading considered high. Defaults to config.LOADING_THRESHOLD
    """
    if threshold is None:
        threshold = config.LOADING_THRESHOLD

    colors = get_colors()
    n_factors = len(loadings.columns)
    fig, axes = create_figure(1, n_factors, figsize=(4 * n_factors, 6))
    if n_factors == 1:
        axes = [axes]

    for ax, factor in zip(axes, loadings.columns):
        values = loadings[factor]
        bar_colors = [colors['positive'] if v >= 0 else colors['negative'] for v in values]
        ax.barh(loadings.index, values, color=bar_colors)
        ax.axvline(x=threshold, color=colors['neutral'], linestyle='--', alpha=0.7)
        ax.axvline(x=-threshold, color=colors['neutral'], linestyle='--', alpha=0.7)
        ax.axvline(x=0, color='black', linewidth=0.8)
        ax.set_xlim(-1, 1)
        ax.set_title(factor)
        ax.invert_yaxis()

    fig.suptitle(f'Factor Loadings (|loading| > {threshold} marked)')
    plt.tight_layout()
    return fig


# =============================================================================
# TABLE FIGURES
# =============================================================================
def plot_top_rows(
    df: pd.DataFrame,
    label_col: str,
    value_col: str,
    n: int = None
) -> plt.Figure:
    """
    Bar chart of the n largest rows of a table by value_col.

    Parameters:
        df: Table with a label and a numeric value column
        label_col: Column used for bar labels
        value_col: Numeric column to rank by
        n: Number of rows. Defaults to config.WIKI_TOP_N
    """
    if n is None:
        n = config.WIKI_TOP_N
    for col in (label_col, value_col):
        if col not in df.columns:
            raise ValueError(f"Column {col!r} not in table")
    if not pd.api.types.is_numeric_dtype(df[value_col]):
        raise ValueError(f"Column {value_col!r} is not numeric")

    top = df.nlargest(n, value_col)

    fig, ax = create_figure(figsize=(10, max(4, 0.4 * len(top) + 1)))
    ax.barh(top[label_col].astype(str), top[value_col], color=get_colors()['primary'])
    ax.invert_yaxis()
    ax.set_xlabel(value_col)
    ax.set_title(f'Top {len(top)} by {value_col}')

    return fig
