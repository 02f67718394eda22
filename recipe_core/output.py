"""
Recipe Output Module
====================

Each recipe run writes into one dated folder, and every file in it carries
the date, the recipe and what it holds:

    outputs/2024-02-09-forest-fires-efa/2024-02-09-forest-fires-efa-scree.png
"""

from datetime import date
from pathlib import Path
from typing import Union

import pandas as pd
import matplotlib.pyplot as plt

from . import config

# File kinds shown in the end-of-run summary
KIND_LABELS = {'.csv': 'table', '.png': 'figure', '.txt': 'report'}


def _stamp() -> str:
    return date.today().isoformat()


def get_output_dir(recipe_name: str, base: Union[str, Path] = None) -> Path:
    """
    Create (if needed) and return {base}/{DATE}-{recipe_name}/.

    base defaults to config.DEFAULT_OUTPUT_BASE.
    """
    output_dir = Path(base or config.DEFAULT_OUTPUT_BASE) / f"{_stamp()}-{recipe_name}"
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"Output directory: {output_dir}")
    return output_dir


def build_filename(output_dir: Path, recipe_name: str, suffix: str, ext: str) -> Path:
    """Path of {DATE}-{RECIPE}-{SUFFIX}.{EXT} inside output_dir."""
    return Path(output_dir) / f"{_stamp()}-{recipe_name}-{suffix}.{ext}"


def save_csv(
    df: pd.DataFrame,
    output_dir: Path,
    recipe_name: str,
    suffix: str,
    index: bool = False
) -> Path:
    """Write a result table; pass index=True for tables keyed by variable or factor."""
    filepath = build_filename(output_dir, recipe_name, suffix, 'csv')
    df.to_csv(filepath, index=index)
    print(f"Saved: {filepath} ({len(df):,} rows)")
    return filepath


def save_figure(
    fig: plt.Figure,
    output_dir: Path,
    recipe_name: str,
    suffix: str,
    dpi: int = None
) -> Path:
    """Write a figure as PNG (config.DEFAULT_DPI unless given) and close it."""
    filepath = build_filename(output_dir, recipe_name, suffix, 'png')
    fig.savefig(filepath, dpi=dpi or config.DEFAULT_DPI, bbox_inches='tight', facecolor='white')
    plt.close(fig)
    print(f"Saved: {filepath}")
    return filepath


def save_report(
    text: str,
    output_dir: Path,
    recipe_name: str,
    suffix: str = 'report'
) -> Path:
    """Write the end-of-run text report."""
    filepath = build_filename(output_dir, recipe_name, suffix, 'txt')
    filepath.write_text(text, encoding='utf-8')
    print(f"Saved: {filepath}")
    return filepath


def list_outputs(output_dir: Path) -> list[str]:
    """File names in output_dir, sorted; empty when the folder is missing."""
    output_dir = Path(output_dir)
    if not output_dir.exists():
        return []
    return sorted(p.name for p in output_dir.iterdir() if p.is_file())


def print_summary(output_dir: Path) -> None:
    """List the run's files with their kind and size."""
    files = list_outputs(output_dir)
    if not files:
        print(f"\nNo files generated in {output_dir}")
        return

    print(f"\nFiles generated in {output_dir}:")
    for name in files:
        path = Path(output_dir) / name
        kind = KIND_LABELS.get(path.suffix, 'file')
        print(f"  - {name} [{kind}, {path.stat().st_size / 1024:.1f} KB]")
