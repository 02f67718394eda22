#!/usr/bin/env python3
"""
Wikipedia Table Extraction Recipe
=================================

Walks through pulling one specific table out of a Wikipedia article:
fetch the page (cached locally after the first run), look at the tables
it contains, select the target with an XPath expression, and reshape the
result into a clean DataFrame.

Parameters:
    url          - Article to scrape
    xpath        - XPath selecting the target table
    cache_file   - Local HTML cache (None = always fetch)
    label_col    - Column used for chart labels
    value_col    - Numeric column used to rank rows
    top_n        - Rows shown in the chart

Outputs:
    - Table inventory (CSV)
    - Extracted table (CSV)
    - Top rows bar chart (PNG)
    - Text report (TXT)
"""

import sys
from pathlib import Path

# Hybrid import: works both when pip-installed and when run directly
try:
    from recipe_core import web, scrape, viz, output, config
except ImportError:
    sys.path.insert(0, str(Path(__file__).parent.parent))
    from recipe_core import web, scrape, viz, output, config

import warnings
warnings.filterwarnings('ignore')

import pandas as pd

# =============================================================================
# PARAMETERS
# =============================================================================
DEFAULTS = {
    'url': config.WIKI_URL,
    'xpath': config.WIKI_TABLE_XPATH,
    'cache_file': config.WIKI_CACHE_FILE,
    'label_col': config.WIKI_LABEL_COLUMN,
    'value_col': config.WIKI_VALUE_COLUMN,
    'top_n': config.WIKI_TOP_N,
    'output_base': config.DEFAULT_OUTPUT_BASE,
    'session': None,  # None = create a retrying session for this run
}

TEST_NAME = 'wiki-table'


# =============================================================================
# MAIN ANALYSIS
# =============================================================================
def run_analysis(params: dict) -> dict:
    """
    Run the table extraction recipe.

    Parameters:
        params: Dictionary with recipe parameters

    Returns:
        Dictionary with the extracted table and output locations
    """
    print("=" * 70)
    print("WIKIPEDIA TABLE EXTRACTION")
    print("=" * 70)

    viz.setup_style()
    output_dir = output.get_output_dir(TEST_NAME, params['output_base'])

    session = params.get('session')
    own_session = session is None
    if own_session:
        session = web.create_session()

    try:
        # Step 1: Fetch the page
        print("\n" + "=" * 70)
        print("STEP 1: FETCHING PAGE")
        print("=" * 70)

        html = web.fetch_cached_text(params['url'], params['cache_file'], session)
    finally:
        if own_session:
            session.close()

    # Step 2: Parse and look around
    print("\n" + "=" * 70)
    print("STEP 2: PARSING HTML")
    print("=" * 70)

    tree = scrape.parse_html(html)
    tables = scrape.summarize_tables(tree)
    print("\nTables on the page:")
    print(tables[['position', 'class', 'caption', 'rows']].to_string(index=False))
    output.save_csv(tables, output_dir, TEST_NAME, 'tables')

    # Step 3: Select the target node
    print("\n" + "=" * 70)
    print("STEP 3: SELECTING TABLE BY XPATH")
    print("=" * 70)
    print(f"XPath: {params['xpath']}")

    node = scrape.select_node(tree, params['xpath'])

    # Step 4: Reshape
    print("\n" + "=" * 70)
    print("STEP 4: RESHAPING TABLE")
    print("=" * 70)

    raw = scrape.table_to_dataframe(node)
    table = scrape.clean_columns(raw)
    table = scrape.clean_cells(table)
    table = scrape.coerce_numeric(table)

    print(f"\nColumns: {', '.join(table.columns)}")
    print("\nFirst rows:")
    print(table.head(10).to_string(index=False))
    output.save_csv(table, output_dir, TEST_NAME, 'table')

    # Step 5: Chart
    print("\n" + "=" * 70)
    print("STEP 5: PLOTTING")
    print("=" * 70)

    chart_path = None
    label_col, value_col = params['label_col'], params['value_col']
    if label_col in table.columns and value_col in table.columns \
            and pd.api.types.is_numeric_dtype(table[value_col]):
        fig = viz.plot_top_rows(table, label_col, value_col, params['top_n'])
        chart_path = output.save_figure(fig, output_dir, TEST_NAME, 'top-rows')
    else:
        print(f"Skipping chart: need text column {label_col!r} and numeric column {value_col!r}")

    # Step 6: Report
    report = generate_report(table, tables, params)
    output.save_report(report, output_dir, TEST_NAME)

    print("\n" + "=" * 70)
    print("ANALYSIS COMPLETE")
    print("=" * 70)
    output.print_summary(output_dir)

    return {
        'table': table,
        'raw_table': raw,
        'tables': tables,
        'chart_path': chart_path,
        'output_dir': output_dir,
    }


def generate_report(table, tables, params):
    """Generate text report summarizing the extraction."""
    numeric_cols = list(table.select_dtypes(include='number').columns)

    lines = [
        "=" * 70,
        "WIKIPEDIA TABLE EXTRACTION REPORT",
        "=" * 70,
        "",
        "CONFIGURATION",
        "-" * 50,
        f"URL: {params['url']}",
        f"XPath: {params['xpath']}",
        f"Cache file: {params['cache_file']}",
        "",
        "PAGE",
        "-" * 50,
        f"Tables on page: {len(tables)}",
        "",
        "EXTRACTED TABLE",
        "-" * 50,
        f"Rows: {len(table):,}",
        f"Columns: {len(table.columns)}",
        f"Numeric columns: {', '.join(numeric_cols) if numeric_cols else 'none'}",
    ]

    if numeric_cols:
        lines.extend([
            "",
            "NUMERIC SUMMARY",
            "-" * 50,
            table[numeric_cols].describe().round(2).to_string(),
        ])

    lines.extend(["", "=" * 70])
    return "\n".join(lines)


# =============================================================================
# ENTRY POINT
# =============================================================================
if __name__ == '__main__':
    params = {**DEFAULTS}
    results = run_analysis(params)
