#!/usr/bin/env python3
"""
Forest Fires EFA Recipe
=======================

Exploratory Factor Analysis of the UCI forest fires dataset
(Cortez & Morais, 2007): Fire Weather Index components and weather
readings from Montesinho park, Portugal.

Workflow:
1. Download (once) and load the CSV
2. Transform skewed fields and standardize
3. Inspect the correlation matrix
4. Test factorability (Bartlett, KMO) and drop inadequate variables
5. Determine the number of factors (Kaiser criterion, scree plot)
6. Extract factors with rotation and visualize loadings
7. Calculate factor scores

Parameters:
    data_file       - Local CSV cache (downloaded when missing)
    url             - Dataset URL
    features        - Variables for the EFA
    log_columns     - Variables that get log1p before standardizing
    drop_low_kmo    - Remove variables with KMO below min_kmo and retest
    min_kmo         - Per-variable KMO threshold
    n_factors       - Number of factors (None = auto-detect via Kaiser)
    rotation        - Rotation method
    method          - Extraction method

Outputs:
    - Feature summary, factorability, eigenvalues, loadings, communalities, scores (CSV)
    - Correlation heatmap, KMO bars, scree plot, loadings heatmap and bars (PNG)
    - Text report (TXT)
"""

import sys
from pathlib import Path

# Hybrid import: works both when pip-installed and when run directly
try:
    from recipe_core import data, efa, web, viz, output, config
except ImportError:
    sys.path.insert(0, str(Path(__file__).parent.parent))
    from recipe_core import data, efa, web, viz, output, config

import warnings
warnings.filterwarnings('ignore')

# =============================================================================
# PARAMETERS
# =============================================================================
DEFAULTS = {
    'data_file': config.FOREST_FIRES_FILE,
    'url': config.FOREST_FIRES_URL,
    'features': config.FOREST_FIRES_FEATURES,
    'log_columns': config.FOREST_FIRES_LOG_COLUMNS,
    'drop_low_kmo': True,
    'min_kmo': config.MIN_VARIABLE_KMO,
    'n_factors': None,  # None = auto-detect via Kaiser
    'rotation': config.DEFAULT_ROTATION,
    'method': config.DEFAULT_METHOD,
    'output_base': config.DEFAULT_OUTPUT_BASE,
    'session': None,  # None = create a retrying session for this run
}

TEST_NAME = 'forest-fires-efa'


# =============================================================================
# MAIN ANALYSIS
# =============================================================================
def run_analysis(params: dict) -> dict:
    """
    Run the EFA recipe.

    Parameters:
        params: Dictionary with recipe parameters

    Returns:
        Dictionary with all analysis results
    """
    print("=" * 70)
    print("FOREST FIRES EFA")
    print("=" * 70)

    viz.setup_style()
    output_dir = output.get_output_dir(TEST_NAME, params['output_base'])

    # Step 1: Load data
    print("\n" + "=" * 70)
    print("STEP 1: LOADING DATA")
    print("=" * 70)

    session = params.get('session')
    own_session = session is None
    if own_session:
        session = web.create_session()
    try:
        df = data.load_forest_fires(params['data_file'], params['url'], session)
    finally:
        if own_session:
            session.close()

    features = list(params['features'])
    print(f"Features: {', '.join(features)}")

    summary = data.describe_features(df, features)
    output.save_csv(summary, output_dir, TEST_NAME, 'feature-summary', index=True)

    # Step 2: Transform and standardize
    print("\n" + "=" * 70)
    print("STEP 2: TRANSFORMING AND STANDARDIZING")
    print("=" * 70)

    log_columns = [col for col in params['log_columns'] if col in features]
    if log_columns:
        df = data.log_transform(df, log_columns)

    scaled_array, scaled_df, valid_indices, scaler = data.standardize_features(df, features)

    # Step 3: Correlation matrix
    print("\n" + "=" * 70)
    print("STEP 3: CORRELATION MATRIX")
    print("=" * 70)

    corr_matrix = efa.compute_correlation_matrix(scaled_df)
    output.save_figure(viz.plot_correlation_matrix(corr_matrix), output_dir, TEST_NAME, 'correlation')

    # Step 4: Factorability
    print("\n" + "=" * 70)
    print("STEP 4: FACTORABILITY")
    print("=" * 70)

    initial_factorability = efa.check_factorability(scaled_array, features, params['min_kmo'])
    output.save_figure(
        viz.plot_kmo(initial_factorability['kmo_per_variable'], params['min_kmo']),
        output_dir, TEST_NAME, 'kmo'
    )

    factorability = initial_factorability
    dropped = []
    if params['drop_low_kmo'] and initial_factorability['drop_candidates']:
        kept = efa.drop_low_kmo_variables(initial_factorability['kmo_per_variable'], params['min_kmo'])
        dropped = [var for var in features if var not in kept]
        features = kept
        scaled_df = scaled_df[features]
        scaled_array = scaled_df.to_numpy()
        factorability = efa.check_factorability(scaled_array, features, params['min_kmo'])

    output.save_csv(efa.get_factorability_summary(factorability), output_dir, TEST_NAME, 'factorability')

    # Step 5: Number of factors
    eigenvalues, suggested_factors = efa.determine_num_factors(scaled_array, features)
    eigen_table = efa.eigenvalue_table(eigenvalues)
    output.save_csv(eigen_table, output_dir, TEST_NAME, 'eigenvalues', index=True)
    output.save_figure(viz.plot_scree(eigenvalues), output_dir, TEST_NAME, 'scree')

    # Step 6: Extract factors
    n_factors = params['n_factors'] or suggested_factors
    efa_results = efa.run_efa(scaled_array, features, n_factors, params['rotation'], params['method'])

    loadings = efa_results['loadings']
    output.save_csv(loadings, output_dir, TEST_NAME, 'loadings', index=True)
    output.save_figure(
        viz.plot_loadings_heatmap(loadings, efa_results['rotation']),
        output_dir, TEST_NAME, 'loadings'
    )
    output.save_figure(viz.plot_loadings_bars(loadings), output_dir, TEST_NAME, 'loadings-bars')
    output.save_csv(efa_results['communalities'], output_dir, TEST_NAME, 'communalities', index=True)

    low_communality = efa.flag_low_communalities(efa_results['communalities'])
    if low_communality:
        print(f"\nPoorly explained variables: {', '.join(low_communality)}")

    # Step 7: Factor scores
    factor_scores = efa.calculate_factor_scores(
        efa_results['factor_analyzer'], scaled_array, valid_indices
    )
    output.save_csv(factor_scores, output_dir, TEST_NAME, 'scores', index=True)

    # Step 8: Report
    report = generate_report(
        efa_results, initial_factorability, factorability, eigen_table,
        features, dropped, low_communality, params
    )
    output.save_report(report, output_dir, TEST_NAME)

    print("\n" + "=" * 70)
    print("ANALYSIS COMPLETE")
    print("=" * 70)
    output.print_summary(output_dir)

    return {
        'df': df,
        'features': features,
        'dropped': dropped,
        'correlation': corr_matrix,
        'initial_factorability': initial_factorability,
        'factorability': factorability,
        'eigenvalues': eigenvalues,
        'suggested_factors': suggested_factors,
        'loadings': loadings,
        'communalities': efa_results['communalities'],
        'factor_scores': factor_scores,
        'report': report,
        'output_dir': output_dir,
    }


def generate_report(efa_results, initial_factorability, factorability, eigen_table,
                    features, dropped, low_communality, params):
    """Generate text report summarizing analysis."""
    lines = [
        "=" * 70,
        "FOREST FIRES EFA REPORT",
        "=" * 70,
        "",
        "CONFIGURATION",
        "-" * 50,
        f"Data file: {params['data_file']}",
        f"Configured features ({len(params['features'])}): {', '.join(params['features'])}",
        f"Analysed features ({len(features)}): {', '.join(features)}",
        f"Log-transformed: {', '.join(params['log_columns']) or 'none'}",
        f"Rotation: {efa_results['rotation']}",
        f"Method: {efa_results['method']}",
        "",
        "FACTORABILITY",
        "-" * 50,
        f"Initial KMO: {initial_factorability['kmo_overall']:.3f} ({initial_factorability['kmo_label']})",
    ]

    if dropped:
        lines.append(f"Dropped (KMO < {params['min_kmo']}): {', '.join(dropped)}")
        lines.append(f"KMO after drop: {factorability['kmo_overall']:.3f} ({factorability['kmo_label']})")

    lines.extend([
        f"Bartlett's test: chi2={factorability['bartlett_chi_square']:.2f}, "
        f"p={factorability['bartlett_p_value']:.2e} "
        f"({'PASS' if factorability['bartlett_pass'] else 'FAIL'})",
        "",
        "EIGENVALUES",
        "-" * 50,
        eigen_table.round(3).to_string(),
        f"Factors extracted: {efa_results['n_factors']}",
        "",
        "FACTOR LOADINGS",
        "-" * 50,
    ])

    for factor, high_loaders in efa.interpret_factors(efa_results['loadings']).items():
        if high_loaders:
            lines.append(f"\n{factor}:")
            for var, loading in high_loaders:
                sign = "+" if loading > 0 else "-"
                lines.append(f"  {sign} {var}: {loading:.2f}")

    lines.extend([
        "",
        f"Total variance explained: {efa_results['variance'].loc['Cumulative_Var'].iloc[-1]*100:.1f}%",
        f"Low communality (< {config.COMMUNALITY_THRESHOLD}): {', '.join(low_communality) or 'none'}",
        "",
        "=" * 70,
    ])

    return "\n".join(lines)


# =============================================================================
# ENTRY POINT
# =============================================================================
if __name__ == '__main__':
    params = {**DEFAULTS}
    results = run_analysis(params)
