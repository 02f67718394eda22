"""
Exploratory Factor Analysis Module
===================================

Factorability checks, factor-count selection, extraction and scoring
for the forest fires recipe. Every step prints its own section so the
recipe output reads top to bottom like a notebook.
"""

import pandas as pd
import numpy as np
from factor_analyzer import FactorAnalyzer
from factor_analyzer.factor_analyzer import calculate_bartlett_sphericity, calculate_kmo

from . import config


def _factor_names(n_factors: int) -> list[str]:
    return [f'Factor_{i}' for i in range(1, n_factors + 1)]


def compute_correlation_matrix(scaled_df: pd.DataFrame) -> pd.DataFrame:
    """Pearson correlation matrix of the standardized variables."""
    corr_matrix = scaled_df.corr()

    print("\nCorrelation Matrix:")
    print("-" * 50)
    print(corr_matrix.round(2).to_string())

    return corr_matrix


def check_factorability(
    scaled_data: np.ndarray,
    var_names: list[str],
    min_kmo: float = None
) -> dict:
    """
    Bartlett's sphericity and KMO sampling adequacy, with drop candidates.

    Bartlett should reject the identity correlation matrix (p < 0.05).
    Variables whose individual KMO falls below min_kmo are reported as
    drop candidates; the recipe removes them and tests again.

    Parameters:
        scaled_data: Standardized data array (n_samples x n_features)
        var_names: List of variable names
        min_kmo: Per-variable adequacy threshold. Defaults to config.MIN_VARIABLE_KMO

    Returns:
        Dictionary with Bartlett and KMO results plus 'drop_candidates'
    """
    if min_kmo is None:
        min_kmo = config.MIN_VARIABLE_KMO

    chi_square, p_value = calculate_bartlett_sphericity(scaled_data)
    kmo_per_variable, kmo_overall = calculate_kmo(scaled_data)

    per_variable = pd.DataFrame({'KMO': kmo_per_variable}, index=var_names)
    per_variable['Label'] = per_variable['KMO'].map(config.get_kmo_label)
    per_variable['Keep'] = per_variable['KMO'] >= min_kmo

    results = {
        'bartlett_chi_square': chi_square,
        'bartlett_p_value': p_value,
        'bartlett_pass': p_value < 0.05,
        'kmo_overall': kmo_overall,
        'kmo_label': config.get_kmo_label(kmo_overall),
        'kmo_per_variable': per_variable['KMO'].to_dict(),
        'min_kmo': min_kmo,
        'drop_candidates': list(per_variable.index[~per_variable['Keep']]),
    }

    print("\n" + "=" * 60)
    print(f"FACTORABILITY TESTS ({len(var_names)} variables)")
    print("=" * 60)

    verdict = 'PASS' if results['bartlett_pass'] else 'FAIL - variables look uncorrelated'
    print(f"\nBartlett: chi2={chi_square:,.2f}, p={p_value:.2e} -> {verdict}")
    print(f"KMO overall: {kmo_overall:.3f} ({results['kmo_label']})")

    print(f"\nPer-variable KMO (keep if >= {min_kmo}):")
    print(per_variable.round(3).to_string())

    if results['drop_candidates']:
        print(f"\nDrop candidates: {', '.join(results['drop_candidates'])}")

    return results


def drop_low_kmo_variables(
    kmo_per_variable: dict[str, float],
    threshold: float = None
) -> list[str]:
    """
    Keep variables whose individual KMO reaches the threshold.

    At least two variables are always kept (the two with the highest KMO)
    so the remaining set can still be factored.

    Parameters:
        kmo_per_variable: Mapping of variable name to KMO, as returned by
            check_factorability()
        threshold: Minimum per-variable KMO. Defaults to config.MIN_VARIABLE_KMO

    Returns:
        List of kept variable names in their original order
    """
    if threshold is None:
        threshold = config.MIN_VARIABLE_KMO

    kept = [var for var, kmo in kmo_per_variable.items() if kmo >= threshold]
    if len(kept) < 2:
        best = sorted(kmo_per_variable, key=kmo_per_variable.get, reverse=True)[:2]
        kept = [var for var in kmo_per_variable if var in best]

    dropped = [var for var in kmo_per_variable if var not in kept]
    if dropped:
        print(f"\nDropping variables with KMO < {threshold}: {', '.join(dropped)}")
    else:
        print(f"\nAll variables meet KMO >= {threshold}")

    return kept


def eigenvalue_table(eigenvalues: np.ndarray) -> pd.DataFrame:
    """
    Eigenvalues with explained-variance shares and the Kaiser flag.

    Returns:
        DataFrame indexed Factor_1..Factor_n with Eigenvalue, Proportion,
        Cumulative and Kaiser (eigenvalue > 1) columns
    """
    eigenvalues = np.asarray(eigenvalues, dtype=float)
    proportion = eigenvalues / eigenvalues.sum()

    return pd.DataFrame({
        'Eigenvalue': eigenvalues,
        'Proportion': proportion,
        'Cumulative': np.cumsum(proportion),
        'Kaiser': eigenvalues > 1,
    }, index=_factor_names(len(eigenvalues)))


def determine_num_factors(scaled_data: np.ndarray, var_names: list[str] = None) -> tuple:
    """
    Suggest a factor count with the Kaiser criterion (eigenvalue > 1).

    The eigenvalues come from an unrotated fit with as many factors as
    variables. At least one factor is always suggested.

    Parameters:
        scaled_data: Standardized data array
        var_names: Optional variable names (for sizing)

    Returns:
        Tuple of (eigenvalues array, suggested number of factors)
    """
    n_vars = scaled_data.shape[1] if var_names is None else len(var_names)

    fa = FactorAnalyzer(n_factors=n_vars, rotation=None)
    fa.fit(scaled_data)
    eigenvalues, _ = fa.get_eigenvalues()

    table = eigenvalue_table(eigenvalues)
    kaiser_factors = int(table['Kaiser'].sum())

    print("\n" + "=" * 60)
    print("FACTOR EXTRACTION CRITERIA")
    print("=" * 60)
    print(table.round(3).to_string())
    print(f"\nKaiser criterion keeps {kaiser_factors} factor(s)")

    if kaiser_factors == 0:
        print("No eigenvalue exceeds 1; falling back to a single factor")
        kaiser_factors = 1

    return eigenvalues, kaiser_factors


def run_efa(
    scaled_data: np.ndarray,
    var_names: list[str],
    n_factors: int,
    rotation: str = None,
    method: str = None
) -> dict:
    """
    Run Exploratory Factor Analysis with specified rotation.

    Parameters:
        scaled_data: Standardized data array
        var_names: List of variable names
        n_factors: Number of factors to extract
        rotation: Rotation method. Defaults to config.DEFAULT_ROTATION
        method: Extraction method ('minres', 'ml', 'principal').
            Defaults to config.DEFAULT_METHOD

    Returns:
        Dictionary with factor_analyzer, loadings, communalities, variance
    """
    if rotation is None:
        rotation = config.DEFAULT_ROTATION
    if method is None:
        method = config.DEFAULT_METHOD

    if not 1 <= n_factors <= len(var_names):
        raise ValueError(
            f"n_factors must be between 1 and {len(var_names)}, got {n_factors}"
        )

    # A single factor cannot be rotated
    effective_rotation = rotation if n_factors > 1 else None

    fa = FactorAnalyzer(n_factors=n_factors, rotation=effective_rotation, method=method)
    fa.fit(scaled_data)

    factor_names = _factor_names(n_factors)

    loadings = pd.DataFrame(fa.loadings_, index=var_names, columns=factor_names)

    communalities = pd.DataFrame(
        fa.get_communalities(),
        index=var_names,
        columns=['Communality']
    )
    uniquenesses = pd.Series(fa.get_uniquenesses(), index=var_names, name='Uniqueness')

    variance = fa.get_factor_variance()
    variance_df = pd.DataFrame(
        variance,
        index=['Variance', 'Proportional_Var', 'Cumulative_Var'],
        columns=factor_names
    )

    print("\n" + "=" * 60)
    print(f"FACTOR ANALYSIS ({n_factors} factors, {effective_rotation} rotation, {method})")
    print("=" * 60)

    print("\nFactor Loadings:")
    print("-" * 50)
    print(loadings.round(3).to_string())

    print("\nCommunalities:")
    print("-" * 50)
    for var in var_names:
        comm = communalities.loc[var, 'Communality']
        status = "LOW" if comm < config.COMMUNALITY_THRESHOLD else "OK"
        print(f"  {var}: {comm:.3f} [{status}]")

    print(f"\nTotal variance explained: {variance[2][-1]*100:.1f}%")

    print("\n" + "-" * 50)
    print(f"FACTOR INTERPRETATION (loadings > {config.LOADING_THRESHOLD})")
    print("-" * 50)

    for factor, high_loaders in interpret_factors(loadings).items():
        if high_loaders:
            print(f"\n{factor}:")
            for var, loading in high_loaders:
                sign = "+" if loading > 0 else "-"
                print(f"  {sign} {var}: {loading:.2f}")

    return {
        'factor_analyzer': fa,
        'loadings': loadings,
        'communalities': communalities,
        'uniquenesses': uniquenesses,
        'variance': variance_df,
        'n_factors': n_factors,
        'rotation': effective_rotation,
        'method': method,
    }


def calculate_factor_scores(
    fa: FactorAnalyzer,
    scaled_data: np.ndarray,
    valid_indices: pd.Index = None
) -> pd.DataFrame:
    """
    Score every observation (fire record) on the extracted factors.

    Parameters:
        fa: Fitted FactorAnalyzer object
        scaled_data: Standardized data array
        valid_indices: Row labels of the complete records that were scaled

    Returns:
        DataFrame with factor scores (n_samples x n_factors)
    """
    scores = fa.transform(scaled_data)
    scores_df = pd.DataFrame(scores, index=valid_indices, columns=_factor_names(scores.shape[1]))

    print("\n" + "=" * 60)
    print(f"FACTOR SCORES ({len(scores_df):,} records)")
    print("=" * 60)
    for factor, column in scores_df.items():
        print(f"  {factor}: mean={column.mean():+.3f}  sd={column.std():.3f}  "
              f"range=[{column.min():.2f}, {column.max():.2f}]")

    return scores_df


def interpret_factors(
    loadings: pd.DataFrame,
    threshold: float = None
) -> dict[str, list[tuple[str, float]]]:
    """
    Variables loading strongly on each factor, strongest first.

    Parameters:
        loadings: Factor loadings DataFrame
        threshold: Minimum absolute loading. Defaults to config.LOADING_THRESHOLD

    Returns:
        Dictionary mapping factor names to list of (variable, loading) tuples
    """
    if threshold is None:
        threshold = config.LOADING_THRESHOLD

    interpretations = {}
    for factor, column in loadings.items():
        strong = column[column.abs() > threshold]
        strongest_first = strong.abs().sort_values(ascending=False).index
        interpretations[factor] = list(strong[strongest_first].items())

    return interpretations


def flag_low_communalities(
    communalities: pd.DataFrame,
    threshold: float = None
) -> list[str]:
    """Return variables whose communality falls below the threshold."""
    if threshold is None:
        threshold = config.COMMUNALITY_THRESHOLD

    low = communalities[communalities['Communality'] < threshold]
    return list(low.index)


def get_factorability_summary(results: dict) -> pd.DataFrame:
    """
    Flatten check_factorability() output into a Test/Value/Interpretation table.

    Per-variable rows mark the drop candidates so the saved CSV shows why a
    variable left the analysis.
    """
    overall = pd.DataFrame({
        'Test': ['Bartlett_Chi_Square', 'Bartlett_p_value', 'KMO_Overall'],
        'Value': [results['bartlett_chi_square'], results['bartlett_p_value'],
                  results['kmo_overall']],
        'Interpretation': ['', 'PASS' if results['bartlett_pass'] else 'FAIL',
                           results['kmo_label']],
    })

    drop_candidates = set(results.get('drop_candidates', []))
    per_variable = pd.DataFrame({
        'Test': [f'KMO_{var}' for var in results['kmo_per_variable']],
        'Value': list(results['kmo_per_variable'].values()),
        'Interpretation': [
            config.get_kmo_label(kmo) + (' (drop candidate)' if var in drop_candidates else '')
            for var, kmo in results['kmo_per_variable'].items()
        ],
    })

    return pd.concat([overall, per_variable], ignore_index=True)
