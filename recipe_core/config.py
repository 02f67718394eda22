"""
Global Configuration for the Analysis Recipes
==============================================

Central location for default parameters used across both recipes.
Override these in individual recipe scripts as needed.
"""

# =============================================================================
# WIKIPEDIA TABLE CONFIGURATION
# =============================================================================
WIKI_URL = 'https://en.wikipedia.org/wiki/List_of_countries_and_dependencies_by_population'

# Copied from the browser inspector: first table of the article body
WIKI_TABLE_XPATH = '//*[@id="mw-content-text"]/div[1]/table[contains(@class, "wikitable")][1]'

WIKI_CACHE_FILE = 'Data/wiki_population.html'

# Columns used for the "largest rows" chart
WIKI_LABEL_COLUMN = 'Location'
WIKI_VALUE_COLUMN = 'Population'
WIKI_TOP_N = 15

# =============================================================================
# FOREST FIRES CONFIGURATION
# =============================================================================
FOREST_FIRES_URL = (
    'https://archive.ics.uci.edu/ml/machine-learning-databases/'
    'forest-fires/forestfires.csv'
)
FOREST_FIRES_FILE = 'Data/forestfires.csv'

# Fire Weather Index components and weather readings
FOREST_FIRES_FEATURES = [
    'FFMC',     # Fine Fuel Moisture Code
    'DMC',      # Duff Moisture Code
    'DC',       # Drought Code
    'ISI',      # Initial Spread Index
    'temp',     # Temperature (C)
    'RH',       # Relative humidity (%)
    'wind',     # Wind speed (km/h)
    'rain',     # Outside rain (mm/m2)
]

# Zero-inflated fields that get log1p before standardizing
FOREST_FIRES_LOG_COLUMNS = ['rain']

# =============================================================================
# EFA CONFIGURATION
# =============================================================================
DEFAULT_ROTATION = 'varimax'
DEFAULT_METHOD = 'minres'
LOADING_THRESHOLD = 0.5       # Threshold for "high" factor loadings
COMMUNALITY_THRESHOLD = 0.4   # Below this a variable is poorly explained
MIN_VARIABLE_KMO = 0.5        # Per-variable KMO below this is a drop candidate

# =============================================================================
# HTTP CONFIGURATION
# =============================================================================
HTTP_TIMEOUT = 30
HTTP_RETRIES = 3
HTTP_BACKOFF = 0.5
USER_AGENT = 'analysis-recipes/1.0 (educational notebook; python-requests)'

# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================
DEFAULT_OUTPUT_BASE = 'outputs'
DEFAULT_DPI = 150

# =============================================================================
# KMO INTERPRETATION LABELS
# =============================================================================
KMO_THRESHOLDS = {
    0.9: "Marvelous",
    0.8: "Meritorious",
    0.7: "Middling",
    0.6: "Mediocre",
    0.5: "Miserable",
    0.0: "Unacceptable",
}


def get_kmo_label(kmo_value: float) -> str:
    """Return human-readable KMO interpretation."""
    for threshold, label in sorted(KMO_THRESHOLDS.items(), reverse=True):
        if kmo_value >= threshold:
            return label
    return "Unacceptable"
