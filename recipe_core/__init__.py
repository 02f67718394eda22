"""
Recipe Core Library
===================

Step functions behind the two analysis recipes: extracting a Wikipedia table
by XPath, and exploratory factor analysis of the forest fires dataset.

Modules:
    config  - Global configuration parameters
    web     - HTTP session, fetching, download-if-absent caching
    scrape  - HTML parsing, XPath selection, table reshaping
    data    - Data loading, transformation, standardization
    efa     - Factorability tests and factor analysis
    viz     - Plot style and figures
    output  - Output naming and saving
"""

from . import config
from . import web
from . import scrape
from . import data
from . import efa
from . import viz
from . import output

__version__ = '1.0.0'

__all__ = [
    'config',
    'web',
    'scrape',
    'data',
    'efa',
    'viz',
    'output',
]
