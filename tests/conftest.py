"""Shared fixtures: synthetic datasets, inline HTML, and an offline HTTP session."""

import numpy as np
import pandas as pd
import pytest
import requests


SAMPLE_HTML = """
<html>
<head><title>List of places by population</title></head>
<body>
<div id="mw-content-text"><div class="mw-parser-output">
<p>Intro paragraph.</p>
<table class="wikitable sortable">
<caption>Places by population</caption>
<thead>
<tr><th>Location</th><th>Population<sup class="reference"><a href="#cite-1">[1]</a></sup></th><th>Share</th><th>Notes</th></tr>
</thead>
<tbody>
<tr><td>Alpha[a]</td><td>1,234,567</td><td>12.5%</td><td>big</td></tr>
<tr><td>Beta</td><td>987,654</td><td>9.1%</td><td>—</td></tr>
<tr><td>Gamma</td><td>−5</td><td>+0.1%</td><td>x</td></tr>
</tbody>
</table>
<table class="infobox" id="side"><tr><td>Other</td></tr></table>
</div></div>
</body>
</html>
"""


class FakeResponse:
    """Minimal stand-in for requests.Response (text is the charset-decoded body)."""

    def __init__(self, body: str, status_code: int = 200, url: str = '', encoding: str = 'utf-8'):
        self.content = body.encode(encoding)
        self.text = body
        self.status_code = status_code
        self.url = url

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


class FakeSession:
    """Records GETs and serves canned bodies by URL."""

    def __init__(self, pages: dict = None, status_code: int = 200, encoding: str = 'utf-8'):
        self.pages = pages or {}
        self.status_code = status_code
        self.encoding = encoding
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        return FakeResponse(self.pages.get(url, ''), self.status_code, url, self.encoding)

    def close(self):
        self.closed = True


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def fake_session_factory():
    return FakeSession


@pytest.fixture
def two_factor_df():
    """Six variables driven by two independent latent factors."""
    rng = np.random.default_rng(42)
    n = 500
    f1 = rng.normal(size=n)
    f2 = rng.normal(size=n)

    columns = {}
    for i in range(1, 4):
        columns[f'a{i}'] = 0.8 * f1 + 0.6 * rng.normal(size=n)
    for i in range(1, 4):
        columns[f'b{i}'] = 0.8 * f2 + 0.6 * rng.normal(size=n)
    return pd.DataFrame(columns)


@pytest.fixture
def forest_fires_df():
    """Synthetic table shaped like the UCI forest fires CSV."""
    rng = np.random.default_rng(7)
    n = 400
    drought = rng.normal(size=n)
    fuel = rng.normal(size=n)

    return pd.DataFrame({
        'X': rng.integers(1, 10, size=n),
        'Y': rng.integers(2, 10, size=n),
        'month': rng.choice(['mar', 'aug', 'sep'], size=n),
        'day': rng.choice(['mon', 'fri', 'sun'], size=n),
        'FFMC': 90 + 3 * (0.8 * fuel + 0.6 * rng.normal(size=n)),
        'DMC': 110 + 40 * (0.8 * drought + 0.6 * rng.normal(size=n)),
        'DC': 550 + 200 * (0.8 * drought + 0.6 * rng.normal(size=n)),
        'ISI': 9 + 3 * (0.8 * fuel + 0.6 * rng.normal(size=n)),
        'temp': 19 + 5 * (0.7 * drought + 0.7 * rng.normal(size=n)),
        'RH': 44 - 12 * (0.6 * drought + 0.8 * rng.normal(size=n)),
        'wind': 4 + np.abs(rng.normal(size=n)),
        'rain': np.abs(rng.normal(scale=0.1, size=n)) * (rng.random(n) < 0.05),
        'area': np.abs(rng.normal(scale=10, size=n)) * (rng.random(n) < 0.5),
    })
