"""
HTML Table Extraction Module
============================

Functions for locating one table inside an HTML page with XPath and
reshaping it into a tidy DataFrame.

Typical flow:
    html = web.fetch_cached_text(url, cache_path)
    tree = parse_html(html)
    node = select_node(tree, xpath)
    df = coerce_numeric(clean_cells(clean_columns(table_to_dataframe(node))))
"""

import copy
import re
from io import StringIO
from typing import Union

import lxml.html
import numpy as np
import pandas as pd
import requests

from . import config
from . import web


# Footnote markers such as [a], [12], [note 3], [citation needed]
FOOTNOTE_PATTERN = re.compile(r'\[[\w\s]{1,20}\]')

# Cell values Wikipedia uses for "no data"
MISSING_TOKENS = ['', '—', '–', '-', '−', 'N/A', 'n/a', 'NA']


def parse_html(html: Union[str, bytes]) -> lxml.html.HtmlElement:
    """
    Parse an HTML document into an lxml element tree.

    Parameters:
        html: Page source

    Returns:
        Root HtmlElement
    """
    if html is None or not html.strip():
        raise ValueError("Cannot parse an empty HTML document")

    tree = lxml.html.fromstring(html)
    print(f"Parsed HTML document: <{tree.tag}> with {len(tree.xpath('//table'))} tables")
    return tree


def summarize_tables(tree: lxml.html.HtmlElement) -> pd.DataFrame:
    """
    List every <table> in the document with an XPath that selects it.

    Parameters:
        tree: Parsed document

    Returns:
        DataFrame with one row per table (position, id, class, caption, rows, xpath)
    """
    root = tree.getroottree()
    rows = []
    for position, table in enumerate(tree.xpath('//table'), 1):
        caption = table.find('caption')
        rows.append({
            'position': position,
            'id': table.get('id', ''),
            'class': table.get('class', ''),
            'caption': ' '.join(caption.text_content().split()) if caption is not None else '',
            'rows': len(table.xpath('.//tr')),
            'xpath': root.getpath(table),
        })

    return pd.DataFrame(rows, columns=['position', 'id', 'class', 'caption', 'rows', 'xpath'])


def select_node(tree: lxml.html.HtmlElement, xpath: str) -> lxml.html.HtmlElement:
    """
    Select a single element by XPath.

    The first match is returned when the expression matches several nodes.

    Parameters:
        tree: Parsed document
        xpath: XPath expression

    Returns:
        Matching HtmlElement
    """
    result = tree.xpath(xpath)

    if not isinstance(result, list):
        raise ValueError(f"XPath {xpath!r} evaluated to a {type(result).__name__}, not a node")
    if not result:
        raise ValueError(f"XPath {xpath!r} matched no nodes")

    node = result[0]
    if not isinstance(node, lxml.html.HtmlElement):
        raise ValueError(f"XPath {xpath!r} matched {type(node).__name__}, not an element")

    if len(result) > 1:
        print(f"XPath matched {len(result)} nodes; using the first")
    print(f"Selected <{node.tag}> (class={node.get('class', '')!r})")
    return node


def table_to_dataframe(
    node: lxml.html.HtmlElement,
    strip_references: bool = True
) -> pd.DataFrame:
    """
    Convert a <table> element (or the first table inside node) to a DataFrame.

    Parameters:
        node: Table element, or a container holding one
        strip_references: Drop <sup class="reference"> citation links first

    Returns:
        DataFrame parsed by pandas.read_html
    """
    if node.tag == 'table':
        table = node
    else:
        inner = node.xpath('.//table')
        if not inner:
            raise ValueError(f"Selected <{node.tag}> node contains no table")
        table = inner[0]

    # Work on a copy so the caller's tree is left intact
    table = copy.deepcopy(table)
    if strip_references:
        for sup in table.xpath('.//sup[contains(@class, "reference")]'):
            sup.drop_tree()

    markup = lxml.html.tostring(table, encoding='unicode')
    df = pd.read_html(StringIO(markup), flavor='lxml')[0]

    print(f"Table parsed: {len(df):,} rows x {len(df.columns)} columns")
    return df


def _is_text(series: pd.Series) -> bool:
    return pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)


def _strip_footnotes(text: str) -> str:
    """Remove footnote markers and collapse whitespace."""
    return ' '.join(FOOTNOTE_PATTERN.sub('', text).split())


def _flatten_header(label) -> str:
    """Join the distinct, named levels of a (possibly multi-level) header."""
    if not isinstance(label, tuple):
        return str(label)

    parts = []
    for level in label:
        level = str(level)
        if level.startswith('Unnamed:') or level in parts:
            continue
        parts.append(level)
    return ' '.join(parts)


def clean_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Flatten headers, strip footnote markers and de-duplicate column names.

    Parameters:
        df: Raw table

    Returns:
        Copy of df with cleaned, unique column names
    """
    df = df.copy()

    names = [_strip_footnotes(_flatten_header(col)) for col in df.columns]

    # Original names are reserved so a generated suffix never shadows a real header
    taken = set(names)
    emitted = set()
    unique = []
    for name in names:
        candidate = name
        if name in emitted:
            n = 2
            while f"{name}_{n}" in taken:
                n += 1
            candidate = f"{name}_{n}"
        taken.add(candidate)
        emitted.add(candidate)
        unique.append(candidate)

    df.columns = unique
    return df


def clean_cells(df: pd.DataFrame) -> pd.DataFrame:
    """Strip footnote markers and whitespace from every text cell."""
    df = df.copy()
    for col in df.columns:
        if _is_text(df[col]):
            df[col] = df[col].map(lambda v: _strip_footnotes(v) if isinstance(v, str) else v)
    return df


def coerce_numeric(df: pd.DataFrame, columns: list[str] = None) -> pd.DataFrame:
    """
    Convert text columns holding formatted numbers to floats.

    Thousands separators, percent and plus signs are removed and the Unicode
    minus is normalized. A column is converted only when every non-empty
    cell parses; otherwise it is left as text.

    Parameters:
        df: Input DataFrame
        columns: Columns to try. Defaults to all object columns

    Returns:
        Copy of df with convertible columns as float
    """
    df = df.copy()
    if columns is None:
        columns = [col for col in df.columns if _is_text(df[col])]

    converted = []
    for col in columns:
        values = df[col].dropna().astype(str).str.strip()
        values = values[~values.isin(MISSING_TOKENS)]
        if values.empty:
            continue

        values = (
            values.str.replace('−', '-', regex=False)
            .str.replace(r'[,%+\s]', '', regex=True)
        )
        numbers = pd.to_numeric(values, errors='coerce')
        if numbers.isna().any():
            continue

        result = pd.Series(np.nan, index=df.index, dtype=float)
        result.loc[numbers.index] = numbers.astype(float)
        df[col] = result
        converted.append(col)

    if converted:
        print(f"Numeric columns: {', '.join(converted)}")
    return df


def extract_table(
    url: str = None,
    xpath: str = None,
    cache_path: str = None,
    session: requests.Session = None
) -> pd.DataFrame:
    """
    Convenience function: fetch, parse, select by XPath and reshape.

    Parameters:
        url: Page address. Defaults to config.WIKI_URL
        xpath: Table XPath. Defaults to config.WIKI_TABLE_XPATH
        cache_path: Local HTML cache. None fetches every time
        session: Optional HTTP session

    Returns:
        Cleaned DataFrame
    """
    if url is None:
        url = config.WIKI_URL
    if xpath is None:
        xpath = config.WIKI_TABLE_XPATH

    html = web.fetch_cached_text(url, cache_path, session)
    tree = parse_html(html)
    node = select_node(tree, xpath)
    df = table_to_dataframe(node)
    df = clean_columns(df)
    df = clean_cells(df)
    return coerce_numeric(df)
