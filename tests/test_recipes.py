"""
Smoke Tests: both recipes end to end on cached synthetic inputs

No network access: the page and the CSV are written to the cache paths
before the run, and the fake session asserts nothing was fetched.
"""

import pandas as pd
import pytest

from analyses import run_forest_fires_efa, run_wiki_table
from recipe_core import data, efa


@pytest.mark.smoke
class TestWikiTableRecipe:
    def test_runs_from_cache(self, tmp_path, sample_html, fake_session_factory):
        cache = tmp_path / 'page.html'
        cache.write_text(sample_html, encoding='utf-8')
        session = fake_session_factory()

        params = {
            **run_wiki_table.DEFAULTS,
            'url': 'https://example.org/wiki/Places',
            'cache_file': str(cache),
            'output_base': str(tmp_path / 'outputs'),
            'session': session,
        }
        results = run_wiki_table.run_analysis(params)

        assert session.calls == []
        assert not session.closed
        assert results['table']['Location'].tolist() == ['Alpha', 'Beta', 'Gamma']
        assert len(results['tables']) == 2
        assert results['chart_path'].exists()

        files = ' '.join(p.name for p in results['output_dir'].iterdir())
        for suffix in ('tables.csv', 'table.csv', 'top-rows.png', 'report.txt'):
            assert suffix in files

    def test_chart_skipped_without_value_column(self, tmp_path, sample_html, fake_session_factory):
        cache = tmp_path / 'page.html'
        cache.write_text(sample_html, encoding='utf-8')

        params = {
            **run_wiki_table.DEFAULTS,
            'cache_file': str(cache),
            'value_col': 'Notes',
            'output_base': str(tmp_path / 'outputs'),
            'session': fake_session_factory(),
        }
        results = run_wiki_table.run_analysis(params)

        assert results['chart_path'] is None


@pytest.mark.smoke
class TestForestFiresRecipe:
    @pytest.fixture
    def params(self, tmp_path, forest_fires_df, fake_session_factory):
        data_file = tmp_path / 'forestfires.csv'
        forest_fires_df.to_csv(data_file, index=False)
        return {
            **run_forest_fires_efa.DEFAULTS,
            'data_file': str(data_file),
            'output_base': str(tmp_path / 'outputs'),
            'session': fake_session_factory(),
        }

    def test_full_pipeline(self, params):
        results = run_forest_fires_efa.run_analysis(params)

        assert params['session'].calls == []
        assert set(results['features']) <= set(params['features'])
        assert len(results['features']) >= 2
        assert results['suggested_factors'] >= 1
        assert list(results['loadings'].index) == results['features']
        assert len(results['factor_scores']) == len(results['df'])

        files = ' '.join(p.name for p in results['output_dir'].iterdir())
        for suffix in ('correlation.png', 'kmo.png', 'scree.png', 'loadings.png',
                       'loadings-bars.png', 'loadings.csv', 'communalities.csv',
                       'scores.csv', 'factorability.csv', 'report.txt'):
            assert suffix in files

    def test_fixed_factor_count_without_kmo_drop(self, params):
        params = {**params, 'n_factors': 2, 'drop_low_kmo': False}
        results = run_forest_fires_efa.run_analysis(params)

        assert results['dropped'] == []
        assert results['features'] == list(params['features'])
        assert list(results['loadings'].columns) == ['Factor_1', 'Factor_2']

    def test_same_data_reproduces_same_numbers(self, params):
        first = run_forest_fires_efa.run_analysis(params)
        second = run_forest_fires_efa.run_analysis(params)

        assert first['loadings'].equals(second['loadings'])
        assert (first['eigenvalues'] == second['eigenvalues']).all()

    def test_low_kmo_variables_leave_the_analysis(self, params, forest_fires_df):
        df = data.log_transform(forest_fires_df, params['log_columns'])
        scaled_array, _, _, _ = data.standardize_features(df, params['features'])
        kmo = efa.check_factorability(scaled_array, params['features'])['kmo_per_variable']
        ranked = sorted(kmo.values())
        min_kmo = (ranked[2] + ranked[3]) / 2

        results = run_forest_fires_efa.run_analysis({**params, 'min_kmo': min_kmo})

        expected = [var for var in params['features'] if kmo[var] >= min_kmo]
        assert results['features'] == expected
        assert results['dropped'] == [var for var in params['features'] if var not in expected]
        assert list(results['factorability']['kmo_per_variable']) == expected
        assert list(results['loadings'].index) == expected
        assert results['initial_factorability']['drop_candidates'] == results['dropped']

        report = results['report']
        assert 'KMO after drop' in report
        assert f"Configured features ({len(params['features'])})" in report
        assert f"Analysed features ({len(expected)}): {', '.join(expected)}" in report

    def test_eigenvalue_table_saved(self, params):
        results = run_forest_fires_efa.run_analysis(params)

        saved = [p for p in results['output_dir'].iterdir() if p.name.endswith('eigenvalues.csv')]
        assert len(saved) == 1
        table = pd.read_csv(saved[0], index_col=0)
        assert len(table) == len(results['features'])
        assert table['Cumulative'].iloc[-1] == pytest.approx(1.0)
