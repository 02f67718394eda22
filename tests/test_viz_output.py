"""
Figure and output file tests (Agg backend, files written under tmp_path).
"""

from datetime import date

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from recipe_core import output, viz


@pytest.fixture
def loadings():
    return pd.DataFrame(
        {'Factor_1': [0.8, 0.7, 0.1], 'Factor_2': [0.05, -0.2, 0.9]},
        index=['DMC', 'DC', 'FFMC'],
    )


@pytest.fixture
def output_dir(tmp_path):
    return output.get_output_dir('unit', tmp_path)


class TestOutput:
    def test_dated_directory(self, tmp_path):
        path = output.get_output_dir('forest-fires-efa', tmp_path)

        assert path.is_dir()
        assert path.name == f"{date.today().isoformat()}-forest-fires-efa"

    def test_save_csv_naming(self, output_dir):
        path = output.save_csv(pd.DataFrame({'a': [1]}), output_dir, 'unit', 'table')

        assert path.name == f"{date.today().isoformat()}-unit-table.csv"
        assert pd.read_csv(path)['a'].tolist() == [1]

    def test_save_report_and_summary(self, output_dir, capsys):
        output.save_report('hello', output_dir, 'unit')
        output.print_summary(output_dir)

        assert output.list_outputs(output_dir) == [f"{date.today().isoformat()}-unit-report.txt"]
        out = capsys.readouterr().out
        assert 'unit-report.txt [report, 0.0 KB]' in out

    def test_list_outputs_missing_dir(self, tmp_path):
        assert output.list_outputs(tmp_path / 'nope') == []

    def test_save_figure_closes_figure(self, output_dir):
        fig, ax = plt.subplots()
        ax.plot([1, 2], [3, 4])

        path = output.save_figure(fig, output_dir, 'unit', 'line')

        assert path.exists() and path.suffix == '.png'
        assert not plt.fignum_exists(fig.number)


class TestFigures:
    def test_scree_plot(self, output_dir):
        fig = viz.plot_scree(np.array([2.3, 2.1, 0.4, 0.3]))
        ax = fig.axes[0]

        assert ax.get_xlabel() == 'Factor Number'
        assert len(ax.lines[0].get_xdata()) == 4
        assert output.save_figure(fig, output_dir, 'unit', 'scree').exists()

    def test_kmo_bars(self, output_dir):
        fig = viz.plot_kmo({'DMC': 0.7, 'rain': 0.4}, threshold=0.5)

        assert len(fig.axes[0].patches) == 2
        assert output.save_figure(fig, output_dir, 'unit', 'kmo').exists()

    def test_correlation_heatmap(self, output_dir):
        corr = pd.DataFrame([[1.0, 0.5], [0.5, 1.0]], index=['a', 'b'], columns=['a', 'b'])
        fig = viz.plot_correlation_matrix(corr)

        assert fig.axes[0].get_title() == 'Correlation Matrix'
        output.save_figure(fig, output_dir, 'unit', 'corr')

    def test_loadings_heatmap_title(self, loadings):
        fig = viz.plot_loadings_heatmap(loadings, 'varimax')
        assert fig.axes[0].get_title() == 'Factor Loadings (Varimax Rotation)'
        plt.close(fig)

    def test_loadings_bars_one_panel_per_factor(self, loadings):
        fig = viz.plot_loadings_bars(loadings)
        assert [ax.get_title() for ax in fig.axes] == ['Factor_1', 'Factor_2']
        plt.close(fig)

    def test_loadings_bars_single_factor(self, loadings):
        fig = viz.plot_loadings_bars(loadings[['Factor_1']])
        assert len(fig.axes) == 1
        plt.close(fig)

    def test_top_rows(self):
        table = pd.DataFrame({'Location': list('abcde'), 'Population': [5, 1, 4, 2, 3]})
        fig = viz.plot_top_rows(table, 'Location', 'Population', n=3)
        fig.canvas.draw()

        labels = [t.get_text() for t in fig.axes[0].get_yticklabels()]
        assert labels == ['a', 'c', 'e']
        plt.close(fig)

    def test_top_rows_needs_numeric_column(self):
        table = pd.DataFrame({'Location': ['a'], 'Population': ['many']})
        with pytest.raises(ValueError, match='not numeric'):
            viz.plot_top_rows(table, 'Location', 'Population')
