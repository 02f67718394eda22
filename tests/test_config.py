import pytest

from recipe_core import config


@pytest.mark.parametrize(
    "value,expected",
    [
        (0.95, "Marvelous"),
        (0.9, "Marvelous"),
        (0.85, "Meritorious"),
        (0.72, "Middling"),
        (0.6, "Mediocre"),
        (0.55, "Miserable"),
        (0.49, "Unacceptable"),
        (0.0, "Unacceptable"),
        (-0.1, "Unacceptable"),
    ],
)
def test_kmo_labels(value, expected):
    assert config.get_kmo_label(value) == expected


def test_log_columns_are_features():
    assert set(config.FOREST_FIRES_LOG_COLUMNS) <= set(config.FOREST_FIRES_FEATURES)
