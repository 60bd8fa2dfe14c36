import pytest

from jobs.config import AnalysisConfig, AppConfig, load_config, parse_periods


def test_defaults_without_environment():
    config = load_config({})

    assert config == AppConfig()
    assert config.zip_code == "90720"
    assert config.update_interval_hours == 12
    assert config.cache_max_age_days == 30
    assert config.enable_peer_sync is False
    assert config.analysis.sma_periods == (7, 30, 90)
    assert config.analysis.outlier_sigma == 3.0


def test_environment_overrides():
    config = load_config(
        {
            "RE_TRACKER_ZIP": "90210",
            "ENABLE_PEER_SYNC": "true",
            "PEER_URLS": "http://peer-a:8000/, http://peer-b:8000",
            "SMA_PERIODS": "5, 20",
            "OUTLIER_SIGMA": "2.5",
            "LOOKBACK_DAYS": "90",
            "SCRAPE_RATE_LIMIT_SECONDS": "0",
            "ENABLE_DEBUG_LOGGING": "yes",
        }
    )

    assert config.zip_code == "90210"
    assert config.enable_peer_sync is True
    assert config.peer_urls == ("http://peer-a:8000", "http://peer-b:8000")
    assert config.analysis == AnalysisConfig(sma_periods=(5, 20), outlier_sigma=2.5, lookback_days=90)
    assert config.scrape_rate_limit_seconds == 0.0
    assert config.enable_debug_logging is True


@pytest.mark.parametrize(
    "env",
    [
        {"ENABLE_PEER_SYNC": "maybe"},
        {"CACHE_MAX_AGE_DAYS": "thirty"},
        {"SMA_PERIODS": "7,0"},
        {"OUTLIER_SIGMA": "-1"},
    ],
)
def test_malformed_values_raise(env):
    with pytest.raises(ValueError):
        load_config(env)


def test_parse_periods_requires_a_value():
    assert parse_periods("7,30") == (7, 30)
    with pytest.raises(ValueError):
        parse_periods(" , ")
