"""Tests for runtime configuration."""

import pytest

from finsync.config import SyncConfig
from finsync.domain.errors import ValidationError


def test_defaults():
    """Test configuration with no environment."""
    config = SyncConfig.from_env({})

    assert config.api_base_url == "http://localhost:4000"
    assert config.sync_interval_seconds == 30
    assert config.max_attempts is None
    assert config.preview_rows == 5


def test_environment_overrides():
    """Test reading FINSYNC_* variables."""
    config = SyncConfig.from_env(
        {
            "FINSYNC_API_URL": "https://api.example.com/",
            "FINSYNC_SYNC_INTERVAL": "60",
            "FINSYNC_MAX_ATTEMPTS": "5",
            "FINSYNC_PREVIEW_ROWS": "10",
        }
    )

    assert config.api_base_url == "https://api.example.com"
    assert config.sync_interval_seconds == 60
    assert config.max_attempts == 5
    assert config.preview_rows == 10


def test_blank_values_use_defaults():
    """Test that empty variables are ignored."""
    config = SyncConfig.from_env({"FINSYNC_MAX_ATTEMPTS": " ", "FINSYNC_API_URL": ""})

    assert config.max_attempts is None
    assert config.api_base_url == "http://localhost:4000"


@pytest.mark.parametrize(
    "name,value,message",
    [
        ("FINSYNC_SYNC_INTERVAL", "soon", "must be an integer"),
        ("FINSYNC_MAX_ATTEMPTS", "0", "must be positive"),
        ("FINSYNC_PREVIEW_ROWS", "-3", "must be positive"),
    ],
)
def test_invalid_values(name, value, message):
    """Test rejection of bad numeric settings."""
    with pytest.raises(ValidationError, match=message):
        SyncConfig.from_env({name: value})


def test_reads_process_environment(monkeypatch):
    """Test the os.environ default."""
    monkeypatch.setenv("FINSYNC_SYNC_INTERVAL", "45")

    assert SyncConfig.from_env().sync_interval_seconds == 45
