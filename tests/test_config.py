import pytest
from pathlib import Path
from teraspend.core.config import TeraspendConfig, load_config_from_env


def test_config_defaults():
    """Test that the configuration has expected defaults."""
    config = TeraspendConfig()

    assert config.server_mode is True
    assert config.block_height_retention == 0
    assert config.store_path == Path.home() / ".teraspend" / "records"
    assert config.log_level == "INFO"


def test_config_override(monkeypatch):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("TERASPEND_STORE_PATH", "/tmp/teraspend_records")
    monkeypatch.setenv("TERASPEND_BLOCK_HEIGHT_RETENTION", "288")
    monkeypatch.setenv("TERASPEND_SERVER_MODE", "false")
    monkeypatch.setenv("TERASPEND_LOG_LEVEL", "debug")

    config = load_config_from_env()

    assert config.store_path == Path("/tmp/teraspend_records")
    assert config.block_height_retention == 288
    assert config.server_mode is False
    assert config.log_level == "DEBUG"


def test_config_validation():
    """Test that configuration values are validated."""
    with pytest.raises(ValueError):
        TeraspendConfig(block_height_retention=-1)

    with pytest.raises(ValueError):
        TeraspendConfig(log_level="LOUD")

    config = TeraspendConfig(block_height_retention=10)
    assert config.block_height_retention == 10
