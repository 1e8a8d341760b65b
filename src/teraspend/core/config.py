import logging
from pathlib import Path
from pydantic import BaseModel, Field, field_validator


class TeraspendConfig(BaseModel):
    """Configuration for the UTXO record module and its CLI.

    This model loads configuration from environment variables and defaults.
    """
    # Module Configuration
    server_mode: bool = Field(
        default=True,
        description="True when running inside the database server (vs a client harness)"
    )

    # Retention Configuration
    block_height_retention: int = Field(
        default=0,
        description="Blocks to keep a fully spent, mined record before deletion (0 disables)"
    )

    # CLI Record Store Configuration
    store_path: Path = Field(
        default=Path.home() / ".teraspend" / "records",
        description="Directory holding JSON records for the CLI"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Log level name used by the CLI"
    )

    @field_validator('block_height_retention')
    def validate_block_height_retention(cls, value):
        """Validate retention is non-negative."""
        if value < 0:
            raise ValueError("Block height retention cannot be negative")
        return value

    @field_validator('log_level')
    def validate_log_level(cls, value):
        """Validate the log level is a known logging level name."""
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Unknown log level: {value}")
        return value

    model_config = {
        "env_prefix": "TERASPEND_",
        "arbitrary_types_allowed": True,
        "validate_assignment": True,
    }


# Global config instance with default values
config = TeraspendConfig()


def load_config_from_env() -> TeraspendConfig:
    """Load configuration from environment variables.

    Returns:
        TeraspendConfig: Configuration instance with values from environment
    """
    import os

    env_settings = {}

    env_mappings = {
        "TERASPEND_SERVER_MODE": "server_mode",
        "TERASPEND_BLOCK_HEIGHT_RETENTION": "block_height_retention",
        "TERASPEND_STORE_PATH": "store_path",
        "TERASPEND_LOG_LEVEL": "log_level",
    }

    for env_var, field_name in env_mappings.items():
        if env_var in os.environ:
            value = os.environ[env_var]

            # Handle type conversions
            if field_name == "store_path":
                value = Path(value)
            elif field_name == "block_height_retention":
                value = int(value)
            elif field_name == "server_mode":
                value = value.strip().lower() in ("1", "true", "yes", "on")

            env_settings[field_name] = value

    return TeraspendConfig(**env_settings)
