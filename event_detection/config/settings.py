"""Application settings with Pydantic Settings validation.

Tuning values are loaded from config/main.yaml and any other config/*.yaml
files. All configs are merged and validated against JSON schemas before they
are applied. Environment variables (or a .env file) take precedence over YAML.
"""

import json
from pathlib import Path
from typing import Any, cast

import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from event_detection.config.logging_config import get_logger
from event_detection.domain.clustering_constants import (
    DEFAULT_MAX_CANDIDATE_EVENTS,
    DEFAULT_MERGE_SIMILARITY,
    DEFAULT_TIME_WINDOW_DAYS,
)
from event_detection.domain.radius_constants import (
    MAX_RADIUS_METERS,
    RADIUS_CACHE_TTL_SECONDS_DEFAULT,
)
from event_detection.domain.suggestion_constants import DEFAULT_RECENT_CONTACT_DAYS
from event_detection.domain.venue_constants import DEFAULT_MAX_RANKED_EVENTS

DEFAULT_CONFIG_DIR = Path("config")

logger = cast(Any, get_logger(__name__))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge into base (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_schema(
    schema_name: str, config_dir: Path = DEFAULT_CONFIG_DIR
) -> dict[str, Any]:
    """Load JSON Schema from <config_dir>/schemas/.

    Args:
        schema_name: Schema name without extension (e.g., "main")
        config_dir: Directory holding the YAML configs

    Returns:
        JSON Schema dictionary or empty dict if not found
    """
    schema_path = config_dir / "schemas" / f"{schema_name}.schema.json"
    if not schema_path.exists():
        return {}

    try:
        with open(schema_path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(
            "config_schema_load_failed",
            schema=schema_name,
            error=str(e),
        )
        return {}


def validate_config_section(
    config: dict[str, Any],
    schema_name: str,
    file_path: str = "",
    config_dir: Path = DEFAULT_CONFIG_DIR,
) -> None:
    """Validate config section against JSON Schema.

    Raises:
        ValueError: If validation fails
    """
    schema = load_schema(schema_name, config_dir)
    if not schema:
        return

    try:
        validate(instance=config, schema=schema)
        logger.debug("config_validation_succeeded", schema=schema_name)
    except JSONSchemaValidationError as e:
        error_msg = f"Config validation failed for {schema_name}"
        if file_path:
            error_msg += f" (file: {file_path})"
        error_msg += f": {e.message}"
        raise ValueError(error_msg) from e


def load_all_configs(config_dir: Path = DEFAULT_CONFIG_DIR) -> dict[str, Any]:
    """Load and merge all YAML configs from the config directory.

    Loading order (later overrides earlier):
    1. main.yaml
    2. All other *.yaml files (sorted alphabetically)

    Each file is validated against the schema named after its stem, if any.

    Returns:
        Merged configuration dictionary
    """
    merged_config: dict[str, Any] = {}
    if not config_dir.is_dir():
        logger.debug("config_dir_missing", path=str(config_dir))
        return merged_config

    main_path = config_dir / "main.yaml"
    yaml_files = sorted(f for f in config_dir.glob("*.yaml") if f.name != "main.yaml")
    if main_path.exists():
        yaml_files.insert(0, main_path)

    for yaml_file in yaml_files:
        schema_name = yaml_file.stem
        try:
            with open(yaml_file, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning(
                "config_file_load_failed",
                path=str(yaml_file),
                error=str(e),
            )
            continue

        try:
            validate_config_section(
                file_config, schema_name, str(yaml_file), config_dir
            )
        except ValueError as e:
            logger.error(
                "config_validation_failed",
                path=str(yaml_file),
                schema=schema_name,
                error=str(e),
            )
            raise

        merged_config = deep_merge(merged_config, file_config)
        logger.debug("config_file_loaded", path=str(yaml_file), schema=schema_name)

    logger.info("config_load_complete", file_count=len(yaml_files))
    return merged_config


class Settings(BaseSettings):
    """Detection tuning settings.

    Defaults live in domain constants; YAML files override them, and
    environment variables override YAML.
    """

    model_config = SettingsConfigDict(
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(
        default=False, description="Render logs as JSON instead of console output"
    )

    # Clustering
    merge_similarity_threshold: float = Field(
        default=DEFAULT_MERGE_SIMILARITY,
        ge=0.0,
        le=1.0,
        description="Minimum venue similarity for two venues to share a cluster",
    )
    time_window_days: int = Field(
        default=DEFAULT_TIME_WINDOW_DAYS,
        ge=1,
        description="Length of the cluster time range in days",
    )
    max_candidate_events: int = Field(
        default=DEFAULT_MAX_CANDIDATE_EVENTS,
        ge=0,
        description="Maximum clusterable venues per run (0 = unlimited)",
    )

    # Radius policy
    radius_cache_ttl_seconds: int = Field(
        default=RADIUS_CACHE_TTL_SECONDS_DEFAULT,
        ge=0,
        description="Lifetime of cached radius decisions",
    )
    radius_category_overrides: dict[str, int] = Field(
        default_factory=dict,
        description="Venue category -> base radius in meters (overrides defaults)",
    )
    radius_city_adjustments: dict[str, float] = Field(
        default_factory=dict,
        description="Lowercase city name -> radius multiplier (overrides defaults)",
    )

    # Suggestions and ranking
    recent_contact_days: int = Field(
        default=DEFAULT_RECENT_CONTACT_DAYS,
        ge=0,
        description="Contacts captured within this many days boost priority",
    )
    max_ranked_events: int = Field(
        default=DEFAULT_MAX_RANKED_EVENTS,
        ge=1,
        description="Maximum venues returned by ranking",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("radius_category_overrides")
    @classmethod
    def _validate_category_radii(cls, value: dict[str, int]) -> dict[str, int]:
        for category, radius in value.items():
            if not 0 < radius <= MAX_RADIUS_METERS:
                raise ValueError(
                    f"Radius for {category} must be in (0, {MAX_RADIUS_METERS}]"
                )
        return value

    def __init__(self, config_dir: Path | str | None = None, **data: Any):
        """Initialize settings with auto-loaded configs from all YAML files."""
        config = load_all_configs(
            Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
        )

        super().__init__(**data)
        self._apply_yaml_defaults(config)

    @classmethod
    def defaults(cls) -> "Settings":
        """Settings from in-code defaults only.

        No YAML file, .env file or environment variable is read.
        """
        return cls.model_construct()

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced defaults without overriding env-provided values."""

        fields_from_env = set(self.model_fields_set)

        def _assign(field_name: str, value: Any) -> None:
            if value is None:
                return
            if field_name in fields_from_env:
                return

            object.__setattr__(self, field_name, value)
            self.model_fields_set.add(field_name)

        logging_config = config.get("logging") or {}
        level = logging_config.get("level")
        _assign("log_level", level.upper() if isinstance(level, str) else level)
        _assign("json_logs", logging_config.get("json"))

        clustering_config = config.get("clustering") or {}
        _assign(
            "merge_similarity_threshold",
            clustering_config.get("merge_similarity_threshold"),
        )
        _assign("time_window_days", clustering_config.get("time_window_days"))
        _assign("max_candidate_events", clustering_config.get("max_candidate_events"))

        radius_config = config.get("radius") or {}
        _assign("radius_cache_ttl_seconds", radius_config.get("cache_ttl_seconds"))
        _assign("radius_category_overrides", radius_config.get("category_overrides"))
        _assign("radius_city_adjustments", radius_config.get("city_adjustments"))

        suggestions_config = config.get("suggestions") or {}
        _assign("recent_contact_days", suggestions_config.get("recent_contact_days"))

        ranking_config = config.get("ranking") or {}
        _assign("max_ranked_events", ranking_config.get("max_ranked_events"))
