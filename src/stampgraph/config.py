"""
Configuration for stampgraph.

Settings come from `.stampgraph/config.yaml` when present, then environment
variables override individual values. A missing file means defaults.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".stampgraph/config.yaml")

ENV_API_URL = "STAMPGRAPH_API_URL"
ENV_API_TIMEOUT = "STAMPGRAPH_API_TIMEOUT"
ENV_LOG_LEVEL = "STAMPGRAPH_LOG_LEVEL"
ENV_RESOLUTION_TIMEOUT = "STAMPGRAPH_RESOLUTION_TIMEOUT"


class ApiConfig(BaseModel):
    base_url: str = "https://stampchain.io/api/v2"
    timeout: float = Field(default=30.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AnalysisConfig(BaseModel):
    max_depth: int = Field(default=3, ge=1, le=10)
    graph_max_depth: int = Field(default=5, ge=1, le=10)
    # Seconds allowed for one full dependency resolution; None is unbounded
    resolution_timeout: Optional[float] = Field(default=None, gt=0)


class StampgraphConfig(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Dict[str, Any]]:
    overrides: Dict[str, Dict[str, Any]] = {}
    if env.get(ENV_API_URL):
        overrides.setdefault("api", {})["base_url"] = env[ENV_API_URL]
    if env.get(ENV_API_TIMEOUT):
        overrides.setdefault("api", {})["timeout"] = env[ENV_API_TIMEOUT]
    if env.get(ENV_LOG_LEVEL):
        overrides.setdefault("logging", {})["level"] = env[ENV_LOG_LEVEL]
    if env.get(ENV_RESOLUTION_TIMEOUT):
        overrides.setdefault("analysis", {})["resolution_timeout"] = env[ENV_RESOLUTION_TIMEOUT]
    return overrides


def load_config(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> StampgraphConfig:
    """
    Load configuration from YAML and the environment.

    Raises:
        pydantic.ValidationError: If a value is out of range or malformed.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the file or one of its sections is not a mapping.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    env = os.environ if env is None else env

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.debug(f"Loaded configuration from {config_path}")
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(data).__name__}")

    for section, values in _env_overrides(env).items():
        current = data.get(section) or {}
        if not isinstance(current, dict):
            raise ValueError(f"Config section '{section}' must be a mapping")
        merged = dict(current)
        merged.update(values)
        data[section] = merged

    return StampgraphConfig.model_validate(data)
