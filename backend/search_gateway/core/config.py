"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

ENV_PREFIX = "SGW_"
DEFAULT_CONFIG_PATH = Path("~/.config/search-gateway/config.yaml")

# Unprefixed variables accepted for existing deployments.
_LEGACY_ENV: Mapping[str, str] = {
    "ELASTIC_URL": "elastic_url",
    "PORT": "port",
}

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("elastic", "url"): "elastic_url",
    ("elastic", "api_key"): "elastic_api_key",
    ("elastic", "username"): "elastic_username",
    ("elastic", "password"): "elastic_password",
    ("elastic", "verify_certs"): "elastic_verify_certs",
    ("elastic", "request_timeout"): "elastic_request_timeout",
    ("elastic", "index"): "index_name",
    ("search", "tenant_field"): "tenant_field",
    ("search", "vector_field"): "vector_field",
    ("search", "lexical_fields"): "lexical_fields",
    ("search", "default_tenant"): "default_tenant",
    ("search", "size"): "single_mode_size",
    ("search", "num_candidates"): "single_mode_num_candidates",
    ("hybrid", "fetch_size"): "hybrid_fetch_size",
    ("hybrid", "num_candidates"): "hybrid_num_candidates",
    ("hybrid", "top_k"): "hybrid_top_k",
    ("hybrid", "alpha"): "default_alpha",
    ("hybrid", "anchor_score_bounds"): "anchor_score_bounds",
    ("embeddings", "backend"): "embedding_backend",
    ("embeddings", "dim"): "embedding_dim",
    ("server", "host"): "host",
    ("server", "port"): "port",
    ("server", "cors_origins"): "cors_origins",
    ("server", "log_level"): "log_level",
    ("server", "log_json"): "log_json",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    elastic_url: str = "http://localhost:9200"
    elastic_api_key: str | None = None
    elastic_username: str | None = None
    elastic_password: str | None = None
    elastic_verify_certs: bool = True
    elastic_request_timeout: float = 10.0
    index_name: str = "demo-rag-kb"

    tenant_field: str = "tenant_id"
    vector_field: str = "embedding"
    lexical_fields: list[str] = Field(default_factory=lambda: ["title^2", "body"])
    default_tenant: str = "demo"

    single_mode_size: int = Field(default=5, ge=1)
    single_mode_num_candidates: int = Field(default=10, ge=1)
    hybrid_fetch_size: int = Field(default=10, ge=1)
    hybrid_num_candidates: int = Field(default=20, ge=1)
    hybrid_top_k: int = Field(default=5, ge=1)
    default_alpha: float = 0.5
    anchor_score_bounds: bool = False

    embedding_backend: Literal["lookup", "hashed"] = "lookup"
    embedding_dim: int = Field(default=4, ge=1)

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("lexical_fields", "cors_origins", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("elastic_url", mode="before")
    @classmethod
    def _strip_url(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.rstrip("/")
        return value

    @model_validator(mode="after")
    def _check_candidate_pools(self) -> "Settings":
        if self.single_mode_num_candidates < self.single_mode_size:
            raise ValueError("single_mode_num_candidates must be >= single_mode_size")
        if self.hybrid_num_candidates < self.hybrid_fetch_size:
            raise ValueError("hybrid_num_candidates must be >= hybrid_fetch_size")
        return self

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with SGW_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for env_key, field_name in _LEGACY_ENV.items():
        value = os.environ.get(env_key)
        if value:
            overrides[field_name] = value
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
