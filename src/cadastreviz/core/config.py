"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """LLM provider configuration for the remote extractor."""

    model_config = {"env_prefix": "CADASTREVIZ_LLM_"}

    provider: str = "ollama"
    base_url: str = "http://localhost:11434"
    model: str = "llama3.1:8b"
    api_key: str | None = None
    timeout_seconds: int = 60
    max_retries: int = 1
    max_tokens: int = 2048
    top_p: float | None = None


class GeoApiConfig(BaseSettings):
    """Commune geocoding service (geo.api.gouv.fr)."""

    model_config = {"env_prefix": "CADASTREVIZ_GEOAPI_"}

    base_url: str = "https://geo.api.gouv.fr"
    timeout_seconds: int = 20


class CadastreConfig(BaseSettings):
    """Parcel geometry service (IGN API Carto cadastre module)."""

    model_config = {"env_prefix": "CADASTREVIZ_CADASTRE_"}

    provider: str = "api"
    base_url: str = "https://apicarto.ign.fr/api/cadastre"
    timeout_seconds: int = 20


class ExtractionConfig(BaseSettings):
    """Default extraction strategy when a caller does not pick one."""

    model_config = {"env_prefix": "CADASTREVIZ_EXTRACTION_"}

    strategy: str = "pattern"


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "CADASTREVIZ_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    llm: LLMConfig = Field(default_factory=LLMConfig)
    geoapi: GeoApiConfig = Field(default_factory=GeoApiConfig)
    cadastre: CadastreConfig = Field(default_factory=CadastreConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
