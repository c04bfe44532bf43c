"""
Configuration utilities.
"""

import json
from pathlib import Path
from typing import Literal

import yaml

from pydantic import BaseModel, field_validator


class Config(BaseModel):
    """Base configuration class."""

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from file (YAML or JSON)."""
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        elif path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
            return cls(**data)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


class DeskRagConfig(Config):
    """Configuration for the chat assistant and its retrieval core."""

    # Model service
    ollama_base_url: str = "http://localhost:11434"
    chat_model: str = "llama3"
    embedding_model: str = "nomic-embed-text"
    request_timeout: float = 120.0

    # Chunking
    chunk_strategy: Literal["recursive", "fixed"] = "recursive"
    chunk_unit: Literal["char", "word"] = "char"
    chunk_size: int = 1000
    chunk_overlap: int = 100

    # Retrieval
    top_n: int = 3
    relevance_threshold: float = 0.5
    use_relevance_gate: bool = True
    filter_low_relevance_chunks: bool = False
    report_low_relevance_sources: bool = True

    # Ingestion
    supported_extensions: list[str] = [".txt"]

    log_level: str = "INFO"

    @field_validator("supported_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


def load_config(path: str | Path = "deskrag.yaml") -> DeskRagConfig:
    """
    Load assistant configuration from file.

    Args:
        path: Path to config file

    Returns:
        DeskRagConfig instance
    """
    path = Path(path)

    if not path.exists():
        return DeskRagConfig()

    return DeskRagConfig.from_file(path)
