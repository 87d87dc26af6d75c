"""Environment-driven settings for the Neptune graph, Bedrock and retrieval."""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from codeweave.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_EMBEDDING_MODEL = "amazon.titan-embed-text-v2:0"

REQUIRED_VARS = ("NEPTUNE_GRAPH_ID",)


@dataclass(frozen=True)
class NeptuneConfig:
    region: str = DEFAULT_REGION
    graph_id: Optional[str] = None


@dataclass(frozen=True)
class BedrockConfig:
    model_id: str = DEFAULT_EMBEDDING_MODEL
    region: str = DEFAULT_REGION
    dimensions: int = 1024


@dataclass(frozen=True)
class ContextConfig:
    # max_tokens is reserved for truncating retrieved context; nothing reads it yet
    max_tokens: int = 8000
    similarity_threshold: float = 0.7
    max_results: int = 10


@dataclass(frozen=True)
class Settings:
    neptune: NeptuneConfig = field(default_factory=NeptuneConfig)
    bedrock: BedrockConfig = field(default_factory=BedrockConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Raises:
            ConfigurationError: if a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        region = env.get("AWS_REGION", DEFAULT_REGION)

        try:
            return cls(
                neptune=NeptuneConfig(
                    region=region,
                    graph_id=env.get("NEPTUNE_GRAPH_ID") or None,
                ),
                bedrock=BedrockConfig(
                    model_id=env.get("BEDROCK_EMBEDDING_MODEL_ID", DEFAULT_EMBEDDING_MODEL),
                    region=region,
                    dimensions=int(env.get("EMBEDDING_DIMENSIONS", "1024")),
                ),
                context=ContextConfig(
                    max_tokens=int(env.get("CODEWEAVE_MAX_TOKENS", "8000")),
                    similarity_threshold=float(
                        env.get("CODEWEAVE_SIMILARITY_THRESHOLD", "0.7")
                    ),
                    max_results=int(env.get("CODEWEAVE_MAX_RESULTS", "10")),
                ),
                log_level=env.get("LOG_LEVEL", "INFO"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    def validate(self) -> "Settings":
        """Fail fast when a required identifier is missing."""
        missing = []
        if not self.neptune.graph_id:
            missing.append("NEPTUNE_GRAPH_ID")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        logger.debug(
            "Settings: graph=%s region=%s model=%s",
            self.neptune.graph_id, self.neptune.region, self.bedrock.model_id,
        )
        return self


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    return Settings.from_env(environ).validate()
