"""Amazon Bedrock embedding service (Titan Text Embeddings)."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import boto3

from codeweave.config import BedrockConfig
from codeweave.errors import UPSTREAM_ERRORS, InvalidInputError

logger = logging.getLogger(__name__)

# Titan v2 rejects inputs past this many characters
MAX_INPUT_CHARS = 8000


class BedrockEmbeddingService:
    """Generates normalized, fixed-dimension text embeddings via Bedrock.

    The boto3 client is created once and shared by every call; pass
    ``client`` to inject a preconfigured or mocked one.
    """

    def __init__(
        self,
        config: Optional[BedrockConfig] = None,
        client=None,
        max_workers: int = 8,
    ):
        self.config = config or BedrockConfig()
        self.model_id = self.config.model_id
        self.dimensions = self.config.dimensions
        self.max_workers = max_workers
        self.client = client or boto3.client(
            "bedrock-runtime", region_name=self.config.region
        )
        logger.info(
            "Bedrock embeddings: model=%s dimensions=%d region=%s",
            self.model_id, self.dimensions, self.config.region,
        )

    def generate_embedding(self, text: str) -> List[float]:
        """Embed a single text string. Returns a list of floats.

        Raises:
            InvalidInputError: if text is empty or whitespace-only
        """
        if not text or not text.strip():
            raise InvalidInputError("Text cannot be empty")

        body = {
            "inputText": text[:MAX_INPUT_CHARS],
            "dimensions": self.dimensions,
            "normalize": True,
        }
        try:
            response = self.client.invoke_model(
                modelId=self.model_id,
                body=json.dumps(body),
                contentType="application/json",
                accept="application/json",
            )
        except UPSTREAM_ERRORS as e:
            logger.error("Bedrock embedding error: %s", str(e)[:200])
            raise

        result = json.loads(response["body"].read())
        return result["embedding"]

    def batch_generate(self, texts: List[str]) -> List[List[float]]:
        """Embed several texts concurrently, preserving input order.

        The first failure is raised and the batch is discarded.
        """
        if not texts:
            return []
        workers = min(self.max_workers, len(texts))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.generate_embedding, texts))
