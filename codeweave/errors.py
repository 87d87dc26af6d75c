"""
Error types shared across the context store.
"""

from botocore.exceptions import BotoCoreError, ClientError

# Failures raised by the Neptune or Bedrock clients. They are logged and
# re-raised unchanged, never wrapped.
UPSTREAM_ERRORS = (ClientError, BotoCoreError)


class CodeWeaveError(Exception):
    """Base class for errors raised by this package."""


class InvalidInputError(CodeWeaveError, ValueError):
    """Raised when text handed to the embedding model is empty."""


class ConfigurationError(CodeWeaveError):
    """Raised at startup when a required setting is missing or malformed."""


class EmbeddingPendingError(CodeWeaveError):
    """Raised when a node was written but its vector upsert failed.

    The node keeps ``embeddingStatus = 'pending'`` until it is re-indexed,
    see ``ContextManager.repair_pending_entities``.
    """

    def __init__(self, entity_id: str, message: str = ""):
        super().__init__(
            message or f"Entity {entity_id} was stored but its embedding is pending"
        )
        self.entity_id = entity_id
