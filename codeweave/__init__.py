"""
CodeWeave: conversation context retrieval over a Neptune Analytics graph.

Code entities and conversations live in a graph with a vector index; Bedrock
embeddings drive similarity search, and weighted relationships drive graph
expansion around the best match.
"""

from codeweave.embeddings import BedrockEmbeddingService
from codeweave.graph_client import NeptuneGraphClient
from codeweave.context_manager import ContextManager
from codeweave.text_utils import extract_keywords

__all__ = [
    "BedrockEmbeddingService",
    "NeptuneGraphClient",
    "ContextManager",
    "extract_keywords",
]
