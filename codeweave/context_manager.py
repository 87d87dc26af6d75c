"""High-level context manager orchestrating embedding, storage and retrieval."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from codeweave import queries
from codeweave.config import ContextConfig, Settings
from codeweave.embeddings import BedrockEmbeddingService
from codeweave.errors import EmbeddingPendingError
from codeweave.graph_client import NeptuneGraphClient
from codeweave.models import (
    STATUS_INDEXED,
    CodeEntity,
    IndexResult,
    RetrievalResult,
    node_id,
)
from codeweave.text_utils import extract_keywords

logger = logging.getLogger(__name__)


class ContextManager:
    """Composes the embedding service and the graph client into context operations.

    Both handles are created once by the caller and shared by every tool call.
    """

    def __init__(
        self,
        graph_client: NeptuneGraphClient,
        embedding_service: BedrockEmbeddingService,
        config: Optional[ContextConfig] = None,
    ):
        self.graph = graph_client
        self.embeddings = embedding_service
        self.config = config or ContextConfig()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContextManager":
        return cls(
            graph_client=NeptuneGraphClient(settings.neptune),
            embedding_service=BedrockEmbeddingService(settings.bedrock),
            config=settings.context,
        )

    def init_schema(self):
        """Initialize the graph schema and indexes."""
        self.graph.init_schema()

    # ── Index ────────────────────────────────────────────────────────

    def index_code_entity(self, entity: CodeEntity) -> IndexResult:
        """Upsert a code entity and its embedding.

        Runs as two writes: attributes (status ``pending``), then the vector
        (status ``indexed``). When the second write fails the node stays
        pending and EmbeddingPendingError is raised.
        """
        embedding = self.embeddings.generate_embedding(
            f"{entity.name} {entity.type} {entity.content}"
        )
        keywords = extract_keywords(entity.content)

        self.graph.execute_query(queries.UPSERT_CODE_ENTITY, {
            "id": entity.id,
            "type": entity.type,
            "name": entity.name,
            "filePath": entity.file_path,
            "content": entity.content,
            "keywords": ",".join(keywords),
        })

        try:
            self.graph.execute_query(
                queries.upsert_embedding_query(embedding), {"id": entity.id}
            )
            self.graph.execute_query(queries.MARK_EMBEDDING_INDEXED, {"id": entity.id})
        except Exception as e:
            logger.error("Embedding upsert failed for %s: %s", entity.id, str(e)[:200])
            raise EmbeddingPendingError(entity.id) from e

        logger.info("Indexed %s %s (%s)", entity.type, entity.name, entity.id)
        return IndexResult(
            id=entity.id, name=entity.name, type=entity.type, status=STATUS_INDEXED
        )

    def find_pending_entities(self, limit: int = 50) -> List[CodeEntity]:
        """Entities whose attributes were written but whose vector was not."""
        rows = self.graph.execute_rows(queries.FIND_PENDING_ENTITIES, {"limit": limit})
        return [CodeEntity.from_dict(row) for row in rows if row.get("id")]

    def repair_pending_entities(self, limit: int = 50) -> List[str]:
        """Re-index pending entities from their stored attributes."""
        repaired = []
        for entity in self.find_pending_entities(limit):
            self.index_code_entity(entity)
            repaired.append(entity.id)
        if repaired:
            logger.info("Repaired %d pending entities", len(repaired))
        return repaired

    def count_code_entities(self, entity_id: str) -> int:
        rows = self.graph.execute_rows(queries.COUNT_CODE_ENTITY, {"id": entity_id})
        return int(rows[0].get("count", 0)) if rows else 0

    def create_relationship(
        self, from_id: str, to_id: str, rel_type: str, weight: float = 1.0
    ) -> int:
        """Upsert a weighted RELATES_TO edge; returns the number of edges written.

        A missing endpoint is not an error: nothing is written and 0 is returned.
        """
        rows = self.graph.execute_rows(queries.CREATE_RELATIONSHIP, {
            "fromId": from_id,
            "toId": to_id,
            "relType": rel_type,
            "weight": float(weight),
        })
        if not rows:
            logger.warning(
                "No %s edge written: %s or %s does not exist", rel_type, from_id, to_id
            )
        return len(rows)

    # ── Retrieve ─────────────────────────────────────────────────────

    def retrieve_relevant_context(
        self,
        query: str,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
        include_related: bool = True,
    ) -> RetrievalResult:
        """Vector search over code entities with optional graph expansion.

        Args:
            query: Natural language query
            limit: Number of nearest neighbours, defaults to config.max_results
            threshold: Minimum similarity score; only applied when given
            include_related: Expand 1-2 hops from the best match

        Returns:
            RetrievalResult with raw ``primary`` rows (``e``, ``score``) and
            ``related`` rows (``related``, ``distance``, ``relationshipTypes``)
        """
        top_k = limit or self.config.max_results
        query_embedding = self.embeddings.generate_embedding(query)

        primary = self.graph.execute_rows(
            queries.vector_search_query(query_embedding, top_k)
        )
        if threshold is not None:
            primary = [row for row in primary if (row.get("score") or 0) >= threshold]

        related: List[Dict[str, Any]] = []
        if include_related and primary:
            top_id = node_id(primary[0].get("e"))
            if top_id:
                related = self.graph.execute_rows(queries.GET_RELATED_CONTEXT, {
                    "entityId": top_id,
                    "minWeight": queries.MIN_RELATED_WEIGHT,
                    "limit": queries.MAX_RELATED,
                })

        return RetrievalResult(
            query=query,
            timestamp=datetime.now(timezone.utc).isoformat(),
            primary=primary,
            related=related,
        )

    # ── Conversations ────────────────────────────────────────────────

    def create_conversation(self, conversation_id: str, initial_query: str) -> Dict[str, Any]:
        return self.graph.execute_query(queries.CREATE_CONVERSATION, {
            "id": conversation_id,
            "initialQuery": initial_query,
        })

    def add_message(
        self, conversation_id: str, message_id: str, role: str, content: str
    ) -> Dict[str, Any]:
        return self.graph.execute_query(queries.ADD_MESSAGE, {
            "conversationId": conversation_id,
            "messageId": message_id,
            "role": role,
            "content": content,
        })

    def link_conversation_to_code(
        self, conversation_id: str, entity_id: str, relevance: float
    ) -> Dict[str, Any]:
        return self.graph.execute_query(queries.LINK_CONVERSATION_TO_CODE, {
            "conversationId": conversation_id,
            "entityId": entity_id,
            "relevance": float(relevance),
        })

    def get_conversation_history(self, conversation_id: str) -> List[Dict[str, Any]]:
        """Messages of a conversation in chronological order."""
        return self.graph.execute_rows(
            queries.GET_CONVERSATION_HISTORY, {"conversationId": conversation_id}
        )
