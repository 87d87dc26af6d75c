"""openCypher templates for the Neptune Analytics context graph.

Every template takes its values as ``$parameters``. The only exception is
the vector passed to the ``neptune.algo.vectors`` procedures, which Neptune
does not accept as a parameter: it is rendered as a numeric literal by
``format_vector`` and nothing else is ever interpolated.
"""

import math
from typing import Iterable, List

MIN_RELATED_WEIGHT = 0.5
MAX_RELATED = 5

# Neptune Analytics manages its own id lookups; engines that reject these
# statements are logged and skipped by NeptuneGraphClient.init_schema.
SCHEMA_QUERIES = [
    "CREATE INDEX IF NOT EXISTS FOR (e:CodeEntity) ON (e.id)",
    "CREATE INDEX IF NOT EXISTS FOR (c:Conversation) ON (c.id)",
]

# ── Code entities ────────────────────────────────────────────────────

# Phase 1 of indexing: attributes, with the embedding marked pending.
UPSERT_CODE_ENTITY = """
MERGE (e:CodeEntity {id: $id})
SET e.type = $type,
    e.name = $name,
    e.filePath = $filePath,
    e.content = $content,
    e.keywords = $keywords,
    e.timestamp = datetime(),
    e.embeddingStatus = 'pending'
RETURN e.id AS id
"""

MARK_EMBEDDING_INDEXED = """
MATCH (e:CodeEntity {id: $id})
SET e.embeddingStatus = 'indexed'
RETURN e.id AS id
"""

FIND_PENDING_ENTITIES = """
MATCH (e:CodeEntity)
WHERE e.embeddingStatus = 'pending'
RETURN e.id AS id, e.type AS type, e.name AS name,
       e.filePath AS filePath, e.content AS content
ORDER BY e.timestamp ASC
LIMIT $limit
"""

COUNT_CODE_ENTITY = """
MATCH (e:CodeEntity {id: $id})
RETURN count(e) AS count
"""

CREATE_RELATIONSHIP = """
MATCH (a:CodeEntity {id: $fromId})
MATCH (b:CodeEntity {id: $toId})
MERGE (a)-[r:RELATES_TO {type: $relType}]->(b)
SET r.weight = $weight
RETURN r.type AS type, r.weight AS weight
"""

# Expansion from one entity: 1-2 hops, every edge heavier than $minWeight,
# one row per target at its shortest distance.
GET_RELATED_CONTEXT = """
MATCH (start:CodeEntity {id: $entityId})
MATCH path = (start)-[:RELATES_TO*1..2]-(related:CodeEntity)
WHERE related <> start
  AND all(rel IN relationships(path) WHERE rel.weight > $minWeight)
WITH related, length(path) AS hops,
     [rel IN relationships(path) | rel.type] AS relTypes
ORDER BY hops ASC
WITH related, collect({distance: hops, relationshipTypes: relTypes})[0] AS nearest
RETURN related,
       nearest.distance AS distance,
       nearest.relationshipTypes AS relationshipTypes
ORDER BY distance ASC, related.timestamp DESC
LIMIT $limit
"""

# ── Conversations ────────────────────────────────────────────────────

CREATE_CONVERSATION = """
CREATE (c:Conversation {
    id: $id,
    startTime: datetime(),
    initialQuery: $initialQuery
})
RETURN c.id AS id
"""

ADD_MESSAGE = """
MATCH (c:Conversation {id: $conversationId})
CREATE (m:Message {
    id: $messageId,
    role: $role,
    content: $content,
    timestamp: datetime()
})
CREATE (c)-[:HAS_MESSAGE]->(m)
RETURN m.id AS id
"""

LINK_CONVERSATION_TO_CODE = """
MATCH (c:Conversation {id: $conversationId})
MATCH (e:CodeEntity {id: $entityId})
MERGE (c)-[r:DISCUSSES]->(e)
SET r.relevance = $relevance
RETURN r.relevance AS relevance
"""

GET_CONVERSATION_HISTORY = """
MATCH (c:Conversation {id: $conversationId})-[:HAS_MESSAGE]->(m:Message)
RETURN m.id AS id, m.role AS role, m.content AS content, m.timestamp AS timestamp
ORDER BY m.timestamp ASC
"""


# ── Vector procedures ────────────────────────────────────────────────


def format_vector(values: Iterable[float]) -> str:
    """Render an embedding as an openCypher list literal.

    Raises:
        ValueError: if any component is not a finite number
    """
    parts: List[str] = []
    for value in values:
        if isinstance(value, bool):
            raise ValueError("Embedding components must be numbers")
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f"Embedding component is not finite: {value!r}")
        parts.append(repr(number))
    if not parts:
        raise ValueError("Embedding is empty")
    return "[" + ", ".join(parts) + "]"


def upsert_embedding_query(embedding: Iterable[float]) -> str:
    """Phase 2 of indexing: attach the vector to an existing node ($id)."""
    return f"""
MATCH (e:CodeEntity {{id: $id}})
CALL neptune.algo.vectors.upsert(e, {format_vector(embedding)})
YIELD node
RETURN node.id AS id
"""


def vector_search_query(embedding: Iterable[float], top_k: int) -> str:
    top_k = int(top_k)
    if top_k < 1:
        raise ValueError("top_k must be at least 1")
    return f"""
CALL neptune.algo.vectors.topK.byEmbedding({{
    embedding: {format_vector(embedding)},
    topK: {top_k}
}})
YIELD node, score
RETURN node AS e, score
"""
