"""MCP server exposing conversation context tools backed by Neptune and Bedrock."""

import functools
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from codeweave.config import load_settings
from codeweave.errors import ConfigurationError
from codeweave.models import CodeEntity, node_id, node_properties
from codeweave.text_utils import generate_id, truncate_text

load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

mcp = FastMCP("codeweave")

DEPTH_LIMITS = {"minimal": 5, "standard": 10, "comprehensive": 15}
LINKED_RESULTS = 3
CONTENT_PREVIEW_CHARS = 500

# Lazy-initialized singleton
_manager = None


def _get_manager():
    global _manager
    if _manager is None:
        from codeweave.context_manager import ContextManager
        _manager = ContextManager.from_settings(load_settings())
        _manager.init_schema()
        logger.info("ContextManager initialized")
    return _manager


def _to_json(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, default=str)


def _log_failures(func):
    """Log a failed tool call; FastMCP turns the raised error into an isError result."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error("Tool %s failed: %s", func.__name__, str(e)[:200])
            raise

    return wrapper


def context_limit(depth: Optional[str]) -> int:
    """Map a contextDepth name to a primary-result limit."""
    return DEPTH_LIMITS.get(depth or "standard", DEPTH_LIMITS["standard"])


def _score(row: Dict[str, Any]) -> float:
    return row.get("finalScore") or row.get("score") or 0


def _shape_primary(row: Dict[str, Any]) -> Dict[str, Any]:
    entity = row.get("e") or row.get("node") or {}
    props = node_properties(entity)
    content = props.get("content")
    return {
        "id": node_id(entity) or "unknown",
        "name": props.get("name") or "unnamed",
        "type": props.get("type") or "unknown",
        "filePath": props.get("filePath") or "",
        "score": _score(row),
        "content": truncate_text(content, CONTENT_PREVIEW_CHARS) if content else "No content",
    }


def _shape_related(row: Dict[str, Any]) -> Dict[str, Any]:
    entity = row.get("related") or row.get("node") or {}
    props = node_properties(entity)
    return {
        "id": node_id(entity) or "unknown",
        "name": props.get("name") or "unnamed",
        "type": props.get("type") or "unknown",
        "distance": row.get("distance") or 0,
    }


@mcp.tool()
@_log_failures
def initialize_conversation_context(
    initialQuery: str, contextDepth: Optional[str] = "standard"
) -> str:
    """Initialize a new conversation with project context.

    Args:
        initialQuery: The initial question or task
        contextDepth: How much context to retrieve: minimal, standard or comprehensive

    Returns:
        JSON with conversationId, context, relatedEntities and a summary message
    """
    manager = _get_manager()
    conversation_id = generate_id("conv")
    manager.create_conversation(conversation_id, initialQuery)

    context = manager.retrieve_relevant_context(
        initialQuery, limit=context_limit(contextDepth)
    )
    return _to_json({
        "conversationId": conversation_id,
        "context": context.primary,
        "relatedEntities": context.related,
        "message": (
            f"Initialized conversation with {len(context.primary)} "
            "relevant code entities"
        ),
    })


@mcp.tool()
@_log_failures
def update_conversation_context(
    conversationId: str,
    codeChanges: Optional[List[Dict[str, Any]]] = None,
    newMessages: Optional[List[Dict[str, Any]]] = None,
) -> str:
    """Update context with new code changes and conversation messages.

    Args:
        conversationId: Conversation ID from initialization
        codeChanges: Code entities that changed (id, type, name, filePath, content)
        newMessages: New conversation messages (role, content)

    Returns:
        JSON with the number of indexed entities and added messages
    """
    manager = _get_manager()
    code_changes = codeChanges or []
    new_messages = newMessages or []

    indexed = []
    for change in code_changes:
        result = manager.index_code_entity(CodeEntity.from_dict(change))
        indexed.append(result.id)

    for message in new_messages:
        manager.add_message(
            conversationId,
            generate_id("msg"),
            message.get("role", "user"),
            message.get("content", ""),
        )

    return _to_json({
        "conversationId": conversationId,
        "indexedEntities": len(indexed),
        "messagesAdded": len(new_messages),
        "message": "Context updated successfully",
    })


@mcp.tool()
@_log_failures
def retrieve_relevant_context(
    query: str,
    conversationId: Optional[str] = None,
    includeRelated: bool = True,
) -> str:
    """Retrieve relevant code context for a query.

    Args:
        query: What to search for
        conversationId: Conversation to link the top results to (optional)
        includeRelated: Include related code reached through the graph

    Returns:
        JSON with ranked results and graph-related entities
    """
    manager = _get_manager()
    context = manager.retrieve_relevant_context(query, include_related=includeRelated)

    if conversationId and context.primary:
        for row in context.primary[:LINKED_RESULTS]:
            entity_id = node_id(row.get("e"))
            if not entity_id:
                continue
            try:
                manager.link_conversation_to_code(conversationId, entity_id, _score(row))
            except Exception as e:
                # A missing conversation must not hide valid results
                logger.warning("Could not link to conversation: %s", e)

    return _to_json({
        "conversationId": conversationId or "none",
        "query": query,
        "results": [_shape_primary(row) for row in context.primary],
        "related": [_shape_related(row) for row in context.related],
    })


def main():
    try:
        _get_manager()
    except ConfigurationError as e:
        logger.error("Failed to start CodeWeave: %s", e)
        sys.exit(1)
    logger.info("CodeWeave MCP server starting on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
