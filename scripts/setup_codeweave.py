#!/usr/bin/env python3
"""Setup and connection check for the CodeWeave context graph.

Run after creating the Neptune Analytics graph and enabling Bedrock access:
    python scripts/setup_codeweave.py
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

import logging

from codeweave.config import load_settings
from codeweave.errors import UPSTREAM_ERRORS, ConfigurationError

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

SMOKE_ENTITY_ID = "codeweave-smoke-test"


def check_configuration():
    """Validate required environment variables."""
    logger.info("Checking configuration...")
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error("  %s", e)
        logger.error("  Set NEPTUNE_GRAPH_ID (and optionally AWS_REGION) in .env")
        sys.exit(1)
    logger.info("  Graph ID: %s", settings.neptune.graph_id)
    logger.info("  Region:   %s", settings.neptune.region)
    logger.info("  Model:    %s", settings.bedrock.model_id)
    return settings


def check_neptune_connection(settings):
    """Verify the Neptune Analytics graph accepts queries."""
    logger.info("Checking Neptune connection...")
    from codeweave.graph_client import NeptuneGraphClient

    client = NeptuneGraphClient(settings.neptune)
    try:
        rows = client.execute_rows("RETURN 1 AS ok")
        assert rows and rows[0]["ok"] == 1
        logger.info("  Neptune connection OK")
        return client
    except UPSTREAM_ERRORS as e:
        logger.error("  Failed to query Neptune: %s", e)
        logger.error("  Check AWS credentials and neptune-graph IAM permissions")
        sys.exit(1)


def check_bedrock_embeddings(settings):
    """Verify the embedding model answers with the configured dimension."""
    logger.info("Checking Bedrock embeddings...")
    from codeweave.embeddings import BedrockEmbeddingService

    service = BedrockEmbeddingService(settings.bedrock)
    try:
        embedding = service.generate_embedding("test")
    except UPSTREAM_ERRORS as e:
        logger.error("  Failed to call Bedrock: %s", e)
        logger.error("  Make sure model access is enabled for %s", settings.bedrock.model_id)
        sys.exit(1)

    if len(embedding) != settings.bedrock.dimensions:
        logger.warning(
            "  Expected %d dimensions, got %d", settings.bedrock.dimensions, len(embedding)
        )
    else:
        logger.info("  Bedrock embeddings OK (dimension: %d)", len(embedding))
    return service


def smoke_test(client, service, settings):
    """Index a test entity, find it by vector search, then remove it."""
    logger.info("Running smoke test...")
    from codeweave.context_manager import ContextManager
    from codeweave.models import CodeEntity, node_id

    manager = ContextManager(client, service, settings.context)
    manager.init_schema()
    manager.index_code_entity(CodeEntity(
        id=SMOKE_ENTITY_ID,
        type="function",
        name="smoke_test",
        file_path="scripts/setup_codeweave.py",
        content="Smoke test entity for validating vector search.",
    ))

    context = manager.retrieve_relevant_context(
        "smoke test vector search", limit=3, include_related=False
    )
    ids = [node_id(row.get("e")) for row in context.primary]
    if SMOKE_ENTITY_ID in ids:
        logger.info("  Vector search returned the smoke entity - OK")
    else:
        logger.warning("  Smoke entity not in results (index may be populating)")

    client.execute_query(
        "MATCH (e:CodeEntity {id: $id}) DETACH DELETE e", {"id": SMOKE_ENTITY_ID}
    )
    logger.info("  Smoke test cleaned up")


def print_summary():
    """Print MCP client configuration."""
    logger.info("")
    logger.info("MCP server command:")
    logger.info("  python -m codeweave.mcp_server")
    logger.info("")
    logger.info("Add to your MCP client settings:")
    logger.info('  "mcpServers": {')
    logger.info('    "codeweave": {')
    logger.info('      "command": "codeweave",')
    logger.info('      "env": {"NEPTUNE_GRAPH_ID": "<graph id>", "AWS_REGION": "<region>"}')
    logger.info("    }")
    logger.info("  }")


def main():
    logger.info("Setting up CodeWeave context graph")
    logger.info("=" * 40)

    settings = check_configuration()
    client = check_neptune_connection(settings)
    service = check_bedrock_embeddings(settings)
    smoke_test(client, service, settings)

    print_summary()
    logger.info("Setup complete.")


if __name__ == "__main__":
    main()
