"""
Shared fixtures for the CodeWeave test suite

Provides mock clients, sample data, and test utilities for:
- Bedrock embedding calls
- Neptune Analytics query execution
- ContextManager wiring
"""

import os
import sys
import json
import pytest
from unittest.mock import MagicMock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from codeweave.config import BedrockConfig, ContextConfig, NeptuneConfig


EMBEDDING_DIMENSIONS = 8


def make_payload(document):
    """Mimic the StreamingBody returned by neptune-graph execute_query."""
    body = MagicMock()
    body.read.return_value = json.dumps(document).encode("utf-8")
    return {"payload": body}


def make_node(entity_id, name="entity", type_="function", **props):
    """A CodeEntity node in Neptune's ~id/~properties shape."""
    properties = {"id": entity_id, "name": name, "type": type_}
    properties.update(props)
    return {
        "~id": f"internal-{entity_id}",
        "~entityType": "node",
        "~labels": ["CodeEntity"],
        "~properties": properties,
    }


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def bedrock_config():
    return BedrockConfig(
        model_id="amazon.titan-embed-text-v2:0",
        region="us-east-1",
        dimensions=EMBEDDING_DIMENSIONS,
    )


@pytest.fixture
def neptune_config():
    return NeptuneConfig(region="us-east-1", graph_id="g-test123")


@pytest.fixture
def context_config():
    return ContextConfig(max_tokens=8000, similarity_threshold=0.7, max_results=10)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set mock environment variables"""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'test-key-id')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'test-secret-key')
    monkeypatch.setenv('AWS_REGION', 'us-west-2')
    monkeypatch.setenv('NEPTUNE_GRAPH_ID', 'g-test123')


# =============================================================================
# Bedrock Fixtures
# =============================================================================

@pytest.fixture
def mock_bedrock_client():
    """Mock bedrock-runtime client returning a fixed-size embedding"""
    client = MagicMock()

    def invoke_model(**kwargs):
        request = json.loads(kwargs["body"])
        response_body = MagicMock()
        response_body.read.return_value = json.dumps({
            "embedding": [0.125] * request["dimensions"],
            "inputTextTokenCount": 4,
        }).encode()
        return {"body": response_body}

    client.invoke_model.side_effect = invoke_model
    return client


# =============================================================================
# Neptune Fixtures
# =============================================================================

@pytest.fixture
def mock_neptune_client():
    """Mock neptune-graph client returning an empty result set"""
    client = MagicMock()
    client.execute_query.side_effect = lambda **kwargs: make_payload({"results": []})
    return client


@pytest.fixture
def mock_graph():
    """Mock NeptuneGraphClient used by ContextManager"""
    graph = MagicMock()
    graph.execute_query.return_value = {"results": []}
    graph.execute_rows.return_value = []
    return graph


@pytest.fixture
def mock_embeddings():
    service = MagicMock()
    service.generate_embedding.return_value = [0.1] * EMBEDDING_DIMENSIONS
    return service


# =============================================================================
# Sample Data
# =============================================================================

@pytest.fixture
def sample_entity_dict():
    return {
        "id": "payments.refund",
        "type": "function",
        "name": "refund_payment",
        "filePath": "src/payments/refund.py",
        "content": "def refund_payment(order): return gateway.refund(order.charge_id)",
    }
