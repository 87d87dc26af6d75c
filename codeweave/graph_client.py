"""Neptune Analytics graph client executing openCypher over boto3."""

import json
import logging
from typing import Any, Dict, List, Optional

import boto3

from codeweave.config import NeptuneConfig
from codeweave.errors import UPSTREAM_ERRORS, ConfigurationError
from codeweave.queries import SCHEMA_QUERIES

logger = logging.getLogger(__name__)

QUERY_LANGUAGE = "OPEN_CYPHER"


def _preview(text: str, length: int = 100) -> str:
    return " ".join(text.split())[:length]


class NeptuneGraphClient:
    """Wraps the ``neptune-graph`` boto3 client for a single graph."""

    def __init__(self, config: Optional[NeptuneConfig] = None, client=None):
        self.config = config or NeptuneConfig()
        if not self.config.graph_id:
            raise ConfigurationError("NEPTUNE_GRAPH_ID is not set")
        self.graph_id = self.config.graph_id
        self.client = client or boto3.client(
            "neptune-graph", region_name=self.config.region
        )
        logger.info(
            "Neptune Analytics graph %s (%s)", self.graph_id, self.config.region
        )

    def execute_query(
        self, query: str, parameters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Execute an openCypher query and return the decoded JSON document.

        The document has a ``results`` list with one dict per row, keyed by
        the query's RETURN aliases. Service errors are re-raised unchanged.
        """
        request: Dict[str, Any] = {
            "graphIdentifier": self.graph_id,
            "queryString": query,
            "language": QUERY_LANGUAGE,
        }
        logger.debug("Executing query: %s", _preview(query))
        if parameters:
            request["parameters"] = parameters
            logger.debug("With parameters: %s", _preview(json.dumps(parameters, default=str)))

        try:
            response = self.client.execute_query(**request)
            payload = response["payload"].read()
        except UPSTREAM_ERRORS as e:
            logger.error("Neptune query error: %s", str(e)[:200])
            raise

        return json.loads(payload.decode("utf-8"))

    def execute_rows(
        self, query: str, parameters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute a query and return just its result rows."""
        return self.execute_query(query, parameters).get("results") or []

    def init_schema(self):
        """Create the id lookups; statements the engine rejects are skipped."""
        for query in SCHEMA_QUERIES:
            try:
                self.execute_query(query)
            except UPSTREAM_ERRORS as e:
                logger.warning("Schema query skipped (may be unsupported): %s", e)
        logger.info("Graph schema initialized")
