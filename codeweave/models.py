"""Records passed between the orchestrator and the MCP tools."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping

STATUS_PENDING = "pending"
STATUS_INDEXED = "indexed"


@dataclass
class CodeEntity:
    id: str
    type: str
    name: str
    file_path: str = ""
    content: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CodeEntity":
        """Build from tool arguments or a graph row (camelCase keys)."""
        if not data.get("id"):
            raise ValueError("Code entity requires an 'id'")
        return cls(
            id=str(data["id"]),
            type=str(data.get("type") or "unknown"),
            name=str(data.get("name") or ""),
            file_path=str(data.get("filePath") or data.get("file_path") or ""),
            content=str(data.get("content") or ""),
        )


@dataclass
class IndexResult:
    id: str
    name: str
    type: str
    status: str = STATUS_INDEXED

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RetrievalResult:
    query: str
    timestamp: str
    primary: List[Dict[str, Any]] = field(default_factory=list)
    related: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary,
            "related": self.related,
            "query": self.query,
            "timestamp": self.timestamp,
        }


def node_properties(node: Any) -> Dict[str, Any]:
    """Flatten a Neptune node into its property dict.

    Neptune returns nodes as ``{"~id": ..., "~labels": [...],
    "~properties": {...}}``; rows built from plain maps are passed through.
    """
    if not isinstance(node, Mapping):
        return {}
    props = node.get("~properties")
    if isinstance(props, Mapping):
        return dict(props)
    return dict(node)


def node_id(node: Any) -> Any:
    """The entity's ``id`` property, falling back to Neptune's ``~id``."""
    if not isinstance(node, Mapping):
        return None
    return node_properties(node).get("id") or node.get("~id")
