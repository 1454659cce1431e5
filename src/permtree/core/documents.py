"""
Document loading for permtree.

Reads the JSON documents the engine consumes from disk: the permission
forest, the role's already-granted ids and a menu -> resources mapping.
Failures are returned as ``Err(DocumentError)`` instead of raised, so
callers decide how to surface them.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from .result import Err, Ok, Result
from .types import PermissionIds

logger = logging.getLogger(__name__)


@dataclass
class DocumentError:
    """Structured error for document loading."""
    message: str
    path: str | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message


def read_json_document(path: str | Path) -> Result[Any, DocumentError]:
    """Read and decode a JSON file."""
    doc_path = Path(path)
    if not doc_path.exists():
        return Err(DocumentError(f"File not found: {doc_path}", str(doc_path)))

    logger.debug("Reading document %s", doc_path)
    try:
        return Ok(json.loads(doc_path.read_text(encoding="utf-8")))
    except json.JSONDecodeError as e:
        return Err(DocumentError(f"Invalid JSON in {doc_path}: {e}", str(doc_path), e))
    except OSError as e:
        return Err(DocumentError(f"Cannot read {doc_path}: {e}", str(doc_path), e))


def _unwrap_envelope(data: Any, path: str | Path) -> Result[List[Any], DocumentError]:
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        data = data["data"]
    if not isinstance(data, list):
        return Err(DocumentError(f"{path} must contain a list of root nodes", str(path)))
    return Ok(data)


def load_forest(path: str | Path) -> Result[List[Any], DocumentError]:
    """
    Load a permission forest.

    Accepts either a bare list of root nodes or an object wrapping it under
    ``data`` (the shape of the backend envelope).
    """
    return read_json_document(path).and_then(lambda data: _unwrap_envelope(data, path))


def _parse_role_ids(data: Any, path: str | Path) -> Result[PermissionIds, DocumentError]:
    try:
        return Ok(PermissionIds.model_validate(data))
    except ValidationError as e:
        return Err(DocumentError(f"Invalid role permission ids in {path}: {e}", str(path), e))


def load_role_ids(path: str | Path) -> Result[PermissionIds, DocumentError]:
    """Load a role's granted ids: ``{systemIds, menuIds, resourceIds}``."""
    return read_json_document(path).and_then(lambda data: _parse_role_ids(data, path))


def load_resource_records(path: str | Path) -> Result[Dict[str, List[Any]], DocumentError]:
    """Load a mapping of menu id -> raw resource records. Non-list values are dropped."""

    def _require_mapping(data: Any) -> Result[Any, DocumentError]:
        if not isinstance(data, dict):
            return Err(DocumentError(f"{path} must map menu ids to resource lists", str(path)))
        return Ok(data)

    return (
        read_json_document(path)
        .and_then(_require_mapping)
        .map(lambda data: {str(k): v for k, v in data.items() if isinstance(v, list)})
    )
