"""
Conversion between kubernetes client models and plain JSON-compatible data.

The kubernetes client only deserializes HTTP responses, so from_dict() feeds
it an in-memory response carrying the JSON payload.
"""

import json
from typing import Any, Dict

from kubernetes import client

_api_client = client.ApiClient()


class _JSONResponse:
    """Minimal stand-in for a urllib3 response, as ApiClient.deserialize expects."""

    def __init__(self, data: Any):
        self.data = json.dumps(data)


def to_dict(obj: Any) -> Any:
    """Serialize a kubernetes model (or nested models) to JSON-compatible data."""
    return _api_client.sanitize_for_serialization(obj)


def to_json(obj: Any) -> str:
    """Serialize a kubernetes model to a compact, key-sorted JSON string."""
    return json.dumps(to_dict(obj), sort_keys=True, separators=(",", ":"))


def from_dict(data: Dict[str, Any], model_type: str) -> Any:
    """
    Build a kubernetes model from JSON-compatible data.

    Args:
        data: Data in the API's camelCase wire format
        model_type: Client model name, e.g. "V1Deployment"
    """
    # Two-argument form; kubernetes 36 adds a required content_type
    return _api_client.deserialize(_JSONResponse(data), model_type)
