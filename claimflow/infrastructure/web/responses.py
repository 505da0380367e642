"""
Success envelope shared by every router: ``{success: true, data, message?, meta?}``.
"""

from typing import Any, Dict, Optional

from claimflow.application.dto.base_dto import BaseDTO


def _encode(value: Any) -> Any:
    if isinstance(value, BaseDTO):
        return value.to_json_dict()
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


def envelope(
    data: Any = None,
    message: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = _encode(data)
    if message:
        body["message"] = message
    if meta is not None:
        body["meta"] = meta
    return body
