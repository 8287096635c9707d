"""Success envelope helpers"""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel


def dump(value: Any) -> Any:
    """Serialize schemas (and lists of them) with their camelCase aliases"""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [dump(v) for v in value]
    if isinstance(value, dict):
        return {k: dump(v) for k, v in value.items()}
    return jsonable_encoder(value)


def success(data: Any = None, message: Optional[str] = None, **extra) -> dict:
    body = {"success": True}
    if data is not None:
        body["data"] = dump(data)
    if message:
        body["message"] = message
    body.update({k: dump(v) for k, v in extra.items()})
    return body
