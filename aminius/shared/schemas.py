"""Base pydantic models shared by every domain"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Request/response model exchanged with the frontend in camelCase.

    Fields are declared snake_case; the alias generator maps them to the
    camelCase wire names. Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CamelRequest(CamelModel):
    """Incoming payload: empty strings are treated as absent values"""

    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: (None if isinstance(v, str) and not v.strip() else v) for k, v in data.items()
            }
        return data

    def provided(self) -> dict:
        """Fields the client actually sent (partial updates), keyed by attribute name"""
        return self.model_dump(exclude_unset=True)
