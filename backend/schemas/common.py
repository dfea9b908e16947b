"""
Aether Intel - Common Pydantic Schemas
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; readable from ORM rows."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class WriteModel(CamelModel):
    """Request body; unknown keys are kept in ``model_extra`` so routers can reject them."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def extra_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class ErrorResponse(BaseModel):
    error: str
    code: str


class MessageResponse(BaseModel):
    message: str
    id: Optional[int] = None
