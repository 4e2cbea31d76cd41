"""Shared Pydantic models and the camelCase JSON convention."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated by either form."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SpiceParameters(CamelModel):
    """Spice profile of a shop or a user's preference, each on a 0-100 scale."""
    spiciness: int = Field(50, ge=0, le=100)
    stimulation: int = Field(50, ge=0, le=100)
    aroma: int = Field(50, ge=0, le=100)


class ErrorDetail(BaseModel):
    """Error details model."""
    code: str
    message: str
    details: dict = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Error response model."""
    error: ErrorDetail
