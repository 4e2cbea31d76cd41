"""Shop models."""

from typing import Optional

from pydantic import Field

from .common import CamelModel, SpiceParameters


class Shop(CamelModel):
    """A curry shop listed in the directory."""
    id: str
    name: str = Field(..., min_length=1)
    address: str
    phone: Optional[str] = None
    latitude: float = Field(0.0, ge=-90, le=90)
    longitude: float = Field(0.0, ge=-180, le=180)
    region: str = ""
    spice_parameters: SpiceParameters = Field(default_factory=SpiceParameters)
    rating: float = Field(0.0, ge=0, le=5)
    description: Optional[str] = None
    image_url: Optional[str] = None


class ScoredShop(Shop):
    """A shop with its match score against one user's spice preferences."""
    match_score: Optional[int] = Field(None, ge=0, le=100)
