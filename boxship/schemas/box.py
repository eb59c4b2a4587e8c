# ==== BOX ENDPOINT SCHEMAS ==== #

"""
Pydantic schemas for the box endpoints of Boxship.

Request fields are loosely typed on purpose: field rules live in the
shipping engine so every problem is reported at once.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ==== REQUEST SCHEMAS ==== #


class BoxCreateRequest(BaseModel):
    """Box form submission; any JSON value is accepted per field."""

    receiver_name: Any = ""
    weight: Any = 0
    box_color: Any = ""
    destination_country: Any = ""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "receiver_name": "Alice",
                "weight": 2.5,
                "box_color": "255,0,0",
                "destination_country": "SWEDEN"
            }
        }
    )


# ==== RESPONSE SCHEMAS ==== #


class CountryResponse(BaseModel):
    """Destination option offered by the form."""

    code: str
    name: str
    multiplier: float


class QuoteResponse(BaseModel):
    """Estimated shipping cost for a weight and destination."""

    destination_country: str
    country_name: str
    weight: float
    multiplier: float
    shipping_cost: float
    shipping_cost_display: str


class BoxResponse(BaseModel):
    """Stored box with display fields."""

    id: str
    receiver_name: str
    weight: float
    box_color: str
    color_rgb: Tuple[int, int, int]
    color_hex: str
    destination_country: str
    country_name: str
    shipping_cost: float
    shipping_cost_display: str
    created_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "6f1c2b2e-8a8d-4a57-9d0e-1d5f0b0f4a11",
                "receiver_name": "Alice",
                "weight": 2.5,
                "box_color": "255,0,0",
                "color_rgb": [255, 0, 0],
                "color_hex": "#ff0000",
                "destination_country": "SWEDEN",
                "country_name": "Sweden",
                "shipping_cost": 18.375,
                "shipping_cost_display": "₹18.38",
                "created_at": "2025-08-16T10:00:00Z"
            }
        }
    )


class BoxListResponse(BaseModel):
    """Boxes newest first with the running total."""

    items: List[BoxResponse]
    count: int
    total_cost: float
    total_cost_display: str


class ValidationErrorResponse(BaseModel):
    """Field errors of a rejected submission."""

    message: str = "Validation failed"
    errors: Dict[str, str] = Field(default_factory=dict)
    weight: Optional[float] = 0.0
