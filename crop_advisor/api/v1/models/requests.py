"""
API request models using Pydantic.
"""
from pydantic import BaseModel, Field


class DescriptionRequest(BaseModel):
    """Free-text land description to rank crops for."""
    description: str = Field(
        min_length=1,
        description="Land description, e.g. 'black cotton soil with moderate rainfall'",
        examples=["Loamy soil with good water retention, high rainfall area"]
    )
    region: str = Field(
        default="",
        description="Region or state the field is in",
        examples=["Odisha"]
    )
