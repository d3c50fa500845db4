"""
Display metadata for the crops the classifier knows about.

Centralizing these values keeps the API responses and the training corpus
agreeing on the set of crop keys.
"""
from typing import Optional

from pydantic import BaseModel

from crop_advisor.domain.models import SoilType


class CropProfile(BaseModel):
    """Human-facing description of a crop class."""
    key: str
    label: str
    seasons: list[str]
    duration: str
    preferred_soils: list[SoilType]


CROP_PROFILES: dict[str, CropProfile] = {
    profile.key: profile
    for profile in [
        CropProfile(
            key="rice",
            label="Rice (Paddy)",
            seasons=["Kharif", "Rabi"],
            duration="120-150 days",
            preferred_soils=[SoilType.LOAMY, SoilType.CLAY, SoilType.ALLUVIAL],
        ),
        CropProfile(
            key="wheat",
            label="Wheat",
            seasons=["Rabi"],
            duration="110-130 days",
            preferred_soils=[SoilType.LOAMY, SoilType.BLACK, SoilType.ALLUVIAL],
        ),
        CropProfile(
            key="maize",
            label="Maize (Corn)",
            seasons=["Kharif", "Rabi"],
            duration="80-110 days",
            preferred_soils=[SoilType.LOAMY, SoilType.SANDY, SoilType.BLACK],
        ),
        CropProfile(
            key="cotton",
            label="Cotton",
            seasons=["Kharif"],
            duration="180-210 days",
            preferred_soils=[SoilType.BLACK, SoilType.RED, SoilType.ALLUVIAL],
        ),
        CropProfile(
            key="sugarcane",
            label="Sugarcane",
            seasons=["Year-round"],
            duration="300-365 days",
            preferred_soils=[SoilType.LOAMY, SoilType.BLACK, SoilType.ALLUVIAL],
        ),
        CropProfile(
            key="pulses",
            label="Pulses (Lentils, Gram)",
            seasons=["Rabi", "Kharif"],
            duration="90-120 days",
            preferred_soils=[SoilType.RED, SoilType.BLACK, SoilType.LOAMY],
        ),
        CropProfile(
            key="vegetables",
            label="Vegetables",
            seasons=["Year-round"],
            duration="60-120 days",
            preferred_soils=[SoilType.LOAMY, SoilType.SANDY, SoilType.ALLUVIAL],
        ),
        CropProfile(
            key="oilseeds",
            label="Oilseeds (Groundnut, Mustard)",
            seasons=["Kharif", "Rabi"],
            duration="100-140 days",
            preferred_soils=[SoilType.SANDY, SoilType.RED, SoilType.LOAMY],
        ),
    ]
}


def get_crop_profile(crop: str) -> Optional[CropProfile]:
    return CROP_PROFILES.get(crop)
