"""
Domain service: best-effort feature vector from a free-text land description.

Only the soil type is read from the text. The numeric fields are typical
values for the growing regions the model was tuned on, with random jitter,
so the result is always a fully populated FeatureVector.
"""
from typing import Optional
import logging
import re

import numpy as np

from crop_advisor.domain.models import FeatureVector, SoilType

logger = logging.getLogger(__name__)

# Checked in order; the first keyword found wins.
SOIL_KEYWORDS: tuple[tuple[str, SoilType], ...] = (
    ("sandy", SoilType.SANDY),
    ("clay", SoilType.CLAY),
    ("red", SoilType.RED),
    ("black", SoilType.BLACK),
    ("alluvial", SoilType.ALLUVIAL),
)
DEFAULT_SOIL_TYPE = SoilType.LOAMY

# (low, high) of the uniform draw for each numeric field
FEATURE_RANGES: dict[str, tuple[float, float]] = {
    "soil_ph": (6.25, 6.75),
    "nitrogen": (70.0, 100.0),
    "phosphorus": (45.0, 65.0),
    "potassium": (40.0, 60.0),
    "temperature": (24.0, 28.0),
    "humidity": (62.5, 77.5),
    "rainfall": (100.0, 140.0),
}


def detect_soil_type(description: str) -> SoilType:
    """Match whole-word soil vocabulary, falling back to Loamy."""
    text = description.lower()
    for keyword, soil_type in SOIL_KEYWORDS:
        if re.search(rf"\b{keyword}\b", text):
            return soil_type
    return DEFAULT_SOIL_TYPE


def extract_features_from_description(
    description: str,
    region: str,
    rng: Optional[np.random.Generator] = None,
) -> FeatureVector:
    """
    Map a land description to a FeatureVector.

    Args:
        description: Free text such as "black cotton soil, moderate rain"
        region: Region or state name (recorded in logs only)
        rng: Random source for the numeric jitter

    Returns:
        FeatureVector with every field populated
    """
    rng = rng if rng is not None else np.random.default_rng()
    soil_type = detect_soil_type(description)

    fields = {
        name: float(rng.uniform(low, high))
        for name, (low, high) in FEATURE_RANGES.items()
    }
    logger.debug(f"Extracted soil type {soil_type.value} from description (region={region!r})")
    return FeatureVector.parse({**fields, "soil_type": soil_type})
