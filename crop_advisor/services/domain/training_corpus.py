"""
Domain service: synthetic training corpus for the crop classifier.

Each crop class has a hand-tuned centroid in the seven numeric feature
dimensions. Samples are drawn around it with uniform noise of a fixed
half-width per feature; the soil type is drawn independently of the class.
"""
from collections import defaultdict
from typing import Optional, Sequence
import logging

import numpy as np

from crop_advisor.domain.models import (
    NUMERIC_FEATURES,
    CropSummary,
    FeatureVector,
    LabeledSample,
    SoilType,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES_PER_CROP = 50

# (soil_ph, nitrogen, phosphorus, potassium, temperature, humidity, rainfall)
CROP_CENTROIDS: dict[str, tuple[float, ...]] = {
    "rice": (6.5, 80, 40, 40, 25, 80, 150),
    "wheat": (6.8, 100, 50, 30, 22, 60, 80),
    "cotton": (6.5, 120, 60, 50, 28, 65, 100),
    "sugarcane": (6.5, 110, 55, 60, 30, 75, 140),
    "maize": (6.5, 90, 45, 45, 26, 70, 90),
    "pulses": (7.0, 40, 50, 40, 24, 65, 70),
    "vegetables": (6.5, 100, 70, 80, 25, 75, 110),
    "oilseeds": (6.8, 70, 60, 50, 27, 60, 85),
}

NOISE_HALF_WIDTHS: tuple[float, ...] = (0.75, 20.0, 15.0, 15.0, 4.0, 12.5, 30.0)

SOIL_TYPES: tuple[SoilType, ...] = tuple(SoilType)


def generate_training_data(
    rng: Optional[np.random.Generator] = None,
    samples_per_crop: int = DEFAULT_SAMPLES_PER_CROP,
) -> list[LabeledSample]:
    """
    Synthesize a labeled corpus around the crop centroids.

    Output is class-major: all samples of one crop are contiguous, in
    `CROP_CENTROIDS` order. Nothing is shuffled.

    Args:
        rng: Random source; a fresh entropy-seeded generator when omitted
        samples_per_crop: Samples drawn for every crop class

    Returns:
        List of `len(CROP_CENTROIDS) * samples_per_crop` labeled samples
    """
    rng = rng if rng is not None else np.random.default_rng()
    half_widths = np.asarray(NOISE_HALF_WIDTHS)

    corpus = []
    for crop, centroid in CROP_CENTROIDS.items():
        center = np.asarray(centroid, dtype=float)
        for _ in range(samples_per_crop):
            soil_type = SOIL_TYPES[rng.integers(len(SOIL_TYPES))]
            values = center + rng.uniform(-half_widths, half_widths)
            corpus.append(LabeledSample(
                features=FeatureVector.from_values(values.tolist(), soil_type),
                label=crop,
            ))

    logger.debug(f"Generated {len(corpus)} samples for {len(CROP_CENTROIDS)} crops")
    return corpus


def summarize_corpus(corpus: Sequence[LabeledSample]) -> list[CropSummary]:
    """
    Per-crop sample counts and mean numeric features.

    Crops are listed in order of first appearance in the corpus.
    """
    grouped: dict[str, list[tuple[float, ...]]] = defaultdict(list)
    for sample in corpus:
        grouped[sample.label].append(sample.features.as_tuple())

    summaries = []
    for crop, rows in grouped.items():
        means = np.mean(np.asarray(rows), axis=0)
        summaries.append(CropSummary(
            crop=crop,
            count=len(rows),
            average_features={
                feature.value: round(float(mean), 2)
                for feature, mean in zip(NUMERIC_FEATURES, means)
            },
        ))
    return summaries
