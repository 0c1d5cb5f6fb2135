"""Vector math over the per-aspect embeddings stored on contact records.

The ranker matches lexically and does not call into this module; these
helpers serve consumers that work with the stored vectors directly.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from src.contact_ranking.models import Aspect, ContactVectorRecord, WeightVector

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape:
        raise ValueError(f"Vectors must have the same dimension ({va.shape} vs {vb.shape})")
    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return 0.0
    return float(np.dot(va, vb) / norm)


def embedding_similarities(
    query_vector: Sequence[float], record: ContactVectorRecord,
) -> dict[Aspect, float]:
    """Cosine similarity of ``query_vector`` against each stored aspect embedding.

    Aspects without a stored embedding are omitted.
    """
    return {
        aspect: cosine_similarity(query_vector, emb.vector)
        for aspect, emb in record.embeddings.items()
    }


def weighted_embedding_score(
    query_vector: Sequence[float],
    record: ContactVectorRecord,
    weights: WeightVector,
) -> float:
    sims = embedding_similarities(query_vector, record)
    score = sum(sim * weights.get(aspect) for aspect, sim in sims.items())
    logger.debug(
        "Embedding score %s over %d aspects -> %.3f",
        record.connection_id, len(sims), score,
    )
    return score
