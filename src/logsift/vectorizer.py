"""Hashing-trick vectorization and nearest neighbor distance.

Each normalized line becomes a fixed width sparse vector by hashing its
words and word pairs into N_FEATURES buckets. Vectors are L2 normalized, so
the dot product of two rows is their cosine similarity.
"""

import logging

import numpy as np
from scipy import sparse
from sklearn.feature_extraction.text import HashingVectorizer


logger = logging.getLogger(__name__)

N_FEATURES = 2**18

# Rows of the baseline matrices compared at once, bounds the dense result size
SEARCH_BATCH = 4096

_vectorizer = HashingVectorizer(
    n_features=N_FEATURES,
    token_pattern=r'\S+',
    lowercase=False,
    ngram_range=(1, 2),
    alternate_sign=False,
    norm='l2',
    dtype=np.float32,
)


FeaturesMatrix = sparse.csr_matrix


def vectorize(lines: list[str]) -> FeaturesMatrix:
    """Vectorize a batch of normalized lines into a (len(lines), N_FEATURES) matrix."""
    return sparse.csr_matrix(_vectorizer.transform(lines), dtype=np.float32)


def nearest_distance(baselines: list[FeaturesMatrix], lines: list[str]) -> np.ndarray:
    """Compute the distance of each line to its closest baseline line.

    Args:
        baselines: Feature matrices of the baseline lines
        lines: Normalized target lines

    Returns:
        Array of len(lines) cosine distances in [0, 1]. Lines are at distance
        1.0 when there is no baseline at all.
    """
    if not lines:
        return np.zeros(0, dtype=np.float32)

    logger.debug(f'Searching {len(lines)} lines in {len(baselines)} baseline matrices')
    targets = vectorize(lines)
    similarity = np.zeros(len(lines), dtype=np.float32)
    for baseline in baselines:
        for start in range(0, baseline.shape[0], SEARCH_BATCH):
            block = baseline[start : start + SEARCH_BATCH]
            scores = (targets @ block.T).max(axis=1).toarray().ravel()
            np.maximum(similarity, scores, out=similarity)

    return np.clip(1.0 - similarity, 0.0, 1.0).astype(np.float32)
