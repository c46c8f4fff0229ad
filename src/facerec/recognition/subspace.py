"""Linear subspace methods: PCA, LDA and projections.

All matrices are float64 with one observation per row. Bases are stored
column-wise, so a (1, d) row vector projects to a (1, k) feature vector via
``(x - mean) @ basis``.
"""

from typing import Sequence, Tuple

import numpy as np

from ..errors import TrainingError


def as_row_matrix(images: Sequence[np.ndarray]) -> np.ndarray:
    """Flatten equally sized images into an (n, d) float64 matrix."""
    if len(images) == 0:
        return np.empty((0, 0), dtype=np.float64)

    dimension = np.asarray(images[0]).size
    data = np.empty((len(images), dimension), dtype=np.float64)
    for i, image in enumerate(images):
        row = np.asarray(image, dtype=np.float64).reshape(-1)
        if row.size != dimension:
            raise TrainingError(
                f"Observation {i} has {row.size} values, expected {dimension}"
            )
        data[i] = row
    return data


def pca(data: np.ndarray, num_components: int = 0) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Principal component analysis of row observations.

    Args:
        data: (n, d) observations
        num_components: Components to keep; 0 or less keeps all of them

    Returns:
        Tuple of (mean (1, d), eigenvalues (k,), eigenvectors (d, k)),
        eigenvalues in descending order
    """
    n = data.shape[0]
    mean = data.mean(axis=0, keepdims=True)
    centered = data - mean

    # The right singular vectors of the centered data are the covariance
    # eigenvectors; this never forms the (d, d) covariance matrix.
    _, singular, vt = np.linalg.svd(centered, full_matrices=False)
    eigenvalues = singular ** 2 / n

    available = vt.shape[0]
    k = available if num_components <= 0 else min(num_components, available)
    return mean, eigenvalues[:k].copy(), vt[:k].T.copy()


def lda(
    data: np.ndarray,
    labels: Sequence[int],
    num_components: int = 0,
) -> Tuple[np.ndarray, np.ndarray]:
    """Fisher linear discriminant analysis.

    Solves Sb w = lambda Sw w by whitening the within-class scatter and
    diagonalising the whitened between-class scatter.

    Args:
        data: (n, d) observations
        labels: Class label of each row
        num_components: Discriminants to keep; 0 or less keeps C - 1

    Returns:
        Tuple of (eigenvalues (m,), eigenvectors (d, m)), unit columns,
        eigenvalues in descending order
    """
    y = np.asarray(labels)
    if y.shape[0] != data.shape[0]:
        raise TrainingError(
            f"The number of samples must equal the number of labels. "
            f"Was len(samples)={data.shape[0]}, len(labels)={y.shape[0]}."
        )

    classes = np.unique(y)
    if classes.size < 2:
        raise TrainingError("At least two classes are needed for discriminant analysis")

    dimension = data.shape[1]
    mean_total = data.mean(axis=0)
    sw = np.zeros((dimension, dimension))
    sb = np.zeros((dimension, dimension))

    for c in classes:
        xc = data[y == c]
        mean_class = xc.mean(axis=0)
        diff = xc - mean_class
        sw += diff.T @ diff
        mean_diff = (mean_class - mean_total).reshape(-1, 1)
        sb += xc.shape[0] * (mean_diff @ mean_diff.T)

    sw_values, sw_vectors = np.linalg.eigh(sw)
    keep = sw_values > max(sw_values.max(), 0.0) * 1e-12
    if not np.any(keep):
        raise TrainingError("Within-class scatter is singular")

    whitening = sw_vectors[:, keep] / np.sqrt(sw_values[keep])
    eigenvalues, vectors = np.linalg.eigh(whitening.T @ sb @ whitening)
    order = np.argsort(eigenvalues)[::-1]

    limit = classes.size - 1
    k = limit if num_components <= 0 else min(num_components, limit)
    k = min(k, order.size)

    eigenvectors = whitening @ vectors[:, order[:k]]
    norms = np.linalg.norm(eigenvectors, axis=0)
    norms[norms == 0] = 1.0
    return eigenvalues[order[:k]].copy(), eigenvectors / norms


def subspace_project(basis: np.ndarray, mean: np.ndarray, data: np.ndarray) -> np.ndarray:
    """Project row observations onto a subspace."""
    return (np.atleast_2d(data) - mean) @ basis


def subspace_reconstruct(basis: np.ndarray, mean: np.ndarray, features: np.ndarray) -> np.ndarray:
    """Map subspace features back to observation space."""
    return np.atleast_2d(features) @ basis.T + mean
