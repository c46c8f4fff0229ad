"""Fisherface recognition (PCA followed by LDA)."""

import logging
from typing import List, Optional, Tuple

import numpy as np

from ..errors import TrainingError
from .base import BaseRecognizer
from .gallery import Gallery
from .subspace import lda, pca, subspace_project

logger = logging.getLogger(__name__)


class Fisherfaces(BaseRecognizer):
    """Nearest neighbour search in the discriminant space.

    The observations are first reduced to N - C principal components so the
    within-class scatter is not singular, then projected on at most C - 1
    discriminants.
    """

    name = "fisher"

    @property
    def filename(self) -> str:
        return self.config.fisher_filename

    def _fit(
        self,
        data: np.ndarray,
        labels: List[int],
        num_components: Optional[int],
        shape: Tuple[int, int],
    ) -> Gallery:
        n = data.shape[0]
        classes = len(set(labels))
        if classes < 2:
            raise TrainingError("Fisherfaces need at least two identities")
        if n - classes < 1:
            raise TrainingError(
                f"Fisherfaces need more samples than identities, got {n} samples of {classes}"
            )

        lda_components = classes - 1
        if num_components is not None and num_components > 0:
            lda_components = min(num_components, classes - 1)

        mean, _, pca_basis = pca(data, n - classes)
        reduced = subspace_project(pca_basis, mean, data)
        _, lda_basis = lda(reduced, labels, lda_components)

        basis = pca_basis @ lda_basis
        projections = subspace_project(basis, mean, data)
        logger.debug(f"Fisherfaces: {n - classes} principal, {basis.shape[1]} discriminant components")

        return Gallery(
            projection_basis=basis,
            mean_vector=mean,
            projected_observations=[row.reshape(1, -1).copy() for row in projections],
            labels=list(labels),
        )

    def _merge(self, index: int, image: np.ndarray) -> None:
        # Another sample of the class; the discriminants need within-class spread.
        self._raw_images.append(image.copy())
        self._index_map.append(self._index_map[index])
