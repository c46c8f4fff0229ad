"""Eigenface recognition (PCA)."""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .base import BaseRecognizer
from .gallery import Gallery
from .subspace import as_row_matrix, pca, subspace_project, subspace_reconstruct

logger = logging.getLogger(__name__)


def placeholder_face(shape: Tuple[int, int]) -> np.ndarray:
    """Blank face with a single diagonal stroke.

    Added to single-face training sets so PCA has a direction to find.
    """
    image = np.zeros(shape, dtype=np.uint8)
    cv2.line(image, (1, 1), (15, 15), 255, 1)
    return image


class Eigenfaces(BaseRecognizer):
    """Nearest neighbour search in the principal component space."""

    name = "eigen"

    @property
    def filename(self) -> str:
        return self.config.eigen_filename

    def _fit(
        self,
        data: np.ndarray,
        labels: List[int],
        num_components: Optional[int],
        shape: Tuple[int, int],
    ) -> Gallery:
        synthetic = data.shape[0] == 1
        if synthetic:
            logger.debug("Only one face given, adding a placeholder face to the training set")
            junk = as_row_matrix([placeholder_face(shape)])
            data = np.vstack([junk, data])
            labels = [labels[0]] + list(labels)

        n = data.shape[0]
        if num_components is None or num_components <= 0:
            num_components = max(n - 1, 1)
        num_components = min(num_components, n)

        mean, _, basis = pca(data, num_components)
        projections = subspace_project(basis, mean, data)

        return Gallery(
            projection_basis=basis,
            mean_vector=mean,
            projected_observations=[row.reshape(1, -1).copy() for row in projections],
            labels=list(labels),
            synthetic=synthetic,
        )

    def _merge(self, index: int, image: np.ndarray) -> None:
        """Replace the stored observation with the new one.

        The new image is passed through the first principal component of the
        pair. A 2-image PCA reconstructs it exactly, so the stored image
        becomes the new image, rounded to uint8.
        """
        old = self._raw_images[index]
        data = as_row_matrix([image, old])
        mean, _, basis = pca(data, 1)

        features = subspace_project(basis, mean, data[0])
        reconstructed = subspace_reconstruct(basis, mean, features)

        merged = np.clip(np.rint(reconstructed), 0, 255).astype(np.uint8).reshape(old.shape)
        self._raw_images[index] = merged
