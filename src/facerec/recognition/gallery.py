"""Training gallery: projection basis, mean and projected observations."""

import copy
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..face import UNKNOWN_ID
from .subspace import subspace_project


@dataclass
class Gallery:
    """Projected training observations of one recognition strategy.

    ``projected_observations[i]`` belongs to identity ``labels[i]``. When
    ``synthetic`` is set, entry 0 is the placeholder added to a single-face
    training set and never matches.
    """

    face_width: int = 120
    face_height: int = 120
    threshold: float = 1000000.0
    projection_basis: Optional[np.ndarray] = None
    mean_vector: Optional[np.ndarray] = None
    projected_observations: List[np.ndarray] = field(default_factory=list)
    labels: List[int] = field(default_factory=list)
    synthetic: bool = False

    @property
    def trained(self) -> bool:
        return self.projection_basis is not None and self.mean_vector is not None

    @property
    def dimension(self) -> int:
        """Length of a flattened canonical face."""
        return self.face_width * self.face_height

    @property
    def num_components(self) -> int:
        return 0 if self.projection_basis is None else self.projection_basis.shape[1]

    def __len__(self) -> int:
        return len(self.projected_observations)

    def project(self, image: np.ndarray) -> np.ndarray:
        """Flatten, center and project one face image."""
        row = np.asarray(image, dtype=np.float64).reshape(1, -1)
        return subspace_project(self.projection_basis, self.mean_vector, row)

    def nearest(self, features: np.ndarray) -> Tuple[int, float]:
        """Find the stored observation closest to ``features``.

        Returns:
            Tuple of (label, euclidean distance); ties resolve to the lowest
            storage index. (UNKNOWN_ID, -1.0) when nothing can match.
        """
        first = 1 if self.synthetic else 0
        candidates = self.projected_observations[first:]
        if not candidates:
            return UNKNOWN_ID, -1.0

        stacked = np.vstack([np.reshape(obs, (1, -1)) for obs in candidates])
        distances = np.linalg.norm(stacked - np.reshape(features, (1, -1)), axis=1)
        index = int(np.argmin(distances))
        return self.labels[first + index], float(distances[index])

    def copy(self) -> "Gallery":
        return copy.deepcopy(self)
