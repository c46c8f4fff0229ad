"""Base face detector interface."""

from abc import ABC, abstractmethod
from typing import List

import numpy as np

from ..face import Face


class BaseFaceDetector(ABC):
    """Abstract base class for face detectors."""

    @abstractmethod
    def detect(self, image: np.ndarray) -> List[Face]:
        """Detect faces in an image.

        Args:
            image: Grey or BGR image as numpy array

        Returns:
            List of Face objects with crops attached and identity -1
        """
        pass
