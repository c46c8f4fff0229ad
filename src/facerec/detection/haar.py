"""Haar cascade face detector with area-based auto tuning."""

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import cv2
import numpy as np

from ..constants import (
    ACCURACY_PROFILES,
    AREA_BANDS,
    DEFAULT_ACCURACY,
    WORKING_AREA,
    AccuracyProfile,
    DetectionConfig,
    get_detection_config,
)
from ..face import Face
from ..utils import copy_rect, load_image, resize_to_area, to_8bit, to_grayscale
from .base import BaseFaceDetector
from .cascades import CascadeSet
from .merge import merge_duplicates

logger = logging.getLogger(__name__)


@dataclass
class SearchPlan:
    """Parameters of a single detection call."""
    accuracy: int
    profile: AccuracyProfile
    # original coordinate = working coordinate * scale
    scale: float
    working: np.ndarray


class HaarCascadeDetector(BaseFaceDetector):
    """Face detector using OpenCV Haar Cascades.

    Large inputs are searched on a downsampled copy with a coarser accuracy
    level; the returned rectangles and crops always refer to the input image.
    """

    def __init__(
        self,
        cascade_dir: Optional[str] = None,
        cascades: Optional[Sequence[str]] = None,
        config: Optional[DetectionConfig] = None,
    ):
        """Initialize Haar Cascade detector.

        Args:
            cascade_dir: Directory holding the cascade files
                        If None, uses the config value or OpenCV's bundled data
            cascades: Cascade file names to evaluate, in order
            config: Detection constants (uses global config if None)
        """
        self.config = config or get_detection_config()
        self.cascade_set = CascadeSet(cascade_dir or self.config.cascade_dir)

        for name in cascades if cascades is not None else self.config.cascades:
            self.cascade_set.add(name)

        self._accuracy = DEFAULT_ACCURACY
        self.set_accuracy(self.config.accuracy)
        self.max_distance = self.config.max_distance
        self.min_duplicates = self.config.min_duplicates

    @property
    def accuracy(self) -> int:
        """Configured accuracy level used for images below the area bands."""
        return self._accuracy

    def set_accuracy(self, level: int) -> bool:
        """Set the accuracy level.

        Lower levels search more finely and are slower.

        Args:
            level: Accuracy level between 1 and 4

        Returns:
            True if the level was accepted
        """
        if level not in ACCURACY_PROFILES:
            logger.warning(f"Bad accuracy value {level}, keeping {self._accuracy}")
            return False
        self._accuracy = int(level)
        return True

    def recommended_image_size(self) -> int:
        return self.config.recommended_image_size

    def plan(self, image: np.ndarray) -> SearchPlan:
        """Choose the working image and accuracy level for an input."""
        height, width = image.shape[:2]
        area = width * height

        for min_area, level in AREA_BANDS:
            if area > min_area:
                working, scale = resize_to_area(image, WORKING_AREA)
                logger.debug(f"Input area {area} scaled to {WORKING_AREA} pixels, accuracy {level}")
                return SearchPlan(level, ACCURACY_PROFILES[level], scale, working)

        return SearchPlan(self._accuracy, ACCURACY_PROFILES[self._accuracy], 1.0, image)

    def detect(self, image: np.ndarray) -> List[Face]:
        """Detect faces using every configured cascade."""
        min_size = self.config.min_image_size
        if image is None or image.size == 0 or image.shape[0] < min_size or image.shape[1] < min_size:
            logger.warning("Bad image given, not detecting faces.")
            return []

        start = time.perf_counter()
        plan = self.plan(image)
        gray = to_grayscale(to_8bit(plan.working))

        groups = []
        for name, classifier in self.cascade_set:
            if classifier is None:
                logger.error(f"Could not load classifier cascade {name}, skipping")
                continue
            groups.append(self._cascade_result(gray, classifier, plan))

        groups = [group for group in groups if group]
        if len(groups) > 1:
            faces = merge_duplicates(groups, self.max_distance, self.min_duplicates)
        else:
            faces = [face for group in groups for face in group]

        for face in faces:
            face.image = copy_rect(image, *face.bbox)

        logger.debug(f"Detected {len(faces)} face(s) in {time.perf_counter() - start:.3f}s")
        return faces

    def detect_file(self, filename: str) -> List[Face]:
        """Load an image as greyscale and detect faces in it."""
        image = load_image(filename, grayscale=True)
        if image is None:
            return []
        return self.detect(image)

    def _cascade_result(
        self,
        gray: np.ndarray,
        classifier: Any,
        plan: SearchPlan,
    ) -> List[Face]:
        """Run one cascade and map its hits back to input coordinates."""
        min_face = plan.profile.min_sizes[0]
        start = time.perf_counter()

        hits = classifier.detectMultiScale(
            gray,
            scaleFactor=plan.profile.search_increment,
            minNeighbors=plan.profile.grouping,
            flags=cv2.CASCADE_DO_CANNY_PRUNING,
            minSize=(min_face, min_face),
        )
        logger.debug(f"Cascade search took {time.perf_counter() - start:.3f}s")

        faces = []
        shrink = self.config.box_shrink
        for (x, y, w, h) in hits:
            x1 = int(x * plan.scale)
            y1 = int(y * plan.scale)
            x2 = int((x + w) * plan.scale)
            y2 = int((y + h) * plan.scale)

            # Make the box a bit tighter
            width = x2 - x1
            height = y2 - y1
            x1 += int(width * shrink)
            y1 += int(height * shrink)
            x2 -= int(width * shrink)
            y2 -= int(height * shrink)

            faces.append(Face(x1, y1, x2, y2))

        return faces
