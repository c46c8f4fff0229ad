"""Single entry point combining face detection and recognition."""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .constants import (
    DetectionConfig,
    RecognitionConfig,
    get_detection_config,
    get_recognition_config,
)
from .detection import HaarCascadeDetector
from .errors import TrainingError
from .face import Face
from .recognition import RECOGNITION_BACKENDS, BaseRecognizer
from .utils import copy_rect, image_from_buffer, load_image, normalize_face

logger = logging.getLogger(__name__)


class Mode(Enum):
    """Which halves of the library an instance provides."""
    ALL = "all"
    DETECT = "detect"
    RECOGNIZE = "recognize"


class LibFace:
    """Face detection and recognition behind one object.

    Detection returns Face records with crops; recognition and enrollment
    normalize those crops to the canonical recognition size before handing
    them to the recognizer.
    """

    def __init__(
        self,
        mode: Mode = Mode.ALL,
        config_dir: Union[str, Path] = ".",
        cascade_dir: Optional[str] = None,
        recognizer: str = "eigen",
        config: Optional[Tuple[DetectionConfig, RecognitionConfig]] = None,
    ):
        """Initialize the library.

        Args:
            mode: Detection, recognition or both
            config_dir: Directory of the persisted recognition gallery
            cascade_dir: Directory holding the cascade files
            recognizer: Recognition backend name ("eigen" or "fisher")
            config: (detection, recognition) constants (uses global config if None)
        """
        self.mode = Mode(mode)
        detection_config, recognition_config = config or (
            get_detection_config(),
            get_recognition_config(),
        )
        self.recognition_config = recognition_config

        self.detector: Optional[HaarCascadeDetector] = None
        self.recognizer: Optional[BaseRecognizer] = None
        self._last_filename: Optional[str] = None
        self._last_image: Optional[np.ndarray] = None

        if self.mode in (Mode.ALL, Mode.DETECT):
            self.detector = HaarCascadeDetector(cascade_dir=cascade_dir, config=detection_config)

        if self.mode in (Mode.ALL, Mode.RECOGNIZE):
            backend = recognizer.lower()
            if backend not in RECOGNITION_BACKENDS:
                raise ValueError(
                    f"Unknown recognizer '{recognizer}', expected one of {sorted(RECOGNITION_BACKENDS)}"
                )
            self.recognizer = RECOGNITION_BACKENDS[backend](
                config_dir=config_dir, config=recognition_config
            )

        logger.info(f"LibFace initialized in {self.mode.value} mode")

    def _require_detection(self) -> HaarCascadeDetector:
        if self.detector is None:
            raise RuntimeError(f"Face detection is not available in {self.mode.value} mode")
        return self.detector

    def _require_recognition(self) -> BaseRecognizer:
        if self.recognizer is None:
            raise RuntimeError(f"Face recognition is not available in {self.mode.value} mode")
        return self.recognizer

    # -------------------------------------------------------------------------
    # Detection
    # -------------------------------------------------------------------------

    def detect_faces(self, image: np.ndarray) -> List[Face]:
        """Detect faces in an image array."""
        return self._require_detection().detect(image)

    def detect_faces_file(self, filename: Union[str, Path]) -> List[Face]:
        """Detect faces in an image file, loaded as greyscale.

        The last loaded image is kept and reused when the same file name is
        passed again.
        """
        detector = self._require_detection()
        filename = str(filename)

        if filename != self._last_filename or self._last_image is None:
            image = load_image(filename, grayscale=True)
            if image is None:
                return []
            self._last_filename = filename
            self._last_image = image

        return detector.detect(self._last_image)

    def detect_faces_buffer(
        self,
        data: bytes,
        width: int,
        height: int,
        step: int,
        depth: int = 8,
        channels: int = 1,
    ) -> List[Face]:
        """Detect faces in a raw pixel buffer."""
        detector = self._require_detection()
        try:
            image = image_from_buffer(data, width, height, step, depth, channels)
        except ValueError as e:
            logger.warning(f"Invalid image buffer: {e}")
            return []
        return detector.detect(image)

    def set_detection_accuracy(self, level: int) -> bool:
        return self._require_detection().set_accuracy(level)

    def get_detection_accuracy(self) -> int:
        return self._require_detection().accuracy

    def recommended_image_size_for_detection(self) -> int:
        return self._require_detection().recommended_image_size()

    # -------------------------------------------------------------------------
    # Recognition
    # -------------------------------------------------------------------------

    def recommended_image_size_for_recognition(self) -> Tuple[int, int]:
        width, height = self.recognition_config.face_size
        return int(width), int(height)

    def _face_crop(self, face: Face, image: Optional[np.ndarray]) -> Optional[np.ndarray]:
        """Canonical recognition image of a face, or None without pixels."""
        crop = face.image if image is None else copy_rect(image, *face.bbox)
        if crop is None or crop.size == 0:
            return None
        return normalize_face(crop, self.recommended_image_size_for_recognition())

    def recognise(
        self,
        faces: Sequence[Face],
        image: Optional[np.ndarray] = None,
    ) -> List[Tuple[int, float]]:
        """Identify faces against the gallery.

        Args:
            faces: Face records; their crops are used unless ``image`` is given
            image: Image the face rectangles refer to

        Returns:
            One (identity, distance) per face, in input order. Identities are
            also written back onto the records.
        """
        recognizer = self._require_recognition()
        if len(faces) == 0:
            logger.warning("No faces passed. No recognition to do.")
            return []

        results = []
        for face in faces:
            crop = self._face_crop(face, image)
            if crop is None:
                logger.warning("Face without image passed to recognise")
                results.append((-1, -1.0))
                continue
            identity, distance = recognizer.classify(crop)
            face.identity = identity
            results.append((identity, distance))
        return results

    recognize = recognise

    def update(
        self,
        faces: Sequence[Face],
        image: Optional[np.ndarray] = None,
    ) -> List[int]:
        """Enroll faces for the next ``train`` call.

        Unknown faces get a new identity, written back onto the record. The
        gallery used by ``recognise`` is unchanged until ``train`` runs.

        Returns:
            Identities of the enrolled faces
        """
        recognizer = self._require_recognition()

        pairs = []
        for face in faces:
            crop = self._face_crop(face, image)
            if crop is None:
                logger.warning("Face without image passed to update, skipping")
                continue
            pairs.append((face, Face(identity=face.identity, image=crop)))

        assigned = recognizer.update([record for _, record in pairs])
        for face, record in pairs:
            face.identity = record.identity
        return assigned

    def train(self, num_components: Optional[int] = None) -> bool:
        """Rebuild the basis from every enrolled face.

        Returns:
            True if training succeeded
        """
        recognizer = self._require_recognition()
        try:
            recognizer.retrain(num_components)
        except TrainingError as e:
            logger.error(f"Training failed: {e}")
            return False
        return True

    def count(self) -> int:
        return self._require_recognition().count()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def get_config(self) -> Dict[str, str]:
        return self._require_recognition().get_config()

    def load_config(self, source: Union[str, Path, Mapping[str, str]]) -> bool:
        return self._require_recognition().load_config(source)

    def save_config(self, directory: Optional[Union[str, Path]] = None) -> bool:
        return self._require_recognition().save_config(directory)
