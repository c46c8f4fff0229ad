"""Shared engine of the subspace recognition strategies."""

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..constants import RecognitionConfig, get_recognition_config
from ..errors import GalleryError, TrainingError
from ..face import UNKNOWN_ID, Face
from .gallery import Gallery
from .storage import gallery_from_config, gallery_to_config, read_gallery, write_gallery
from .subspace import as_row_matrix

logger = logging.getLogger(__name__)


class BaseRecognizer(ABC):
    """Subspace face recognizer backed by a persisted gallery.

    Besides the projected gallery, each recognizer keeps the raw images
    enrolled through ``update``; ``retrain`` rebuilds the basis from them.
    Instances are not thread safe.
    """

    #: Backend name used in RECOGNITION_BACKENDS
    name: str = ""

    def __init__(
        self,
        config_dir: Optional[Union[str, Path]] = None,
        config: Optional[RecognitionConfig] = None,
    ):
        """Initialize recognizer.

        Args:
            config_dir: Directory holding the gallery file
                       If the file exists it is loaded right away
            config: Recognition constants (uses global config if None)
        """
        self.config = config or get_recognition_config()
        width, height = self.config.face_size
        self.gallery = Gallery(
            face_width=int(width),
            face_height=int(height),
            threshold=self.config.threshold,
        )
        self._raw_images: List[np.ndarray] = []
        self._index_map: List[int] = []

        self.config_dir = Path(config_dir) if config_dir is not None else None
        if self.config_dir is not None:
            path = self.gallery_path(self.config_dir)
            logger.info(f"Config location: {path}")
            if path.exists():
                logger.info("Gallery file exists. Loading previous config.")
                self.load_config(self.config_dir)
            else:
                logger.info("Gallery file does not exist. Will create new config.")

    # -------------------------------------------------------------------------
    # Strategy hooks
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def filename(self) -> str:
        """Gallery file name inside a config directory."""

    @abstractmethod
    def _fit(
        self,
        data: np.ndarray,
        labels: List[int],
        num_components: Optional[int],
        shape: Tuple[int, int],
    ) -> Gallery:
        """Compute a new gallery from (n, d) training rows."""

    @abstractmethod
    def _merge(self, index: int, image: np.ndarray) -> None:
        """Fold a new observation of an enrolled identity into the raw images."""

    # -------------------------------------------------------------------------
    # Training
    # -------------------------------------------------------------------------

    def train(
        self,
        observations: Sequence[np.ndarray],
        labels: Sequence[int],
        num_components: Optional[int] = None,
    ) -> None:
        """Compute a fresh projection basis and project the observations.

        The previous gallery is replaced only if training succeeds.

        Args:
            observations: Equally sized single-channel face images
            labels: Identity of each observation
            num_components: Components to keep (strategy default if None)

        Raises:
            TrainingError: if the training data is unusable
        """
        start = time.perf_counter()

        if len(observations) == 0:
            raise TrainingError("Training data is empty")
        if len(observations) != len(labels):
            raise TrainingError(
                f"The number of samples must equal the number of labels. "
                f"Was len(samples)={len(observations)}, len(labels)={len(labels)}."
            )

        labels = [int(label) for label in labels]
        if any(label < 0 for label in labels):
            raise TrainingError("Training labels must be non-negative identities")

        images = [np.asarray(obs) for obs in observations]
        shape = images[0].shape
        if len(shape) != 2:
            raise TrainingError(f"Observations must be single-channel images, got shape {shape}")
        for image in images[1:]:
            if image.shape != shape:
                raise TrainingError(f"Observation of shape {image.shape} does not match {shape}")

        data = as_row_matrix(images)
        gallery = self._fit(data, labels, num_components, (shape[0], shape[1]))
        gallery.face_height, gallery.face_width = int(shape[0]), int(shape[1])
        gallery.threshold = self.gallery.threshold
        self.gallery = gallery

        logger.info(
            f"{self.name} training done: {len(gallery)} projections, "
            f"{gallery.num_components} components in {time.perf_counter() - start:.3f}s"
        )

    def train_faces(self, faces: Sequence[Face], num_components: Optional[int] = None) -> None:
        """Train from Face records carrying images and identities."""
        missing = [i for i, face in enumerate(faces) if face.image is None]
        if missing:
            raise TrainingError(f"Faces without image at positions {missing}")
        self.train([face.image for face in faces], [face.identity for face in faces], num_components)

    def retrain(self, num_components: Optional[int] = None) -> None:
        """Rebuild the basis from every image enrolled through ``update``.

        Raises:
            TrainingError: if the current gallery holds identities with no
                enrolled image, since retraining would drop them
        """
        missing = sorted(set(self.gallery.labels) - set(self._index_map))
        if missing:
            raise TrainingError(
                f"Gallery identities {missing} have no enrolled images; "
                f"retraining would remove them"
            )
        self.train(self._raw_images, self._index_map, num_components)

    # -------------------------------------------------------------------------
    # Recognition
    # -------------------------------------------------------------------------

    @property
    def threshold(self) -> float:
        return self.gallery.threshold

    @threshold.setter
    def threshold(self, value: float) -> None:
        self.gallery.threshold = float(value)

    def classify(self, image: Optional[np.ndarray]) -> Tuple[int, float]:
        """Find the identity of one canonical face image.

        Returns:
            Tuple of (identity, distance); (-1, -1.0) when there is no
            acceptable match or the input cannot be classified
        """
        if image is None:
            logger.warning("No face passed. No recognition to do.")
            return UNKNOWN_ID, -1.0

        if not self.gallery.trained or len(self.gallery) == 0:
            logger.warning(f"{self.name} gallery is not trained, cannot recognize")
            return UNKNOWN_ID, -1.0

        image = np.asarray(image)
        expected = (self.gallery.face_height, self.gallery.face_width)
        if image.shape != expected:
            logger.warning(f"Face of shape {image.shape} does not match gallery size {expected}")
            return UNKNOWN_ID, -1.0

        start = time.perf_counter()
        identity, distance = self.gallery.nearest(self.gallery.project(image))
        logger.debug(f"Recognition took {time.perf_counter() - start:.4f}s, distance {distance}")

        if distance > self.gallery.threshold:
            logger.debug(
                f"The value of minDist ({distance}) is above the threshold ({self.gallery.threshold})."
            )
            return UNKNOWN_ID, -1.0

        return identity, distance

    # -------------------------------------------------------------------------
    # Enrollment
    # -------------------------------------------------------------------------

    def _next_free_id(self) -> int:
        used = set(self._index_map) | set(self.gallery.labels)
        candidate = len(self._raw_images)
        while candidate in used:
            candidate += 1
        return candidate

    def update(self, faces: Sequence[Face]) -> List[int]:
        """Enroll face records into the raw-image gallery.

        Unknown faces receive the next free identity, written back onto the
        record. A face of an enrolled identity is merged with its stored
        image; a face with an explicit new identity is appended. The basis is
        not rebuilt; call ``retrain``.

        Returns:
            Identities of the enrolled faces, in input order
        """
        if len(faces) == 0:
            logger.warning("No faces passed. Not training.")
            return []

        start = time.perf_counter()
        assigned = []

        for face in faces:
            if face.image is None:
                logger.warning("Face without image passed to update, skipping")
                continue

            image = np.asarray(face.image)
            if image.ndim != 2:
                logger.warning(f"Face image of shape {image.shape} is not single-channel, skipping")
                continue
            if self._raw_images and image.shape != self._raw_images[0].shape:
                logger.warning(
                    f"Face of shape {image.shape} does not match enrolled size "
                    f"{self._raw_images[0].shape}, skipping"
                )
                continue

            if face.identity == UNKNOWN_ID:
                new_id = self._next_free_id()
                logger.debug(f"Has no specified ID. Giving it the ID = {new_id}")
                self._raw_images.append(image.copy())
                self._index_map.append(new_id)
                face.identity = new_id
            elif face.identity in self._index_map:
                logger.debug(f"ID {face.identity} already exists, merging 2 together.")
                self._merge(self._index_map.index(face.identity), image)
            else:
                logger.debug(f"ID {face.identity} does not exist, creating new face.")
                self._raw_images.append(image.copy())
                self._index_map.append(face.identity)

            assigned.append(face.identity)

        logger.debug(f"Updating took {time.perf_counter() - start:.4f}s")
        return assigned

    @property
    def enrolled(self) -> List[Tuple[int, np.ndarray]]:
        """Enrolled (identity, image) pairs in storage order."""
        return list(zip(self._index_map, self._raw_images))

    def count(self) -> int:
        """Number of observations in the gallery."""
        return len(self.gallery)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def gallery_path(self, directory: Union[str, Path]) -> Path:
        return Path(directory) / self.filename

    def get_config(self) -> Dict[str, str]:
        """Return the gallery as a string mapping accepted by load_config."""
        return gallery_to_config(self.gallery)

    def load_config(self, source: Union[str, Path, Mapping[str, str]]) -> bool:
        """Replace the gallery with a persisted one.

        Args:
            source: Config directory or mapping from get_config()

        Returns:
            True if loaded; on failure the current gallery is kept
        """
        try:
            if isinstance(source, Mapping):
                logger.info("Load config data from a map.")
                gallery = gallery_from_config(source)
            else:
                path = self.gallery_path(source)
                logger.debug(f"Load training data from {path}")
                gallery = read_gallery(path)
        except GalleryError as e:
            logger.error(f"Failed to load {self.name} gallery: {e}")
            return False

        self.gallery = gallery
        logger.info(f"Loaded {len(gallery)} projections")
        return True

    def save_config(self, directory: Optional[Union[str, Path]] = None) -> bool:
        """Write the gallery file into ``directory``.

        Returns:
            True if the save succeeded
        """
        directory = directory if directory is not None else self.config_dir
        if directory is None:
            logger.warning("No config directory set, cannot save")
            return False

        path = self.gallery_path(directory)
        logger.info(f"Saving config in {path}")
        try:
            write_gallery(self.gallery, path)
        except GalleryError as e:
            logger.error(f"{e}. Save has failed!")
            return False
        return True
