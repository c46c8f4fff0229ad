"""Gallery persistence.

A gallery is stored either as an OpenCV FileStorage document on disk or as
a flat string-to-string mapping for callers that keep it in their own
storage. Both carry the same keys:

    nIds, FACE_WIDTH, FACE_HEIGHT, THRESHOLD, SYNTHETIC,
    person_<i>, eigenvector, mean, id_<i>

and reload to bit-identical matrices.
"""

import base64
import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import cv2
import numpy as np

from ..errors import GalleryError
from .gallery import Gallery

logger = logging.getLogger(__name__)

_MATRIX_PATTERN = re.compile(r"^(\d+)x(\d+):(.*)$", re.DOTALL)


def _person_key(index: int) -> str:
    return f"person_{index}"


def _id_key(index: int) -> str:
    return f"id_{index}"


# =============================================================================
# Validation
# =============================================================================

def _build_gallery(
    count: int,
    face_width: int,
    face_height: int,
    threshold: float,
    synthetic: bool,
    observations: List[np.ndarray],
    basis: Optional[np.ndarray],
    mean: Optional[np.ndarray],
    labels: List[int],
) -> Gallery:
    """Assemble a gallery, rejecting inconsistent content."""
    if count < 0:
        raise GalleryError(f"Negative observation count: {count}")
    if face_width <= 0 or face_height <= 0:
        raise GalleryError(f"Invalid face size {face_width}x{face_height}")
    if len(observations) != count or len(labels) != count:
        raise GalleryError("Observation and label counts do not match nIds")
    if any(label < 0 for label in labels):
        raise GalleryError("Negative identity stored in gallery")

    if count and (basis is None or mean is None):
        raise GalleryError("Gallery has observations but no projection basis")

    if basis is not None:
        if mean is None:
            raise GalleryError("Gallery has a projection basis but no mean")
        basis = np.asarray(basis, dtype=np.float64)
        mean = np.asarray(mean, dtype=np.float64).reshape(1, -1)
        if basis.ndim != 2 or basis.shape[0] != face_width * face_height:
            raise GalleryError(
                f"Projection basis shape {basis.shape} does not fit "
                f"{face_width}x{face_height} faces"
            )
        if mean.shape[1] != basis.shape[0]:
            raise GalleryError("Mean vector length does not match the basis")
        for i, obs in enumerate(observations):
            if obs.size != basis.shape[1]:
                raise GalleryError(
                    f"Observation {i} has {obs.size} features, expected {basis.shape[1]}"
                )

    return Gallery(
        face_width=face_width,
        face_height=face_height,
        threshold=threshold,
        projection_basis=basis,
        mean_vector=mean,
        projected_observations=[
            np.asarray(obs, dtype=np.float64).reshape(1, -1) for obs in observations
        ],
        labels=labels,
        synthetic=bool(synthetic) and count > 0,
    )


# =============================================================================
# String mapping
# =============================================================================

def encode_matrix(matrix: np.ndarray) -> str:
    """Encode a 2-D float64 matrix as ``<rows>x<cols>:<base64>``."""
    matrix = np.atleast_2d(np.asarray(matrix, dtype="<f8"))
    payload = base64.b64encode(np.ascontiguousarray(matrix).tobytes()).decode("ascii")
    return f"{matrix.shape[0]}x{matrix.shape[1]}:{payload}"


def decode_matrix(text: str) -> np.ndarray:
    """Decode a matrix produced by ``encode_matrix``."""
    match = _MATRIX_PATTERN.match(text)
    if not match:
        raise GalleryError("Malformed matrix value")

    rows, cols = int(match.group(1)), int(match.group(2))
    try:
        raw = base64.b64decode(match.group(3), validate=True)
    except ValueError as e:
        raise GalleryError(f"Malformed matrix payload: {e}") from e
    if len(raw) != rows * cols * 8:
        raise GalleryError(f"Matrix payload does not hold {rows}x{cols} values")

    return np.frombuffer(raw, dtype="<f8").astype(np.float64).reshape(rows, cols)


def gallery_to_config(gallery: Gallery) -> Dict[str, str]:
    """Serialize a gallery to a string mapping."""
    config = {
        "nIds": str(len(gallery)),
        "FACE_WIDTH": str(gallery.face_width),
        "FACE_HEIGHT": str(gallery.face_height),
        "THRESHOLD": repr(float(gallery.threshold)),
        "SYNTHETIC": str(int(gallery.synthetic)),
    }

    for i, obs in enumerate(gallery.projected_observations):
        config[_person_key(i)] = encode_matrix(obs)

    if gallery.trained:
        config["eigenvector"] = encode_matrix(gallery.projection_basis)
        config["mean"] = encode_matrix(gallery.mean_vector)

    for i, label in enumerate(gallery.labels):
        config[_id_key(i)] = str(label)

    return config


def gallery_from_config(config: Mapping[str, str]) -> Gallery:
    """Rebuild a gallery from a string mapping.

    Raises:
        GalleryError: if a key is missing or a value is malformed
    """
    def required(key: str) -> str:
        if key not in config:
            raise GalleryError(f"Missing key in gallery config: {key}")
        return config[key]

    try:
        count = int(required("nIds"))
        face_width = int(config.get("FACE_WIDTH", "120"))
        face_height = int(config.get("FACE_HEIGHT", "120"))
        threshold = float(config.get("THRESHOLD", "1000000.0"))
        synthetic = bool(int(config.get("SYNTHETIC", "0")))
        labels = [int(required(_id_key(i))) for i in range(count)]
    except ValueError as e:
        raise GalleryError(f"Malformed gallery config: {e}") from e

    observations = [decode_matrix(required(_person_key(i))) for i in range(count)]
    basis = decode_matrix(config["eigenvector"]) if "eigenvector" in config else None
    mean = decode_matrix(config["mean"]) if "mean" in config else None

    return _build_gallery(
        count, face_width, face_height, threshold, synthetic,
        observations, basis, mean, labels,
    )


# =============================================================================
# FileStorage document
# =============================================================================

def write_gallery(gallery: Gallery, path: Path) -> None:
    """Write a gallery to an OpenCV FileStorage file.

    Raises:
        GalleryError: if the file cannot be opened for writing
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        storage = cv2.FileStorage(str(path), cv2.FILE_STORAGE_WRITE)
    except (OSError, cv2.error) as e:
        raise GalleryError(f"Can't open file for storing: {path}: {e}") from e

    if not storage.isOpened():
        raise GalleryError(f"Can't open file for storing: {path}")

    try:
        storage.write("nIds", len(gallery))
        storage.write("FACE_WIDTH", int(gallery.face_width))
        storage.write("FACE_HEIGHT", int(gallery.face_height))
        storage.write("THRESHOLD", float(gallery.threshold))
        storage.write("SYNTHETIC", int(gallery.synthetic))

        for i, obs in enumerate(gallery.projected_observations):
            storage.write(_person_key(i), np.asarray(obs, dtype=np.float64).reshape(1, -1))

        if gallery.trained:
            storage.write("eigenvector", np.ascontiguousarray(gallery.projection_basis, dtype=np.float64))
            storage.write("mean", np.ascontiguousarray(gallery.mean_vector, dtype=np.float64))

        for i, label in enumerate(gallery.labels):
            storage.write(_id_key(i), int(label))
    finally:
        storage.release()

    logger.debug(f"Wrote {len(gallery)} projections to {path}")


def read_gallery(path: Path) -> Gallery:
    """Read a gallery written by ``write_gallery``.

    Raises:
        GalleryError: if the file is missing, unreadable or inconsistent
    """
    path = Path(path)
    if not path.is_file():
        raise GalleryError(f"Can't open config file for reading: {path}")

    try:
        storage = cv2.FileStorage(str(path), cv2.FILE_STORAGE_READ)
    except cv2.error as e:
        raise GalleryError(f"Can't parse gallery file {path}: {e}") from e

    if not storage.isOpened():
        raise GalleryError(f"Can't open config file for reading: {path}")

    try:
        def node(key: str, required: bool = True):
            value = storage.getNode(key)
            if value.empty() or value.isNone():
                if required:
                    raise GalleryError(f"Missing key in gallery file: {key}")
                return None
            return value

        def matrix(key: str, required: bool = True) -> Optional[np.ndarray]:
            value = node(key, required)
            if value is None:
                return None
            mat = value.mat()
            if mat is None:
                raise GalleryError(f"Gallery entry {key} is not a matrix")
            return np.asarray(mat, dtype=np.float64)

        count = int(node("nIds").real())
        face_width = int(node("FACE_WIDTH").real())
        face_height = int(node("FACE_HEIGHT").real())
        threshold = float(node("THRESHOLD").real())
        synthetic_node = node("SYNTHETIC", required=False)
        synthetic = bool(int(synthetic_node.real())) if synthetic_node is not None else False

        observations = [matrix(_person_key(i)) for i in range(count)]
        basis = matrix("eigenvector", required=count > 0)
        mean = matrix("mean", required=count > 0)
        labels = [int(node(_id_key(i)).real()) for i in range(count)]
    except cv2.error as e:
        raise GalleryError(f"Can't read gallery file {path}: {e}") from e
    finally:
        storage.release()

    logger.debug(f"Read {count} projections from {path}")
    return _build_gallery(
        count, face_width, face_height, threshold, synthetic,
        observations, basis, mean, labels,
    )
