"""Face detection and subspace face recognition.

Quick Start:
    from facerec import LibFace, Mode

    lib = LibFace(mode=Mode.ALL, config_dir="gallery")
    faces = lib.detect_faces_file("group.jpg")
    lib.update(faces)            # enroll, new identities written back
    lib.recognise(faces)         # [(identity, distance), ...]
    lib.save_config("gallery")
"""

from .errors import FaceRecError, GalleryError, TrainingError
from .face import UNKNOWN_ID, Face
from .detection import HaarCascadeDetector, merge_duplicates
from .library import LibFace, Mode
from .log import configure_logging
from .recognition import RECOGNITION_BACKENDS, Eigenfaces, Fisherfaces, Gallery

__version__ = "0.1.0"

__all__ = [
    "Face",
    "UNKNOWN_ID",
    "FaceRecError",
    "GalleryError",
    "TrainingError",
    "HaarCascadeDetector",
    "merge_duplicates",
    "LibFace",
    "Mode",
    "configure_logging",
    "RECOGNITION_BACKENDS",
    "Eigenfaces",
    "Fisherfaces",
    "Gallery",
]
