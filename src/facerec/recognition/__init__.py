"""Face recognition.

- Eigenfaces: PCA subspace
- Fisherfaces: PCA followed by LDA
"""

from .base import BaseRecognizer
from .eigenfaces import Eigenfaces
from .fisherfaces import Fisherfaces
from .gallery import Gallery
from .storage import gallery_from_config, gallery_to_config, read_gallery, write_gallery

RECOGNITION_BACKENDS = {
    "eigen": Eigenfaces,
    "fisher": Fisherfaces,
}

__all__ = [
    "BaseRecognizer",
    "Eigenfaces",
    "Fisherfaces",
    "Gallery",
    "RECOGNITION_BACKENDS",
    "gallery_from_config",
    "gallery_to_config",
    "read_gallery",
    "write_gallery",
]
