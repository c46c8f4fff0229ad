"""Face detection.

- CascadeSet: the rectangle classifiers evaluated on each image
- HaarCascadeDetector: multi-scale, auto-tuned Haar cascade search
- merge_duplicates: collapses overlapping candidates from several cascades
"""

from .base import BaseFaceDetector
from .cascades import CascadeSet, default_cascade_dir
from .haar import HaarCascadeDetector, SearchPlan
from .merge import center_distance, merge_duplicates

__all__ = [
    "BaseFaceDetector",
    "CascadeSet",
    "default_cascade_dir",
    "HaarCascadeDetector",
    "SearchPlan",
    "center_distance",
    "merge_duplicates",
]
