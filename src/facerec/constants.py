"""Centralized constants and configuration loader.

This module provides access to configuration values and sensible defaults
for the detection and recognition constants used throughout the library.
Values are loaded from config/config.yaml when available, otherwise defaults
are used.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default if None.

    Returns:
        Configuration dictionary.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")

    return {}


def _get_nested(config: Dict, *keys: str, default: Any = None) -> Any:
    """Get nested config value with default fallback."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


# ============================================================
# Detection Accuracy Profiles
# ============================================================

@dataclass(frozen=True)
class AccuracyProfile:
    """Search parameters for one detection accuracy level."""
    # Multiplier applied to the search window between passes
    search_increment: float
    # Increasing minimum face sizes; the search starts at the first one
    min_sizes: Tuple[int, int, int, int]
    # Minimum neighbouring hits for a candidate to survive grouping
    grouping: int


ACCURACY_PROFILES: Dict[int, AccuracyProfile] = {
    1: AccuracyProfile(1.269, (1, 20, 26, 35), 1),
    2: AccuracyProfile(1.2, (1, 20, 30, 40), 3),
    3: AccuracyProfile(1.21, (1, 20, 26, 35), 3),
    4: AccuracyProfile(1.268, (1, 30, 40, 50), 2),
}

DEFAULT_ACCURACY = 1

# (minimum input area, accuracy level) checked from largest to smallest.
# Inputs above the smallest band are downsampled to WORKING_AREA first.
AREA_BANDS: Tuple[Tuple[int, int], ...] = (
    (7_000_000, 3),
    (5_000_000, 2),
    (2_000_000, 4),
)

WORKING_AREA = 786_432


# ============================================================
# Face Detection Constants
# ============================================================

@dataclass
class DetectionConfig:
    """Face detection constants."""
    # Cascade files evaluated, in order
    cascades: Tuple[str, ...] = ("haarcascade_frontalface_alt2.xml",)
    # Directory holding the cascade files (None = OpenCV's bundled data)
    cascade_dir: Optional[str] = None
    # Starting accuracy level (1-4)
    accuracy: int = DEFAULT_ACCURACY
    # Images smaller than this in either dimension are rejected
    min_image_size: int = 50
    # Fraction trimmed from each side of a detected box
    box_shrink: float = 0.1
    # Center distance below which two candidates are duplicates
    max_distance: int = 20
    # Duplicates required for a candidate to survive a multi-cascade merge
    min_duplicates: int = 0
    # Area (one dimension) recommended for detection input
    recommended_image_size: int = 800

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DetectionConfig":
        """Create from config dictionary."""
        det = _get_nested(config, "face_detection") or {}
        cascades: List[str] = det.get("cascades", ["haarcascade_frontalface_alt2.xml"])

        return cls(
            cascades=tuple(cascades),
            cascade_dir=det.get("cascade_dir"),
            accuracy=det.get("accuracy", DEFAULT_ACCURACY),
            min_image_size=det.get("min_image_size", 50),
            box_shrink=det.get("box_shrink", 0.1),
            max_distance=det.get("max_distance", 20),
            min_duplicates=det.get("min_duplicates", 0),
            recommended_image_size=det.get("recommended_image_size", 800),
        )


# ============================================================
# Face Recognition Constants
# ============================================================

@dataclass
class RecognitionConfig:
    """Face recognition constants."""
    # Canonical (width, height) every face is resized to
    face_size: Tuple[int, int] = (120, 120)
    # Largest nearest-neighbour distance accepted as a match
    threshold: float = 1000000.0
    # Gallery file names, one per strategy
    eigen_filename: str = "eigenfaces-gallery.xml"
    fisher_filename: str = "fisherfaces-gallery.xml"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RecognitionConfig":
        """Create from config dictionary."""
        rec = _get_nested(config, "face_recognition") or {}
        face_size = rec.get("face_size", [120, 120])

        return cls(
            face_size=tuple(face_size),
            threshold=float(rec.get("threshold", 1000000.0)),
            eigen_filename=rec.get("eigen_filename", "eigenfaces-gallery.xml"),
            fisher_filename=rec.get("fisher_filename", "fisherfaces-gallery.xml"),
        )


# ============================================================
# Global Config Instance (lazy loaded)
# ============================================================

class Config:
    """Global configuration singleton."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load configuration from file."""
        self._config = load_config()
        self._detection: Optional[DetectionConfig] = None
        self._recognition: Optional[RecognitionConfig] = None

    def reload(self, config_path: Optional[Path] = None) -> None:
        """Reload configuration from file."""
        self._config = load_config(config_path)
        # Reset cached configs
        self._detection = None
        self._recognition = None

    @property
    def detection(self) -> DetectionConfig:
        """Get face detection config."""
        if self._detection is None:
            self._detection = DetectionConfig.from_config(self._config)
        return self._detection

    @property
    def recognition(self) -> RecognitionConfig:
        """Get face recognition config."""
        if self._recognition is None:
            self._recognition = RecognitionConfig.from_config(self._config)
        return self._recognition


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()


# Convenience accessors
def get_detection_config() -> DetectionConfig:
    """Get face detection configuration."""
    return get_config().detection


def get_recognition_config() -> RecognitionConfig:
    """Get face recognition configuration."""
    return get_config().recognition
