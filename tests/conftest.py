"""Pytest configuration and fixtures."""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeClassifier:
    """Stand-in for cv2.CascadeClassifier returning fixed rectangles."""

    def __init__(self, rects=()):
        self.rects = [tuple(r) for r in rects]
        self.calls = []

    def detectMultiScale(self, image, scaleFactor=1.1, minNeighbors=3, flags=0, minSize=(0, 0)):
        self.calls.append({
            "shape": image.shape,
            "dtype": image.dtype,
            "scaleFactor": scaleFactor,
            "minNeighbors": minNeighbors,
            "flags": flags,
            "minSize": minSize,
        })
        if not self.rects:
            return ()
        return np.array(self.rects, dtype=np.int32)


def make_person(seed, size=(24, 24)):
    """Random base pattern standing in for one person's face."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(size[1], size[0])).astype(np.uint8)


def make_sample(base, seed, noise=4.0):
    """Noisy observation of a person's base pattern."""
    rng = np.random.default_rng(1000 + seed)
    noisy = base.astype(np.float64) + rng.normal(0.0, noise, size=base.shape)
    return np.clip(noisy, 0, 255).astype(np.uint8)


@pytest.fixture
def fake_classifier():
    """Factory for fake cascade classifiers."""
    return FakeClassifier


@pytest.fixture
def people():
    """Three distinct 24x24 face patterns."""
    return [make_person(seed) for seed in range(3)]


@pytest.fixture
def training_set(people):
    """Three noisy samples of each person, labels 0, 1, 2."""
    images, labels = [], []
    for label, base in enumerate(people):
        for i in range(3):
            images.append(make_sample(base, seed=label * 10 + i))
            labels.append(label)
    return images, labels


@pytest.fixture
def detection_config():
    """Default detection constants, independent of config.yaml."""
    from facerec.constants import DetectionConfig

    return DetectionConfig()


@pytest.fixture
def recognition_config():
    """Recognition constants with small 24x24 faces."""
    from facerec.constants import RecognitionConfig

    return RecognitionConfig(face_size=(24, 24))


@pytest.fixture
def sample_image():
    """Create a sample test image."""
    return np.random.randint(0, 255, (480, 640, 3), dtype=np.uint8)


@pytest.fixture
def sample_grayscale_image():
    """Create a sample grayscale test image."""
    return np.random.randint(0, 255, (480, 640), dtype=np.uint8)


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        "face_detection": {
            "cascades": ["haarcascade_frontalface_alt2.xml", "haarcascade_frontalface_default.xml"],
            "accuracy": 2,
            "min_duplicates": 1,
        },
        "face_recognition": {
            "face_size": [60, 80],
            "threshold": 2500.0,
        },
    }
