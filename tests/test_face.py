"""Tests for the Face record."""

import pytest
import numpy as np


class TestFace:
    """Test cases for the Face dataclass."""

    def test_defaults(self):
        """Test a default face is unknown and has no image."""
        from facerec.face import Face, UNKNOWN_ID

        face = Face()
        assert face.identity == UNKNOWN_ID
        assert face.image is None
        assert not face.is_known

    def test_geometry(self):
        """Test derived width, height, bbox and center."""
        from facerec.face import Face

        face = Face(10, 20, 90, 120)
        assert face.width == 80
        assert face.height == 100
        assert face.bbox == (10, 20, 80, 100)
        assert face.center == (50.0, 70.0)
        assert face.area == 8000

    def test_from_bbox(self):
        """Test construction from an (x, y, w, h) box."""
        from facerec.face import Face

        face = Face.from_bbox(5, 6, 30, 40, identity=3)
        assert (face.x1, face.y1, face.x2, face.y2) == (5, 6, 35, 46)
        assert face.identity == 3
        assert face.is_known

    def test_inverted_rectangle_rejected(self):
        """Test x2 < x1 or y2 < y1 raises ValueError."""
        from facerec.face import Face

        with pytest.raises(ValueError):
            Face(10, 0, 5, 10)
        with pytest.raises(ValueError):
            Face(0, 10, 10, 5)

    def test_copy_is_independent(self):
        """Test copies do not share the pixel buffer."""
        from facerec.face import Face

        face = Face(0, 0, 4, 4, image=np.zeros((4, 4), dtype=np.uint8))
        clone = face.copy()
        clone.image[0, 0] = 255
        clone.identity = 7

        assert face.image[0, 0] == 0
        assert face.identity == -1
