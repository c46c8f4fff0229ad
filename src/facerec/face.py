"""Face record shared by the detector and the recognizers."""

import copy
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

# Identity of a face that has not been recognized or enrolled yet
UNKNOWN_ID = -1


@dataclass
class Face:
    """A face rectangle with an optional identity and pixel buffer.

    Coordinates are top-left (x1, y1) and bottom-right (x2, y2). The
    detector fills ``image`` with the crop and leaves ``identity`` at
    ``UNKNOWN_ID``; recognition and enrollment write the identity back.
    """

    x1: int = -1
    y1: int = -1
    x2: int = -1
    y2: int = -1
    identity: int = UNKNOWN_ID
    image: Optional[np.ndarray] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.x2 < self.x1 or self.y2 < self.y1:
            raise ValueError(
                f"Invalid face rectangle ({self.x1}, {self.y1}, {self.x2}, {self.y2})"
            )

    @classmethod
    def from_bbox(
        cls,
        x: int,
        y: int,
        width: int,
        height: int,
        identity: int = UNKNOWN_ID,
        image: Optional[np.ndarray] = None,
    ) -> "Face":
        """Create a face from an (x, y, w, h) box."""
        return cls(x, y, x + width, y + height, identity=identity, image=image)

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def bbox(self) -> Tuple[int, int, int, int]:
        """Return bounding box as (x, y, w, h)."""
        return (self.x1, self.y1, self.width, self.height)

    @property
    def center(self) -> Tuple[float, float]:
        """Return center point of the rectangle."""
        return (self.x1 + self.width / 2.0, self.y1 + self.height / 2.0)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_known(self) -> bool:
        return self.identity != UNKNOWN_ID

    def copy(self) -> "Face":
        """Return an independent copy, pixel buffer included."""
        return copy.deepcopy(self)
