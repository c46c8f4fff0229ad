"""Set of rectangle classifiers evaluated by the detector."""

import logging
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

import cv2

logger = logging.getLogger(__name__)


def default_cascade_dir() -> str:
    """Directory of the Haar cascades bundled with OpenCV."""
    return cv2.data.haarcascades  # type: ignore


class CascadeSet:
    """Ordered, name-unique collection of Haar cascade classifiers.

    Each entry holds an object exposing OpenCV's ``detectMultiScale``. An
    entry whose file could not be loaded is kept with no classifier so the
    detector can report it and move on.
    """

    def __init__(self, cascade_dir: Optional[str] = None):
        self.cascade_dir = Path(cascade_dir or default_cascade_dir())
        self._entries: List[Tuple[str, Optional[Any]]] = []

    def add(self, name: str) -> bool:
        """Load a cascade file from the cascade directory.

        Args:
            name: File name of the cascade

        Returns:
            True if the classifier loaded
        """
        if self.has(name):
            return True

        path = self.cascade_dir / name
        classifier = cv2.CascadeClassifier(str(path))
        if classifier.empty():
            logger.error(f"Could not load classifier cascade: {path}")
            self._entries.append((name, None))
            return False

        self._entries.append((name, classifier))
        logger.debug(f"Loaded cascade {name}")
        return True

    def add_classifier(self, name: str, classifier: Any) -> None:
        """Register an already constructed classifier under ``name``."""
        if self.has(name):
            return
        self._entries.append((name, classifier))

    def has(self, name: str) -> bool:
        return any(entry_name == name for entry_name, _ in self._entries)

    def remove(self, name: str) -> bool:
        for i, (entry_name, _) in enumerate(self._entries):
            if entry_name == name:
                del self._entries[i]
                return True
        return False

    def get(self, name: str) -> Optional[Any]:
        for entry_name, classifier in self._entries:
            if entry_name == name:
                return classifier
        return None

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def __iter__(self) -> Iterator[Tuple[str, Optional[Any]]]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
