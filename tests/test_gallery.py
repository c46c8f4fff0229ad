"""Tests for gallery persistence."""

import pytest
import numpy as np


@pytest.fixture
def trained(recognition_config, training_set):
    """Eigenface recognizer trained on three people."""
    from facerec.recognition import Eigenfaces

    recognizer = Eigenfaces(config=recognition_config)
    recognizer.train(*training_set)
    return recognizer


def assert_same_gallery(a, b):
    assert a.labels == b.labels
    assert a.face_width == b.face_width
    assert a.face_height == b.face_height
    assert a.threshold == b.threshold
    assert a.synthetic == b.synthetic
    assert np.array_equal(a.projection_basis, b.projection_basis)
    assert np.array_equal(a.mean_vector, b.mean_vector)
    assert len(a.projected_observations) == len(b.projected_observations)
    for x, y in zip(a.projected_observations, b.projected_observations):
        assert np.array_equal(x, y)


class TestGalleryFile:
    """Test cases for the on-disk gallery."""

    def test_round_trip(self, tmp_path, trained, recognition_config, training_set):
        """Test save then load restores the gallery bit for bit."""
        from facerec.recognition import Eigenfaces

        assert trained.save_config(tmp_path)
        assert (tmp_path / "eigenfaces-gallery.xml").is_file()

        restored = Eigenfaces(config=recognition_config)
        assert restored.load_config(tmp_path)
        assert_same_gallery(trained.gallery, restored.gallery)

        image = training_set[0][4]
        assert restored.classify(image) == trained.classify(image)

    def test_load_is_idempotent(self, tmp_path, trained, recognition_config):
        """Test loading the same file twice gives the same state."""
        from facerec.recognition import Eigenfaces

        trained.save_config(tmp_path)
        restored = Eigenfaces(config=recognition_config)
        restored.load_config(tmp_path)
        first = restored.gallery.copy()
        restored.load_config(tmp_path)

        assert_same_gallery(first, restored.gallery)

    def test_constructor_loads_existing_file(self, tmp_path, trained, recognition_config):
        """Test a recognizer picks up the gallery in its config directory."""
        from facerec.recognition import Eigenfaces

        trained.save_config(tmp_path)
        restored = Eigenfaces(config_dir=tmp_path, config=recognition_config)

        assert restored.count() == trained.count()
        assert_same_gallery(trained.gallery, restored.gallery)

    def test_missing_file_keeps_state(self, tmp_path, trained):
        """Test a failed load leaves the gallery untouched."""
        before = trained.gallery
        assert not trained.load_config(tmp_path / "nowhere")
        assert trained.gallery is before

    def test_empty_gallery_round_trip(self, tmp_path, recognition_config):
        """Test an untrained gallery can be saved and loaded."""
        from facerec.recognition import Eigenfaces

        recognizer = Eigenfaces(config=recognition_config)
        assert recognizer.save_config(tmp_path)

        restored = Eigenfaces(config=recognition_config)
        assert restored.load_config(tmp_path)
        assert restored.count() == 0
        assert not restored.gallery.trained
        assert restored.gallery.face_width == 24

    def test_synthetic_flag_persisted(self, tmp_path, recognition_config, people):
        """Test the single-face placeholder stays excluded after reload."""
        from facerec.recognition import Eigenfaces

        recognizer = Eigenfaces(config=recognition_config)
        recognizer.train([people[0]], [2])
        recognizer.save_config(tmp_path)

        restored = Eigenfaces(config_dir=tmp_path, config=recognition_config)
        assert restored.gallery.synthetic
        assert restored.classify(people[0])[0] == 2

    def test_save_without_directory(self, recognition_config):
        """Test saving needs a directory."""
        from facerec.recognition import Eigenfaces

        assert not Eigenfaces(config=recognition_config).save_config()

    def test_fisher_file_name(self, tmp_path, recognition_config, training_set):
        """Test Fisherfaces use their own gallery file."""
        from facerec.recognition import Fisherfaces

        recognizer = Fisherfaces(config=recognition_config)
        recognizer.train(*training_set)
        recognizer.save_config(tmp_path)

        assert (tmp_path / "fisherfaces-gallery.xml").is_file()
        restored = Fisherfaces(config_dir=tmp_path, config=recognition_config)
        assert_same_gallery(recognizer.gallery, restored.gallery)


class TestGalleryMap:
    """Test cases for the string mapping form."""

    def test_keys(self, trained):
        """Test the mapping carries every gallery key as a string."""
        config = trained.get_config()

        assert config["nIds"] == "9"
        assert config["FACE_WIDTH"] == "24"
        assert config["FACE_HEIGHT"] == "24"
        assert "eigenvector" in config
        assert "mean" in config
        assert config["id_0"] == "0"
        assert config["id_8"] == "2"
        assert all(isinstance(value, str) for value in config.values())

    def test_round_trip(self, trained, recognition_config):
        """Test get_config then load_config restores the gallery."""
        from facerec.recognition import Eigenfaces

        restored = Eigenfaces(config=recognition_config)
        assert restored.load_config(trained.get_config())
        assert_same_gallery(trained.gallery, restored.gallery)

    def test_threshold_preserved(self, trained, recognition_config):
        """Test the threshold survives the mapping exactly."""
        from facerec.recognition import Eigenfaces

        trained.threshold = 1234.5678901234567
        restored = Eigenfaces(config=recognition_config)
        restored.load_config(trained.get_config())
        assert restored.threshold == trained.threshold

    @pytest.mark.parametrize("key,value", [
        ("nIds", "many"),
        ("person_3", "2x2:AAAA"),
        ("eigenvector", "not a matrix"),
        ("mean", "1x5:" + "A" * 12),
        ("id_1", "-4"),
    ])
    def test_malformed_values(self, trained, recognition_config, key, value):
        """Test malformed entries are rejected without changing state."""
        from facerec.recognition import Eigenfaces

        config = trained.get_config()
        config[key] = value

        recognizer = Eigenfaces(config=recognition_config)
        before = recognizer.gallery
        assert not recognizer.load_config(config)
        assert recognizer.gallery is before

    def test_missing_key(self, trained, recognition_config):
        """Test a missing observation is rejected."""
        from facerec.recognition import Eigenfaces

        config = trained.get_config()
        del config["person_5"]

        assert not Eigenfaces(config=recognition_config).load_config(config)

    def test_matrix_encoding(self):
        """Test matrices keep their shape and exact values."""
        from facerec.recognition.storage import decode_matrix, encode_matrix

        matrix = np.array([[0.1, -2.5e-300, 3.0], [np.pi, 1e300, -0.0]])
        text = encode_matrix(matrix)

        assert text.startswith("2x3:")
        assert np.array_equal(decode_matrix(text), matrix)
