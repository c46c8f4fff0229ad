"""Tests for PCA, LDA and subspace projections."""

import pytest
import numpy as np


class TestRowMatrix:
    """Test cases for flattening images into observations."""

    def test_rows_follow_input_order(self):
        """Test each image becomes one float64 row."""
        from facerec.recognition.subspace import as_row_matrix

        images = [np.full((2, 3), i, dtype=np.uint8) for i in range(4)]
        data = as_row_matrix(images)

        assert data.shape == (4, 6)
        assert data.dtype == np.float64
        assert np.array_equal(data[:, 0], [0, 1, 2, 3])

    def test_size_mismatch(self):
        """Test images of different sizes are rejected."""
        from facerec.errors import TrainingError
        from facerec.recognition.subspace import as_row_matrix

        with pytest.raises(TrainingError):
            as_row_matrix([np.zeros((2, 2)), np.zeros((3, 3))])


class TestPCA:
    """Test cases for principal component analysis."""

    def test_shapes_and_order(self):
        """Test output shapes and descending eigenvalues."""
        from facerec.recognition.subspace import pca

        rng = np.random.default_rng(0)
        data = rng.normal(size=(6, 20))
        mean, eigenvalues, eigenvectors = pca(data, 3)

        assert mean.shape == (1, 20)
        assert eigenvalues.shape == (3,)
        assert eigenvectors.shape == (20, 3)
        assert np.all(np.diff(eigenvalues) <= 0)
        assert np.allclose(eigenvectors.T @ eigenvectors, np.eye(3))

    def test_dominant_direction(self):
        """Test the first component follows the axis of largest spread."""
        from facerec.recognition.subspace import pca

        data = np.array([[-10.0, 0.1], [0.0, -0.1], [10.0, 0.0], [5.0, 0.05]])
        _, _, eigenvectors = pca(data, 1)

        assert abs(abs(eigenvectors[0, 0]) - 1.0) < 1e-3

    def test_full_reconstruction(self):
        """Test keeping every component reconstructs the observations."""
        from facerec.recognition.subspace import pca, subspace_project, subspace_reconstruct

        rng = np.random.default_rng(1)
        data = rng.normal(size=(5, 12))
        mean, _, basis = pca(data)

        features = subspace_project(basis, mean, data)
        assert np.allclose(subspace_reconstruct(basis, mean, features), data)


class TestLDA:
    """Test cases for linear discriminant analysis."""

    def test_separates_classes(self):
        """Test the discriminant keeps classes apart."""
        from facerec.recognition.subspace import lda

        rng = np.random.default_rng(2)
        class_a = rng.normal(loc=(0.0, 0.0, 0.0), scale=0.2, size=(10, 3))
        class_b = rng.normal(loc=(3.0, 0.0, 0.0), scale=0.2, size=(10, 3))
        data = np.vstack([class_a, class_b])
        labels = [0] * 10 + [1] * 10

        eigenvalues, eigenvectors = lda(data, labels)
        assert eigenvectors.shape == (3, 1)
        assert eigenvalues.shape == (1,)
        assert np.isclose(np.linalg.norm(eigenvectors[:, 0]), 1.0)

        projected = data @ eigenvectors
        a, b = projected[:10, 0], projected[10:, 0]
        assert min(a.max(), b.max()) < max(a.min(), b.min())

    def test_component_limit(self):
        """Test at most C - 1 discriminants are returned."""
        from facerec.recognition.subspace import lda

        rng = np.random.default_rng(3)
        data = rng.normal(size=(12, 6))
        labels = [0, 0, 0, 0, 1, 1, 1, 1, 2, 2, 2, 2]

        _, vectors = lda(data, labels, num_components=10)
        assert vectors.shape == (6, 2)
        _, vectors = lda(data, labels, num_components=1)
        assert vectors.shape == (6, 1)

    def test_single_class(self):
        """Test one class cannot be discriminated."""
        from facerec.errors import TrainingError
        from facerec.recognition.subspace import lda

        with pytest.raises(TrainingError):
            lda(np.ones((3, 2)), [0, 0, 0])

    def test_label_count_mismatch(self):
        """Test labels must match the observations."""
        from facerec.errors import TrainingError
        from facerec.recognition.subspace import lda

        with pytest.raises(TrainingError):
            lda(np.ones((3, 2)), [0, 1])
