"""Unit tests for image classification services."""

import unittest
from unittest.mock import Mock, patch
import sys
import os

import cv2
import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cat_security_system.services.error_handler import global_error_handler
from cat_security_system.services.image_service import FakeImageService, OpenCVImageService


class TestOpenCVImageService(unittest.TestCase):
    """Test cases for OpenCVImageService."""

    def setUp(self):
        """Set up test fixtures."""
        self.service = OpenCVImageService()

    def test_initialization_loads_bundled_cascade(self):
        """The cat cascade shipped with OpenCV is used by default."""
        self.assertIsNotNone(self.service.cascade)
        self.assertTrue(self.service.cascade_path.startswith(cv2.data.haarcascades))
        self.assertIn("frontalcatface", self.service.cascade_path)

    def test_missing_cascade_path_falls_back(self):
        """A configured path that does not exist falls back to the bundled cascade."""
        service = OpenCVImageService("/nonexistent/cascade.xml")
        self.assertTrue(service.cascade_path.startswith(cv2.data.haarcascades))

    def test_no_cascade_available(self):
        """Without any cascade the service cannot start."""
        with patch.object(cv2.data, 'haarcascades', '/nonexistent/'):
            with self.assertRaises(RuntimeError):
                OpenCVImageService()

    def test_blank_image_has_no_cat(self):
        """A uniform frame contains no cat."""
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        self.assertFalse(self.service.image_contains_cat(frame, 50.0))

    def test_grayscale_image(self):
        frame = np.full((240, 320), 128, dtype=np.uint8)
        self.assertFalse(self.service.image_contains_cat(frame, 50.0))

    def test_empty_image(self):
        self.assertFalse(self.service.image_contains_cat(np.zeros((0, 0, 3), dtype=np.uint8), 50.0))
        self.assertFalse(self.service.image_contains_cat(None, 50.0))

    def test_threshold_applied_to_detections(self):
        """Detections count only when their score reaches the threshold."""
        self.service.cascade = Mock()
        self.service.cascade.detectMultiScale.return_value = np.array([[270, 190, 100, 100]])
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        self.assertTrue(self.service.image_contains_cat(frame, 50.0))
        self.assertFalse(self.service.image_contains_cat(frame, 99.9))

    def test_score_prefers_large_central_boxes(self):
        shape = (480, 640, 3)
        central = self.service._score((220, 140, 200, 200), shape)
        corner = self.service._score((0, 0, 30, 30), shape)

        self.assertGreater(central, corner)
        self.assertGreaterEqual(corner, 60.0)
        self.assertLessEqual(central, 100.0)

    def test_detection_failure_is_recorded(self):
        """A failing cascade is reported and treated as no detections."""
        self.service.cascade = Mock()
        self.service.cascade.detectMultiScale.side_effect = RuntimeError("cascade failure")
        errors_before = global_error_handler.component_error_counts.get("image_service", 0)

        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        self.assertFalse(self.service.image_contains_cat(frame, 50.0))
        self.assertEqual(global_error_handler.component_error_counts["image_service"], errors_before + 1)

    def test_set_detection_parameters(self):
        self.service.set_detection_parameters(
            scale_factor=1.2,
            min_neighbors=5,
            min_size=(50, 50),
            max_size=(200, 200)
        )

        self.assertEqual(self.service.scale_factor, 1.2)
        self.assertEqual(self.service.min_neighbors, 5)
        self.assertEqual(self.service.min_detection_size, (50, 50))
        self.assertEqual(self.service.max_detection_size, (200, 200))


class TestFakeImageService(unittest.TestCase):
    """Test cases for FakeImageService."""

    def test_threshold_bounds(self):
        service = FakeImageService()
        frame = np.zeros((10, 10, 3), dtype=np.uint8)
        for _ in range(20):
            self.assertFalse(service.image_contains_cat(frame, 100.0))
            self.assertTrue(service.image_contains_cat(frame, -1.0))

    def test_seeded_results_repeat(self):
        frame = np.zeros((10, 10, 3), dtype=np.uint8)
        first = FakeImageService(seed=7)
        second = FakeImageService(seed=7)
        self.assertEqual(
            [first.image_contains_cat(frame, 50.0) for _ in range(10)],
            [second.image_contains_cat(frame, 50.0) for _ in range(10)]
        )


if __name__ == '__main__':
    unittest.main()
