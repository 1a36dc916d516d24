"""Image classification services that decide whether a frame contains a cat."""

import os
import random
import time
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..config.defaults import CLASSIFIER_SETTINGS
from ..logging_config import get_logger, log_performance
from .error_handler import global_error_handler, ErrorSeverity, with_error_handling
from .interfaces import ImageServiceInterface

logger = get_logger("image_service")


class OpenCVImageService(ImageServiceInterface):
    """Cat classifier using OpenCV Haar cascades.

    Each detected box is scored from its size and distance to the frame
    center; the frame contains a cat when any score reaches the threshold.
    """

    def __init__(self, cascade_path: Optional[str] = None):
        self.cascade = None
        self.cascade_path = None

        self.scale_factor = CLASSIFIER_SETTINGS["scale_factor"]
        self.min_neighbors = CLASSIFIER_SETTINGS["min_neighbors"]
        self.min_detection_size = CLASSIFIER_SETTINGS["min_size"]
        self.max_detection_size = CLASSIFIER_SETTINGS["max_size"]
        self.blur_kernel_size = CLASSIFIER_SETTINGS["blur_kernel_size"]
        self.contrast_alpha = CLASSIFIER_SETTINGS["contrast_alpha"]
        self.brightness_beta = CLASSIFIER_SETTINGS["brightness_beta"]

        global_error_handler.register_component("image_service")

        self.load_model(cascade_path)

    def load_model(self, cascade_path: Optional[str] = None) -> None:
        """Load a cascade from ``cascade_path`` or from OpenCV's bundled cat cascades.

        Raises:
            RuntimeError: if no usable cascade is found
        """
        candidates = []
        if cascade_path:
            candidates.append(cascade_path)
        candidates.extend(cv2.data.haarcascades + name
                          for name in CLASSIFIER_SETTINGS["cascade_files"])

        for path in candidates:
            if not os.path.exists(path):
                logger.debug(f"Cascade not found: {path}")
                continue
            cascade = cv2.CascadeClassifier(path)
            if cascade.empty():
                logger.warning(f"Failed to load cascade from {path}")
                continue
            self.cascade = cascade
            self.cascade_path = path
            logger.info(f"Loaded Haar cascade: {path}")
            return

        raise RuntimeError("No usable cat Haar cascade found")

    def set_detection_parameters(self,
                                 scale_factor: float = 1.1,
                                 min_neighbors: int = 3,
                                 min_size: Tuple[int, int] = (30, 30),
                                 max_size: Tuple[int, int] = (300, 300)) -> None:
        """Set Haar cascade detection parameters."""
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_detection_size = min_size
        self.max_detection_size = max_size

        logger.info(f"Detection parameters updated: scale_factor={scale_factor}, "
                    f"min_neighbors={min_neighbors}, min_size={min_size}, max_size={max_size}")

    def image_contains_cat(self, image: np.ndarray, confidence_threshold: float) -> bool:
        if image is None or image.size == 0:
            return False

        start_time = time.time()
        processed = self._preprocess_frame(image)
        boxes = self._detect(processed) or []
        scores = [self._score(box, image.shape) for box in boxes]
        contains_cat = any(score >= confidence_threshold for score in scores)

        elapsed = time.time() - start_time
        log_performance("Image classified", {
            "detections": len(boxes),
            "best_score": f"{max(scores):.1f}" if scores else "n/a",
            "threshold": confidence_threshold,
            "seconds": f"{elapsed:.4f}"
        })
        logger.debug(f"Classified image: {len(boxes)} boxes, cat={contains_cat}")
        return contains_cat

    def _preprocess_frame(self, frame: np.ndarray) -> np.ndarray:
        """Grayscale, blur, boost contrast and equalize the frame."""
        if len(frame.shape) == 3:
            gray = cv2.cvtColor(frame, cv2.COLOR_RGB2GRAY)
        else:
            gray = frame

        if gray.dtype != np.uint8:
            gray = cv2.convertScaleAbs(gray)

        blurred = cv2.GaussianBlur(gray, (self.blur_kernel_size, self.blur_kernel_size), 0)
        enhanced = cv2.convertScaleAbs(blurred, alpha=self.contrast_alpha, beta=self.brightness_beta)
        return cv2.equalizeHist(enhanced)

    @with_error_handling("image_service", ErrorSeverity.MEDIUM)
    def _detect(self, frame: np.ndarray) -> List[Tuple[int, int, int, int]]:
        detections = self.cascade.detectMultiScale(
            frame,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_detection_size,
            maxSize=self.max_detection_size,
            flags=cv2.CASCADE_SCALE_IMAGE
        )
        return [(int(x), int(y), int(w), int(h)) for x, y, w, h in detections]

    def _score(self, box: Tuple[int, int, int, int], frame_shape: Tuple[int, ...]) -> float:
        """Score a detection from 0 to 100; larger and more central boxes score higher."""
        x, y, w, h = box
        frame_h, frame_w = frame_shape[:2]

        center_x = x + w // 2
        center_y = y + h // 2
        center_dist = ((center_x - frame_w // 2) ** 2 + (center_y - frame_h // 2) ** 2) ** 0.5
        max_dist = (frame_w ** 2 + frame_h ** 2) ** 0.5
        center_factor = 1.0 - (center_dist / max_dist)

        max_area = self.max_detection_size[0] * self.max_detection_size[1]
        size_factor = min(1.0, (w * h) / max_area)

        confidence = 0.6 + 0.2 * center_factor + 0.2 * size_factor
        return max(0.0, min(1.0, confidence)) * 100.0


class FakeImageService(ImageServiceInterface):
    """Randomly reports cats; stands in for a real classifier in demos."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def image_contains_cat(self, image: np.ndarray, confidence_threshold: float) -> bool:
        return self._random.random() * 100.0 > confidence_threshold
