"""Utility functions for the cat security system."""

import io
import os
from datetime import datetime

import numpy as np
from PIL import Image


def ensure_directory_exists(path: str) -> None:
    """Ensure a directory exists, create if it doesn't."""
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


def format_timestamp(dt: datetime) -> str:
    """Format datetime for consistent display."""
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (JPEG, PNG, ...) into an RGB array.

    Raises:
        ValueError: if the bytes are not a readable image
    """
    if not data:
        raise ValueError("Empty image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            return np.asarray(img.convert("RGB"))
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Unreadable image: {e}") from e
