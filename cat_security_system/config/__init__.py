"""Configuration components for the cat security system."""

from .defaults import (
    IMAGE_SERVICES,
    DEFAULT_PATHS,
    STORE_KEYS,
    CLASSIFIER_SETTINGS
)

__all__ = [
    'IMAGE_SERVICES',
    'DEFAULT_PATHS',
    'STORE_KEYS',
    'CLASSIFIER_SETTINGS'
]
