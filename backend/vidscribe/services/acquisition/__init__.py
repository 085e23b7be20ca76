"""
Acquisition package: media URL -> local audio artifact.

Usage:
    from vidscribe.services.acquisition import AcquisitionStrategyCascade

    cascade = AcquisitionStrategyCascade.from_settings(settings, cookies_file)
    result = await cascade.acquire(url)
"""

from vidscribe.services.acquisition.classifier import AccessBlockClassifier, MarkerClassifier
from vidscribe.services.acquisition.downloader import AcquisitionStrategyCascade
from vidscribe.services.acquisition.errors import (
    AcquisitionError,
    AllStrategiesExhaustedError,
    ArtifactMissingError,
    ToolInvocationError,
)
from vidscribe.services.acquisition.strategies import RestrictedPlatform, StrategyCatalog

__all__ = [
    "AcquisitionStrategyCascade",
    # Strategies
    "StrategyCatalog",
    "RestrictedPlatform",
    # Classification
    "AccessBlockClassifier",
    "MarkerClassifier",
    # Errors
    "AcquisitionError",
    "ToolInvocationError",
    "ArtifactMissingError",
    "AllStrategiesExhaustedError",
]
