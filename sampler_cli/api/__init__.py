"""
Audio Service API Layer.

This package handles all communication with the remote audio processing service.
"""

from .client import AudioServiceClient, HealthStatus

__all__ = ["AudioServiceClient", "HealthStatus"]
