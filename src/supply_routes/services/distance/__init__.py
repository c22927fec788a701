"""Distance provider backends."""

from ...config import settings
from .base import DistanceFetchError, DistanceProvider, DistanceResult, index_by_place
from .matrix_client import DistanceMatrixClient
from .predefined import PredefinedDistanceProvider


def get_distance_provider() -> DistanceProvider:
    """Build the provider selected by ``settings.distance_provider``."""
    if settings.distance_provider == "matrix":
        return DistanceMatrixClient()
    return PredefinedDistanceProvider()


__all__ = [
    "DistanceFetchError",
    "DistanceProvider",
    "DistanceResult",
    "DistanceMatrixClient",
    "PredefinedDistanceProvider",
    "get_distance_provider",
    "index_by_place",
]
