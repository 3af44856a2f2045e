"""Backend integration for the travel marketplace API"""

from .api_client import TravelApiClient

__all__ = ["TravelApiClient"]
