"""Unsplash integration modules."""

from unsplash.client import UnsplashClient
from unsplash.rate_limit import HourlyRequestWindow

__all__ = ["HourlyRequestWindow", "UnsplashClient"]
