"""Geocoding provider adapters."""

from location.providers.base import HttpProvider
from location.providers.factory import ProviderSet, build_providers
from location.providers.google import GoogleProvider
from location.providers.mappls import MapplsProvider
from location.providers.nominatim import NominatimProvider
from location.providers.photon import PhotonProvider

__all__ = [
    "GoogleProvider",
    "HttpProvider",
    "MapplsProvider",
    "NominatimProvider",
    "PhotonProvider",
    "ProviderSet",
    "build_providers",
]
