from location.services.location_service import LocationService

__all__ = ["LocationService"]
