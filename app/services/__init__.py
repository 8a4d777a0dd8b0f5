from app.services.geocoding import geocoding_service

__all__ = ["geocoding_service"]
