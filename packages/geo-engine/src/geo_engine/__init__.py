"""Geo engine core package."""

from geo_engine.distance import EARTH_RADIUS_KM, haversine_distance_km, haversine_distance_meters
from geo_engine.geofence import is_point_inside_radius
from geo_engine.models import GeoPoint

__all__ = [
    "EARTH_RADIUS_KM",
    "GeoPoint",
    "haversine_distance_km",
    "haversine_distance_meters",
    "is_point_inside_radius",
]
