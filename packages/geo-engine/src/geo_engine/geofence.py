from geo_engine.distance import haversine_distance_km
from geo_engine.models import GeoPoint


def is_point_inside_radius(center: GeoPoint, point: GeoPoint, radius_km: float) -> bool:
    if radius_km < 0:
        raise ValueError("radius_km must be >= 0")
    return haversine_distance_km(center, point) <= radius_km
