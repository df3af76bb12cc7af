from pydantic import BaseModel


class GeoDistanceResult(BaseModel):
    distance_km: float


class ReverseGeocodeResult(BaseModel):
    address: str
    region1: str
    region2: str


class ForwardGeocodeResult(BaseModel):
    lat: float
    lng: float
    normalized_address: str
