"""Distance and travel-time estimates between consecutive activities."""

import math

from travelrag.app.config import Settings, get_settings
from travelrag.app.models.common import Geo
from travelrag.app.models.schedule import Activity

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Geo, b: Geo) -> float:
    """Great-circle distance between two points in km."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lng - a.lng)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


class TravelEstimator:
    """Estimates walking distance and time between activities."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.walking_speed_kmh = settings.walking_speed_kmh
        self.navigation_buffer_min = settings.navigation_buffer_min
        self.default_distance_km = settings.default_distance_km
        self.same_district_km = dict(settings.same_district_km)

    def distance_km(self, origin: Activity, destination: Activity) -> float:
        """Haversine when both have coordinates, else the district heuristic."""
        if origin.coordinates and destination.coordinates:
            return haversine_km(origin.coordinates, destination.coordinates)

        for district, distance in self.same_district_km.items():
            if district in origin.address and district in destination.address:
                return distance
        return self.default_distance_km

    def travel_minutes(self, distance_km: float) -> int:
        """Walking time plus a navigation buffer, rounded up."""
        return math.ceil(distance_km / self.walking_speed_kmh * 60) + self.navigation_buffer_min
