from __future__ import annotations

from facility_sources.core.models import FacilityCategory

PHARMACY_KEYWORD = "약국"
EMERGENCY_KEYWORD = "응급"


def classify_public_facility(
    name: str,
    hpid: str = "",
    division_name: str = "",
    emergency_flag: int = 0,
) -> FacilityCategory:
    """Category for data.go.kr facility rows.

    ``emergency_flag`` is ``dutyEryn``: 1 runs an emergency room, 2 does not.
    Pharmacy ids on the registry start with ``C``.
    """
    if PHARMACY_KEYWORD in name or PHARMACY_KEYWORD in division_name or hpid.startswith("C"):
        return FacilityCategory.PHARMACY
    if emergency_flag == 1 or EMERGENCY_KEYWORD in name:
        return FacilityCategory.EMERGENCY_ROOM
    if "종합병원" in division_name or "상급종합" in division_name:
        return FacilityCategory.GENERAL_HOSPITAL
    if "병원" in division_name or name.endswith("병원"):
        return FacilityCategory.GENERAL_HOSPITAL
    return FacilityCategory.CLINIC


def classify_map_place(name: str, category_name: str) -> FacilityCategory:
    """Category for map-search places (``category_name`` like ``의료,건강 > 병원 > 내과``)."""
    if PHARMACY_KEYWORD in category_name or PHARMACY_KEYWORD in name:
        return FacilityCategory.PHARMACY
    if EMERGENCY_KEYWORD in category_name or EMERGENCY_KEYWORD in name:
        return FacilityCategory.EMERGENCY_ROOM
    if "종합병원" in category_name or name.endswith("병원"):
        return FacilityCategory.GENERAL_HOSPITAL
    return FacilityCategory.CLINIC
