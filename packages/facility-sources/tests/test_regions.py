import pytest

from facility_sources.core.exceptions import UnsupportedRegion
from facility_sources.core.models import FacilityQuery, RegionQuery
from facility_sources.regions import REGION_ENTRIES, RegionEntry, RegionTable, load_region_table


def test_region_table_has_every_province() -> None:
    table = load_region_table()

    assert len(table.entries) == 17
    assert {entry.admin_code for entry in table.entries} >= {"11", "26", "41", "50"}


@pytest.mark.parametrize("name", ["서울", "서울특별시", "서울시", " 서울 "])
def test_short_long_and_alias_names_resolve(name: str) -> None:
    region = load_region_table().resolve(RegionQuery(name, "강남구"))

    assert region.long_name == "서울특별시"
    assert region.short_name == "서울"
    assert region.admin_code == "11"
    assert region.hira_code == "110000"
    assert region.district == "강남구"


def test_former_province_names_resolve() -> None:
    table = load_region_table()

    assert table.resolve(RegionQuery("강원도")).admin_code == table.resolve(RegionQuery("강원")).admin_code
    assert table.resolve(RegionQuery("제주도")).long_name == "제주특별자치도"


def test_unknown_region_raises() -> None:
    with pytest.raises(UnsupportedRegion):
        load_region_table().resolve(RegionQuery("화성"))


def test_blank_district_is_dropped() -> None:
    assert load_region_table().resolve(RegionQuery("부산", "  ")).district is None


def test_validation_rejects_bad_codes() -> None:
    broken = REGION_ENTRIES + (RegionEntry("가상특별시", "가상", "9", "12"),)

    with pytest.raises(ValueError):
        load_region_table(broken)


def test_duplicate_names_are_rejected() -> None:
    with pytest.raises(ValueError):
        RegionTable((RegionEntry("서울특별시", "서울", "11", "110000"), RegionEntry("서울시청", "서울", "99", "990000")))


def test_facility_query_builds_region_query_only_with_region1() -> None:
    assert FacilityQuery(lat=37.5, lng=127.0).region_query is None
    assert FacilityQuery(region1="서울", region2="강남구").region_query == RegionQuery("서울", "강남구")
