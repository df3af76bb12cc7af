"""Administrative region names and the numeric code schemes upstreams use.

Two numbering schemes are carried per province: the 2-digit administrative
(legal-dong) prefix and the 6-digit HIRA region code. Former names of renamed
provinces are kept as aliases so older clients keep resolving.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from facility_sources.core.exceptions import UnsupportedRegion
from facility_sources.core.models import RegionQuery, ResolvedRegion


@dataclass(frozen=True)
class RegionEntry:
    long_name: str
    short_name: str
    admin_code: str
    hira_code: str
    aliases: tuple[str, ...] = ()
    districts: tuple[str, ...] = ()


REGION_ENTRIES: tuple[RegionEntry, ...] = (
    RegionEntry(
        "서울특별시", "서울", "11", "110000", ("서울시",),
        (
            "종로구", "중구", "용산구", "성동구", "광진구", "동대문구", "중랑구", "성북구", "강북구",
            "도봉구", "노원구", "은평구", "서대문구", "마포구", "양천구", "강서구", "구로구", "금천구",
            "영등포구", "동작구", "관악구", "서초구", "강남구", "송파구", "강동구",
        ),
    ),
    RegionEntry(
        "부산광역시", "부산", "26", "210000", ("부산시",),
        (
            "중구", "서구", "동구", "영도구", "부산진구", "동래구", "남구", "북구", "해운대구",
            "사하구", "금정구", "강서구", "연제구", "수영구", "사상구", "기장군",
        ),
    ),
    RegionEntry(
        "대구광역시", "대구", "27", "230000", ("대구시",),
        ("중구", "동구", "서구", "남구", "북구", "수성구", "달서구", "달성군", "군위군"),
    ),
    RegionEntry(
        "인천광역시", "인천", "28", "220000", ("인천시",),
        ("중구", "동구", "미추홀구", "연수구", "남동구", "부평구", "계양구", "서구", "강화군", "옹진군"),
    ),
    RegionEntry("광주광역시", "광주", "29", "240000", (), ("동구", "서구", "남구", "북구", "광산구")),
    RegionEntry("대전광역시", "대전", "30", "250000", ("대전시",), ("동구", "중구", "서구", "유성구", "대덕구")),
    RegionEntry("울산광역시", "울산", "31", "260000", ("울산시",), ("중구", "남구", "동구", "북구", "울주군")),
    RegionEntry("세종특별자치시", "세종", "36", "410000", ("세종시",)),
    RegionEntry(
        "경기도", "경기", "41", "310000", (),
        (
            "수원시", "성남시", "의정부시", "안양시", "부천시", "광명시", "평택시", "동두천시", "안산시",
            "고양시", "과천시", "구리시", "남양주시", "오산시", "시흥시", "군포시", "의왕시", "하남시",
            "용인시", "파주시", "이천시", "안성시", "김포시", "화성시", "광주시", "양주시", "포천시",
            "여주시", "연천군", "가평군", "양평군",
        ),
    ),
    RegionEntry(
        "강원특별자치도", "강원", "51", "320000", ("강원도",),
        (
            "춘천시", "원주시", "강릉시", "동해시", "태백시", "속초시", "삼척시", "홍천군", "횡성군",
            "영월군", "평창군", "정선군", "철원군", "화천군", "양구군", "인제군", "고성군", "양양군",
        ),
    ),
    RegionEntry(
        "충청북도", "충북", "43", "330000", (),
        ("청주시", "충주시", "제천시", "보은군", "옥천군", "영동군", "증평군", "진천군", "괴산군", "음성군", "단양군"),
    ),
    RegionEntry(
        "충청남도", "충남", "44", "340000", (),
        (
            "천안시", "공주시", "보령시", "아산시", "서산시", "논산시", "계룡시", "당진시", "금산군",
            "부여군", "서천군", "청양군", "홍성군", "예산군", "태안군",
        ),
    ),
    RegionEntry(
        "전북특별자치도", "전북", "52", "350000", ("전라북도",),
        (
            "전주시", "군산시", "익산시", "정읍시", "남원시", "김제시", "완주군", "진안군", "무주군",
            "장수군", "임실군", "순창군", "고창군", "부안군",
        ),
    ),
    RegionEntry(
        "전라남도", "전남", "46", "360000", (),
        (
            "목포시", "여수시", "순천시", "나주시", "광양시", "담양군", "곡성군", "구례군", "고흥군",
            "보성군", "화순군", "장흥군", "강진군", "해남군", "영암군", "무안군", "함평군", "영광군",
            "장성군", "완도군", "진도군", "신안군",
        ),
    ),
    RegionEntry(
        "경상북도", "경북", "47", "370000", (),
        (
            "포항시", "경주시", "김천시", "안동시", "구미시", "영주시", "영천시", "상주시", "문경시",
            "경산시", "의성군", "청송군", "영양군", "영덕군", "청도군", "고령군", "성주군", "칠곡군",
            "예천군", "봉화군", "울진군", "울릉군",
        ),
    ),
    RegionEntry(
        "경상남도", "경남", "48", "380000", (),
        (
            "창원시", "진주시", "통영시", "사천시", "김해시", "밀양시", "거제시", "양산시", "의령군",
            "함안군", "창녕군", "고성군", "남해군", "하동군", "산청군", "함양군", "거창군", "합천군",
        ),
    ),
    RegionEntry("제주특별자치도", "제주", "50", "390000", ("제주도",), ("제주시", "서귀포시")),
)


class RegionTable:
    def __init__(self, entries: tuple[RegionEntry, ...]) -> None:
        self._entries = entries
        lookup: dict[str, RegionEntry] = {}
        for entry in entries:
            for name in (entry.long_name, entry.short_name, *entry.aliases):
                if name in lookup and lookup[name] is not entry:
                    raise ValueError(f"region name '{name}' maps to more than one province")
                lookup[name] = entry
        self._lookup = MappingProxyType(lookup)

    @property
    def entries(self) -> tuple[RegionEntry, ...]:
        return self._entries

    def find(self, region1: str) -> RegionEntry | None:
        return self._lookup.get(region1.strip())

    def resolve(self, query: RegionQuery) -> ResolvedRegion:
        entry = self.find(query.region1) if query.region1 else None
        if entry is None:
            raise UnsupportedRegion(f"region '{query.region1}' is not supported")
        district = query.region2.strip() if query.region2 and query.region2.strip() else None
        return ResolvedRegion(
            long_name=entry.long_name,
            short_name=entry.short_name,
            admin_code=entry.admin_code,
            hira_code=entry.hira_code,
            district=district,
        )

    def validate(self) -> None:
        problems: list[str] = []
        admin_codes: set[str] = set()
        for entry in self._entries:
            if not (entry.admin_code.isdigit() and len(entry.admin_code) == 2):
                problems.append(f"{entry.long_name}: invalid admin code '{entry.admin_code}'")
            if not (entry.hira_code.isdigit() and len(entry.hira_code) == 6):
                problems.append(f"{entry.long_name}: invalid HIRA code '{entry.hira_code}'")
            if entry.admin_code in admin_codes:
                problems.append(f"{entry.long_name}: duplicate admin code '{entry.admin_code}'")
            admin_codes.add(entry.admin_code)
            if len(set(entry.districts)) != len(entry.districts):
                problems.append(f"{entry.long_name}: duplicate district names")
        if problems:
            raise ValueError("region table is incomplete: " + "; ".join(problems))


def load_region_table(entries: tuple[RegionEntry, ...] = REGION_ENTRIES) -> RegionTable:
    table = RegionTable(entries)
    table.validate()
    return table
