from __future__ import annotations

import re

GENERAL_DEPARTMENT = "일반"

# Priority order: keywords containing a shorter keyword come first.
DEPARTMENT_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("정신건강의학과", "정신건강의학과"),
    ("정신과", "정신건강의학과"),
    ("소아청소년과", "소아청소년과"),
    ("소아과", "소아청소년과"),
    ("이비인후과", "이비인후과"),
    ("산부인과", "산부인과"),
    ("재활의학과", "재활의학과"),
    ("가정의학과", "가정의학과"),
    ("비뇨의학과", "비뇨기과"),
    ("비뇨기과", "비뇨기과"),
    ("정형외과", "정형외과"),
    ("피부과", "피부과"),
    ("안과", "안과"),
    ("치과", "치과"),
    ("한의원", "한의원"),
    ("한방", "한의원"),
    ("신경과", "신경과"),
    ("내과", "내과"),
    ("외과", "외과"),
)

DEPARTMENTS: tuple[str, ...] = tuple(dict.fromkeys(tag for _, tag in DEPARTMENT_KEYWORDS))

_WHITESPACE = re.compile(r"\s+")


def classify_department(facility_name: str | None) -> str:
    if not facility_name:
        return GENERAL_DEPARTMENT
    compact = _WHITESPACE.sub("", facility_name)
    for keyword, department in DEPARTMENT_KEYWORDS:
        if keyword in compact:
            return department
    return GENERAL_DEPARTMENT


def is_known_department(value: str) -> bool:
    return value in DEPARTMENTS
