from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from facility_sources.clients.base import ProviderHttpClient, require_key
from facility_sources.core.exceptions import InvalidInput, UpstreamRejected
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.rules.departments import DEPARTMENTS, GENERAL_DEPARTMENT, classify_department

logger = logging.getLogger(__name__)

FALLBACK_DEPARTMENT = "가정의학과"
FALLBACK_ADVICE = "정확한 진단을 위해 병원을 방문해주세요."
URGENCY_LEVELS = ("low", "medium", "high")

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")

SYSTEM_PROMPT = (
    "당신은 한국의 의료 시스템에 익숙한 의료 상담 도우미입니다.\n"
    "환자의 증상을 듣고 가장 적합한 하나의 진료과만 추천해주세요. 여러 개를 나열하지 마세요.\n\n"
    "가능한 진료과 목록:\n"
    + "\n".join(f"- {department}" for department in DEPARTMENTS)
    + "\n\n응답 형식: 마크다운이나 코드 블록 없이 순수한 JSON만 반환하세요.\n"
    '{"department": "하나의 진료과", "reason": "추천 이유 (2-3문장)", '
    '"urgency": "low|medium|high", "additionalAdvice": "추가 조언"}\n\n'
    '응급 상황으로 판단되면 urgency를 "high"로 설정하고 119 또는 응급실 방문을 권유하세요.'
)


@dataclass(frozen=True)
class SymptomAssessment:
    department: str
    reason: str
    urgency: str
    additional_advice: str


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned)
        cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_assessment(content: str) -> SymptomAssessment:
    try:
        parsed = json.loads(strip_code_fence(content))
    except ValueError:
        parsed = None
    if not isinstance(parsed, dict):
        logger.warning("symptom_assessment_unparsable", extra={"content": content[:200]})
        return SymptomAssessment(
            department=FALLBACK_DEPARTMENT,
            reason=content,
            urgency="medium",
            additional_advice=FALLBACK_ADVICE,
        )

    department = str(parsed.get("department") or "").strip()
    if department not in DEPARTMENTS:
        # Multi-answers such as "내과 또는 이비인후과" collapse to a single department.
        department = classify_department(department)
        if department == GENERAL_DEPARTMENT:
            department = FALLBACK_DEPARTMENT
    urgency = str(parsed.get("urgency") or "medium").strip().lower()
    if urgency not in URGENCY_LEVELS:
        urgency = "medium"
    return SymptomAssessment(
        department=department,
        reason=str(parsed.get("reason") or ""),
        urgency=urgency,
        additional_advice=str(parsed.get("additionalAdvice") or parsed.get("additional_advice") or ""),
    )


class SymptomClassifierClient(ProviderHttpClient):
    provider_name = "ai_gateway"

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        model: str,
        connect_timeout_seconds: float = 2.0,
        read_timeout_seconds: float = 20.0,
        metrics: InMemoryGatewayMetricsCollector | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            connect_timeout_seconds=connect_timeout_seconds,
            read_timeout_seconds=read_timeout_seconds,
            metrics=metrics,
            client_factory=client_factory,
        )
        self._headers = {"Authorization": f"Bearer {require_key(api_key, 'AI_GATEWAY_API_KEY')}"}
        self._model = model

    async def classify(self, symptoms: str) -> SymptomAssessment:
        if not symptoms or not symptoms.strip():
            raise InvalidInput("증상을 입력해주세요")
        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": symptoms.strip()},
            ],
            "max_completion_tokens": 500,
        }
        payload = await self._request_json("POST", "/chat/completions", headers=self._headers, json_body=body)
        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamRejected("ai gateway response missing choices[0].message.content") from exc
        return parse_assessment(str(content))
