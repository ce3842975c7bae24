"""예보 텍스트 섹션 추출기입니다. / Forecast text section extractor.

NWS text products (AFD, HWO) arrive as HTML pages wrapping one ``<pre>``
block. Sections inside the block are introduced by dotted headers such as
``.SYNOPSIS...`` and run until the next header, a ``&&`` separator, a ``$$``
terminator or the end of the text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence

from bs4 import BeautifulSoup

from .models import ForecastDiscussion, HazardOutlook

LOGGER = logging.getLogger("radiosonde.sections")

SECTION_LIMIT = 500
SPOTTER_LIMIT = 200

_NEXT_HEADER = r"(?=^\s*\.[A-Z]|^\s*&&|^\s*\$\$|\Z)"

HAZARD_KEYWORDS = (
    "watch",
    "warning",
    "advisory",
    "flood",
    "storm",
    "wind",
    "snow",
    "ice",
    "freeze",
    "blizzard",
    "gale",
)


@dataclass(frozen=True)
class SectionRule:
    """섹션 경계 규칙입니다. / Section boundary rule."""

    name: str
    start: str
    stop: str = _NEXT_HEADER
    limit: int = SECTION_LIMIT

    def pattern(self) -> re.Pattern[str]:
        """규칙 정규식을 컴파일합니다. / Compile the rule regex."""

        return re.compile(
            f"{self.start}(.*?){self.stop}",
            re.IGNORECASE | re.MULTILINE | re.DOTALL,
        )


DISCUSSION_RULES: Sequence[SectionRule] = (
    SectionRule("synopsis", r"^\s*\.SYNOPSIS[^\n]*?\.\.\."),
    SectionRule("near_term", r"^\s*\.NEAR TERM[^\n]*?\.\.\."),
    SectionRule("short_term", r"^\s*\.SHORT TERM[^\n]*?\.\.\."),
    SectionRule("long_term", r"^\s*\.LONG TERM[^\n]*?\.\.\."),
)

OUTLOOK_RULES: Sequence[SectionRule] = (
    SectionRule(
        "day_one",
        r"\.DAY ONE[^.]*\.\.\.",
        stop=r"(?=\.DAYS TWO|\.SPOTTER|\Z)",
    ),
    SectionRule(
        "days_two_through_seven",
        r"\.DAYS TWO THROUGH SEVEN[^.]*\.\.\.",
        stop=r"(?=\.SPOTTER|\Z)",
    ),
    SectionRule(
        "spotter_info",
        r"\.SPOTTER INFORMATION STATEMENT[^.]*\.\.\.",
        stop=r"(?=\$\$|\Z)",
        limit=SPOTTER_LIMIT,
    ),
)


def normalize_section(text: str, limit: int = SECTION_LIMIT) -> str:
    """공백을 정리하고 길이를 자릅니다. / Collapse whitespace and cap length."""

    return " ".join(text.split())[:limit]


def extract_preformatted(html: str) -> Optional[str]:
    """첫 pre 블록 텍스트를 돌려줍니다. / Return text of the first pre block."""

    soup = BeautifulSoup(html, "html.parser")
    block = soup.find("pre")
    if block is None:
        return None
    return block.get_text()


def extract_sections(text: str, rules: Iterable[SectionRule]) -> Dict[str, str]:
    """규칙별 섹션을 추출합니다. / Extract one section per matching rule."""

    sections: Dict[str, str] = {}
    for rule in rules:
        match = rule.pattern().search(text)
        if match:
            sections[rule.name] = normalize_section(match.group(1), rule.limit)
    return sections


def has_hazard_keywords(*texts: str) -> bool:
    """위험 키워드를 검사합니다. / Test texts against the hazard vocabulary."""

    for text in texts:
        lowered = text.lower()
        if any(keyword in lowered for keyword in HAZARD_KEYWORDS):
            return True
    return False


def parse_discussion(html: str) -> Optional[ForecastDiscussion]:
    """AFD 페이지를 파싱합니다. / Parse an area forecast discussion page."""

    raw = extract_preformatted(html)
    if raw is None:
        LOGGER.warning("discussion_parse_failed", extra={"reason": "no pre block"})
        return None
    sections = extract_sections(raw, DISCUSSION_RULES)
    return ForecastDiscussion(
        synopsis=sections.get("synopsis", ""),
        near_term=sections.get("near_term", ""),
        short_term=sections.get("short_term", ""),
        long_term=sections.get("long_term", ""),
    )


def parse_outlook(html: str) -> Optional[HazardOutlook]:
    """HWO 페이지를 파싱합니다. / Parse a hazardous weather outlook page."""

    raw = extract_preformatted(html)
    if raw is None:
        LOGGER.warning("outlook_parse_failed", extra={"reason": "no pre block"})
        return None
    sections = extract_sections(raw, OUTLOOK_RULES)
    day_one = sections.get("day_one", "")
    days_two = sections.get("days_two_through_seven", "")
    return HazardOutlook(
        day_one=day_one,
        days_two_through_seven=days_two,
        spotter_info=sections.get("spotter_info", ""),
        has_active_hazards=has_hazard_keywords(day_one, days_two),
    )
