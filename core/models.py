"""
도메인 데이터 클래스 통합 모듈.
파서 규칙, 제목 분해 결과, 메타데이터 판별 결과를 한 곳에서 관리합니다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from core.constants import DEFAULT_SEPARATOR


# ── 파서 규칙 ─────────────────────────────────────────────────────────────────

class FieldOrder(Enum):
    """알림 텍스트의 필드 순서"""
    ARTIST_TITLE = "ARTIST_TITLE"   # "周杰伦-晴天" → 아티스트가 앞
    TITLE_ARTIST = "TITLE_ARTIST"   # "晴天-周杰伦" → 제목이 앞


@dataclass(frozen=True)
class ParserRule:
    """음악 앱 하나의 알림 파싱 규칙"""
    package_name: str                       # 앱 패키지명 (고유 키)
    custom_name: Optional[str] = None       # 표시 이름, 없으면 패키지명 사용
    enabled: bool = True
    uses_car_protocol: bool = True          # 차량(블루투스) 프로토콜 알림 사용 여부
    separator_pattern: str = DEFAULT_SEPARATOR
    field_order: FieldOrder = FieldOrder.ARTIST_TITLE

    # 앱별 가사 소스 설정 (외부 가사 모듈이 사용)
    use_online_lyrics: bool = False
    use_super_lyric_api: bool = True

    @property
    def display_name(self) -> str:
        """표시 이름 (custom_name이 비어 있으면 패키지명)"""
        return self.custom_name or self.package_name


def rule_sort_key(rule: ParserRule) -> str:
    """규칙 정렬 키 (패키지명 코드 포인트 순)"""
    return rule.package_name


# ── 제목 분해 ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ParsedTitle:
    """화면 표시용으로 분해된 제목"""
    primary_line: str       # 1행: 깔끔한 곡 제목
    secondary_info: str     # 부가 정보 ("Remastered 2021" 등), 없으면 ""


class SplitFields(NamedTuple):
    """구분자로 나눈 알림 텍스트. artist가 None이면 분리되지 않은 것"""
    artist: Optional[str]
    title: str


# ── 메타데이터 판별 ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ResolvedMetadata:
    """미디어 세션 원본 필드에서 판별한 실제 곡 정보"""
    package_name: str
    title: str
    artist: str
    lyric: Optional[str] = None     # 제목 필드로 흘러온 실시간 가사 한 줄
    parsed_title: ParsedTitle = field(default_factory=lambda: ParsedTitle("", ""))

    @property
    def has_lyric(self) -> bool:
        return bool(self.lyric)
