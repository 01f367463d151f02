"""
알림 텍스트 필드 분리 모듈.
앱별 파서 규칙의 구분자와 필드 순서로 "아티스트-제목" 텍스트를 나눕니다.
"""

from typing import Optional

from core.models import FieldOrder, ParsedTitle, ParserRule, SplitFields
from services.rule_registry import RuleRegistry
from services.title_parser import TitleParser


class NotificationFieldSplitter:
    """알림 텍스트 → (아티스트, 제목) 분리기"""

    def __init__(self, registry: RuleRegistry, parser: Optional[TitleParser] = None) -> None:
        self._registry = registry
        self._parser = parser or TitleParser()

    def split(self, package_name: str, raw_text: str) -> SplitFields:
        """앱 규칙을 찾아 텍스트 분리. 분리되지 않으면 artist는 None"""
        return self.split_with_rule(raw_text, self._registry.lookup(package_name))

    @staticmethod
    def split_with_rule(raw_text: str, rule: ParserRule) -> SplitFields:
        """
        주어진 규칙으로 텍스트 분리

        첫 번째 구분자만 경계로 사용하고, 이후 구분자는 뒤쪽 필드에 그대로 남습니다.
        비활성 규칙, 빈 구분자, 구분자 없음은 모두 분리하지 않습니다.
        """
        separator = rule.separator_pattern
        if not rule.enabled or not separator or separator not in raw_text:
            return SplitFields(None, raw_text.strip())

        left, right = raw_text.split(separator, 1)
        left, right = left.strip(), right.strip()

        if rule.field_order == FieldOrder.TITLE_ARTIST:
            return SplitFields(artist=right, title=left)
        return SplitFields(artist=left, title=right)

    def process(self, package_name: str, raw_text: str) -> tuple[Optional[str], ParsedTitle]:
        """텍스트 분리 후 제목을 곡명/부가 정보로 분해"""
        artist, title = self.split(package_name, raw_text)
        return artist, self._parser.parse(title)
