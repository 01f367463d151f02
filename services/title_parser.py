"""
곡 제목 분해 모듈.
다양한 형식의 제목에서 화면 1행용 곡명과 부가 정보를 분리합니다.

지원 형식:
- 괄호 부가 정보: "Beautiful World (Remastered 2021)"
    → 곡명 "Beautiful World", 부가 정보 "Remastered 2021"
- 이중 언어 제목: "未行之路 The Road Not Taken"
    → 곡명 "未行之路", 부가 정보 "The Road Not Taken"
- 그 외: 제목 전체를 곡명으로 사용
"""

import re
from typing import Optional

from core.constants import CJK_RANGES, MIN_BILINGUAL_PART_LENGTH
from core.models import ParsedTitle


def is_cjk(char: str) -> bool:
    """한중일 문자 여부 (고정 코드 포인트 범위 기준)"""
    code = ord(char)
    for start, end in CJK_RANGES:
        if start <= code <= end:
            return True
    return False


class TitleParser:
    """제목 → ParsedTitle 분해기"""

    # 문자열 끝까지 이어지는 괄호 그룹 하나 (내용은 첫 ")" 까지)
    _TRAILING_BRACKET_PATTERN = re.compile(r"^(.+?)\s*\(([^)]+)\)\s*$")

    def parse(self, title: str) -> ParsedTitle:
        """제목을 곡명과 부가 정보로 분해 (예외 없음)"""
        trimmed = title.strip()

        # 1순위: 끝 괄호 내용 추출
        match = self._TRAILING_BRACKET_PATTERN.match(trimmed)
        if match:
            return ParsedTitle(match.group(1).strip(), match.group(2).strip())

        # 2순위: CJK → 라틴 문자 경계에서 분리
        bilingual = self._find_language_boundary(trimmed)
        if bilingual:
            return bilingual

        # 3순위: 분리 불가 → 전체 제목
        return ParsedTitle(trimmed, "")

    def _find_language_boundary(self, text: str) -> Optional[ParsedTitle]:
        """CJK 문자가 끝나고 다른 문자가 시작되는 첫 위치에서 분리"""
        if not text:
            return None

        last_was_cjk = is_cjk(text[0])
        boundary = -1

        for i in range(1, len(text)):
            char = text[i]
            if char.isspace():
                # 공백은 상태 추적에서 제외
                continue
            current_is_cjk = is_cjk(char)
            if last_was_cjk and not current_is_cjk:
                boundary = i
                break
            last_was_cjk = current_is_cjk

        if not 0 < boundary < len(text) - 1:
            return None

        first_part = text[:boundary].strip()
        second_part = text[boundary:].strip()
        if len(first_part) < MIN_BILINGUAL_PART_LENGTH or len(second_part) < MIN_BILINGUAL_PART_LENGTH:
            return None
        return ParsedTitle(first_part, second_part)


_default_parser = TitleParser()


def decompose(title: str) -> ParsedTitle:
    """모듈 단위 단축 함수"""
    return _default_parser.parse(title)
