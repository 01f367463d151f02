"""
파서 규칙 저장소.
규칙 목록을 JSON 파일로 저장/로드합니다.
첫 실행 시 기본 규칙을 기록하고, 파일이 손상되면 기본 규칙으로 대체합니다.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Iterable, List

from core.constants import DEFAULT_SEPARATOR, PARSER_RULES_FILE
from core.models import FieldOrder, ParserRule, rule_sort_key
from settings.defaults import DEFAULT_PARSER_RULES

logger = logging.getLogger(__name__)


class RuleStore:
    """파서 규칙 JSON 저장소"""

    def __init__(self, filepath: str = PARSER_RULES_FILE) -> None:
        # PyInstaller 환경 지원: exe 실행 시 실행 파일 위치 기준
        if getattr(sys, "frozen", False):
            base_path = os.path.dirname(sys.executable)
        else:
            base_path = os.getcwd()

        # 절대 경로면 os.path.join이 base_path를 무시함
        self.filepath = os.path.join(base_path, filepath)

    # ── 파일 I/O ──────────────────────────────────────────────────────────────

    def load(self) -> List[ParserRule]:
        """규칙 로드 (첫 실행이면 기본 규칙 기록, 손상 시 기본 규칙 반환)"""
        if not os.path.exists(self.filepath):
            rules = sorted(DEFAULT_PARSER_RULES, key=rule_sort_key)
            self.save(rules)
            return rules

        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, list):
                raise ValueError(f"규칙 목록이 배열이 아님: {type(loaded).__name__}")
            rules = [self._rule_from_dict(item) for item in loaded]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("[RuleStore] 로드 실패, 기본 규칙 사용: %s", e)
            return sorted(DEFAULT_PARSER_RULES, key=rule_sort_key)

        rules.sort(key=rule_sort_key)
        return rules

    def save(self, rules: Iterable[ParserRule]) -> None:
        """규칙 목록을 파일에 저장"""
        data = [self._rule_to_dict(rule) for rule in rules]
        try:
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error("[RuleStore] 저장 실패: %s", e)

    # ── 직렬화 ────────────────────────────────────────────────────────────────

    @staticmethod
    def _rule_from_dict(obj: Dict[str, Any]) -> ParserRule:
        """JSON 객체 → ParserRule (누락된 키는 기본값)"""
        package_name = obj["pkg"]
        if not isinstance(package_name, str) or not package_name:
            raise ValueError(f"잘못된 패키지명: {package_name!r}")
        separator = obj.get("separator", DEFAULT_SEPARATOR)
        if not isinstance(separator, str):
            raise ValueError(f"잘못된 구분자: {separator!r}")
        custom_name = obj.get("name")
        if custom_name is not None and not isinstance(custom_name, str):
            raise ValueError(f"잘못된 표시 이름: {custom_name!r}")

        return ParserRule(
            package_name=package_name,
            custom_name=custom_name,
            enabled=_read_bool(obj, "enabled", True),
            uses_car_protocol=_read_bool(obj, "usesCarProtocol", True),
            separator_pattern=separator,
            field_order=FieldOrder(obj.get("fieldOrder", FieldOrder.ARTIST_TITLE.value)),
            use_online_lyrics=_read_bool(obj, "useOnlineLyrics", False),
            use_super_lyric_api=_read_bool(obj, "useSuperLyricApi", True),
        )

    @staticmethod
    def _rule_to_dict(rule: ParserRule) -> Dict[str, Any]:
        """ParserRule → JSON 객체"""
        return {
            "pkg": rule.package_name,
            "name": rule.custom_name,
            "enabled": rule.enabled,
            "usesCarProtocol": rule.uses_car_protocol,
            "separator": rule.separator_pattern,
            "fieldOrder": rule.field_order.value,
            "useOnlineLyrics": rule.use_online_lyrics,
            "useSuperLyricApi": rule.use_super_lyric_api,
        }


def _read_bool(obj: Dict[str, Any], key: str, default: bool) -> bool:
    """불리언 필드 읽기 ("false" 같은 문자열은 거부)"""
    value = obj.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"잘못된 {key} 값: {value!r}")
    return value
