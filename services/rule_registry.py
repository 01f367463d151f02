"""
앱별 파서 규칙 레지스트리.
규칙 저장소의 메모리 투영으로, 패키지명당 규칙 하나를 보관합니다.

변경 시 새 매핑을 만들어 통째로 교체하므로 읽기 쪽은 잠금 없이
항상 완전한 스냅샷을 봅니다. 변경 후 등록된 옵저버(저장소)에 알립니다.
"""

import logging
import threading
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Optional

from core.models import ParserRule, rule_sort_key
from settings.defaults import create_default_rule

logger = logging.getLogger(__name__)

RulesObserver = Callable[[List[ParserRule]], None]


class RuleRegistry:
    """패키지명 → ParserRule 레지스트리 (스냅샷 교체 방식)"""

    def __init__(
        self,
        rules: Iterable[ParserRule] = (),
        default_factory: Callable[[str], ParserRule] = create_default_rule,
    ) -> None:
        self._default_factory = default_factory
        # 옵저버 안에서 다시 변경 가능 (재진입)
        self._write_lock = threading.RLock()
        self._observers: List[RulesObserver] = []
        self._snapshot: Mapping[str, ParserRule] = self._build(rules)

    @staticmethod
    def _build(rules: Iterable[ParserRule]) -> Mapping[str, ParserRule]:
        """규칙 목록 → 읽기 전용 매핑 (같은 패키지명은 나중 것이 우선)"""
        mapping = {}
        for rule in rules:
            if not rule.package_name:
                logger.warning("[RuleRegistry] 패키지명 없는 규칙 무시: %r", rule)
                continue
            mapping[rule.package_name] = rule
        return MappingProxyType(mapping)

    # ── 조회 ──────────────────────────────────────────────────────────────────

    def lookup(self, package_name: str) -> ParserRule:
        """규칙 조회. 설정된 규칙이 없으면 기본 규칙 반환"""
        rule = self._snapshot.get(package_name)
        if rule is None:
            return self._default_factory(package_name)
        return rule

    def find(self, package_name: str) -> Optional[ParserRule]:
        """설정된 규칙만 조회 (없으면 None)"""
        return self._snapshot.get(package_name)

    def list_all(self) -> List[ParserRule]:
        """모든 규칙을 패키지명 순으로 반환"""
        return sorted(self._snapshot.values(), key=rule_sort_key)

    def get_app_name(self, package_name: str) -> str:
        """앱 표시 이름 (규칙이 없으면 패키지명)"""
        rule = self._snapshot.get(package_name)
        return rule.display_name if rule else package_name

    def enabled_packages(self) -> set[str]:
        """활성화된 규칙의 패키지명 집합"""
        return {name for name, rule in self._snapshot.items() if rule.enabled}

    def __contains__(self, package_name: object) -> bool:
        return package_name in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)

    # ── 변경 ──────────────────────────────────────────────────────────────────

    def upsert(self, rule: ParserRule) -> bool:
        """같은 패키지명의 규칙을 교체(없으면 추가). 잘못된 규칙이면 False"""
        if not rule.package_name:
            logger.warning("[RuleRegistry] 패키지명 없는 규칙은 저장할 수 없음")
            return False

        with self._write_lock:
            mapping = dict(self._snapshot)
            mapping[rule.package_name] = rule
            self._publish(MappingProxyType(mapping))
        return True

    def remove(self, package_name: str) -> bool:
        """규칙 삭제. 삭제된 규칙이 있으면 True"""
        with self._write_lock:
            if package_name not in self._snapshot:
                return False
            mapping = dict(self._snapshot)
            del mapping[package_name]
            self._publish(MappingProxyType(mapping))
        return True

    def replace_all(self, rules: Iterable[ParserRule]) -> None:
        """전체 규칙 교체 (저장소에서 다시 로드할 때)"""
        snapshot = self._build(rules)
        with self._write_lock:
            self._publish(snapshot)

    def _publish(self, snapshot: Mapping[str, ParserRule]) -> None:
        """새 스냅샷 게시 후 옵저버 알림 (_write_lock 보유 상태에서 호출)"""
        self._snapshot = snapshot
        # 알림 순서 = 변경 순서
        self._notify_observers(sorted(snapshot.values(), key=rule_sort_key))

    # ── Observer 관리 ─────────────────────────────────────────────────────────

    def add_observer(self, callback: RulesObserver) -> None:
        """옵저버 등록"""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: RulesObserver) -> None:
        """옵저버 제거"""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self, rules: List[ParserRule]) -> None:
        """등록된 옵저버들에게 게시된 스냅샷의 정렬된 규칙 목록 전달"""
        for callback in list(self._observers):
            try:
                callback(list(rules))
            except Exception:
                logger.exception("[RuleRegistry] 옵저버 알림 실패")
