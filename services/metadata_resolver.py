"""
미디어 세션 메타데이터에서 실제 곡 정보를 판별합니다.

일부 음악 앱은 가사를 "제목" 필드에 한 줄씩 흘려보내고 실제 곡 정보는
"아티스트" 필드에 "곡명-가수" 형태로 넣습니다. 앱별 상태를 기억해
다음 순서로 판별합니다.
1순위: 제목과 아티스트가 동시에 바뀌며 새 아티스트가 이전 제목을 포함 (전환 감지)
2순위: 이미 동적 가사 모드면 캐시된 곡 정보 또는 아티스트 필드 파싱
3순위: 규칙으로 제목 → 아티스트 필드 순서로 파싱
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from core.constants import (
    INSTRUMENTAL_KEYWORDS,
    INSTRUMENTAL_KEYWORDS_CI,
    NEW_SONG_DURATION_DELTA_MS,
    RISKY_SEPARATOR,
    SAFE_SEPARATOR_HINT,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
)
from core.models import ParserRule, ResolvedMetadata
from services.field_splitter import NotificationFieldSplitter
from services.rule_registry import RuleRegistry
from services.title_parser import TitleParser

logger = logging.getLogger(__name__)


@dataclass
class _PackageState:
    """앱 하나의 직전 이벤트 상태"""
    last_title: Optional[str] = None
    last_artist: Optional[str] = None
    last_duration_ms: int = 0
    lyric_mode: bool = False
    real_title: Optional[str] = None
    real_artist: Optional[str] = None
    last_event: Optional[tuple] = None
    last_result: Optional[ResolvedMetadata] = None


class MetadataResolver:
    """앱별 동적 가사 모드를 추적하며 곡 정보를 판별"""

    def __init__(
        self,
        registry: RuleRegistry,
        splitter: Optional[NotificationFieldSplitter] = None,
        parser: Optional[TitleParser] = None,
    ) -> None:
        self._registry = registry
        self._parser = parser or TitleParser()
        self._splitter = splitter or NotificationFieldSplitter(registry, self._parser)
        self._states: dict[str, _PackageState] = {}
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[ResolvedMetadata], None]] = []

    def on_resolved(self, callback: Callable[[ResolvedMetadata], None]) -> None:
        """새 판별 결과가 나올 때 호출될 콜백 등록"""
        self._callbacks.append(callback)

    def reset(self, package_name: Optional[str] = None) -> None:
        """앱 상태 초기화 (None이면 전체)"""
        with self._lock:
            if package_name is None:
                self._states.clear()
            else:
                self._states.pop(package_name, None)

    def is_lyric_mode(self, package_name: str) -> bool:
        """앱이 현재 동적 가사 모드인지"""
        with self._lock:
            state = self._states.get(package_name)
            return bool(state and state.lyric_mode)

    def resolve(
        self,
        package_name: str,
        raw_title: Optional[str],
        raw_artist: Optional[str],
        album: Optional[str] = None,
        duration_ms: int = 0,
    ) -> ResolvedMetadata:
        """원본 필드에서 실제 곡명/아티스트/가사 판별"""
        event = (raw_title, raw_artist, album, duration_ms)

        with self._lock:
            state = self._states.setdefault(package_name, _PackageState())
            if state.last_event == event and state.last_result is not None:
                return state.last_result
            state.last_event = event

            rule = self._registry.find(package_name)
            if rule is not None and rule.enabled:
                title, artist, lyric = self._apply_rule(
                    package_name, state, rule, raw_title, raw_artist, album, duration_ms
                )
            else:
                title, artist, lyric = raw_title, raw_artist, None

            # None만 대체, 빈 문자열은 그대로
            title = UNKNOWN_TITLE if title is None else title
            result = ResolvedMetadata(
                package_name=package_name,
                title=title,
                artist=UNKNOWN_ARTIST if artist is None else artist,
                lyric=lyric,
                parsed_title=self._parser.parse(title),
            )
            state.last_result = result

        for callback in self._callbacks:
            try:
                callback(result)
            except Exception:
                logger.exception("[Parser] 콜백 실행 실패")
        return result

    # ── 판별 로직 ─────────────────────────────────────────────────────────────

    def _apply_rule(
        self,
        package_name: str,
        state: _PackageState,
        rule: ParserRule,
        raw_title: Optional[str],
        raw_artist: Optional[str],
        album: Optional[str],
        duration_ms: int,
    ) -> tuple[Optional[str], Optional[str], Optional[str]]:
        final_title, final_artist, final_lyric = raw_title, raw_artist, None

        is_false_positive = self._is_instrumental(raw_title) or (bool(album) and raw_title == album)

        prev_title = state.last_title
        prev_artist = state.last_artist
        lyric_mode = state.lyric_mode

        # 곡 길이가 바뀌면 새 곡
        duration_differs = (
            duration_ms > 0
            and state.last_duration_ms > 0
            and abs(duration_ms - state.last_duration_ms) > NEW_SONG_DURATION_DELTA_MS
        )
        if duration_differs:
            lyric_mode = False
            state.real_title = None
            state.real_artist = None
            logger.info("[Parser] %s 새 곡 감지, 가사 상태 초기화", package_name)

        # 아티스트는 그대로인데 제목만 바뀜 → 가사 피드
        if (not duration_differs and raw_title != prev_title
                and raw_title and prev_title and raw_artist == prev_artist):
            lyric_mode = True
            logger.info("[Parser] 곡 도중 제목 변경, 동적 가사 모드: %r → %r", prev_title, raw_title)

        is_transition = bool(
            prev_title
            and prev_artist
            and raw_title != prev_title
            and raw_artist != prev_artist
            and not is_false_positive
            and raw_artist
            and (raw_artist.startswith(prev_title)
                 or f"{prev_title}-" in raw_artist
                 or f"{prev_title} " in raw_artist)
        )
        if is_transition:
            state.real_title = prev_title
            state.real_artist = prev_artist
            lyric_mode = True
            logger.info("[Parser] %s 가사 전환 감지, 실제 제목=%r", package_name, prev_title)

        if lyric_mode and not is_transition:
            if state.real_title and not is_false_positive:
                final_title = state.real_title
                final_artist = state.real_artist or raw_artist
                final_lyric = raw_title
                logger.debug("[Parser] 동적 가사 (캐시된 곡 정보): %r", raw_title)
            elif not is_false_positive:
                # 가사 모드가 확인되었으므로 아티스트 필드 파싱이 안전함
                artist, title = self._splitter.split_with_rule(raw_artist or "", rule)
                if artist is not None:
                    state.real_title = title
                    state.real_artist = artist
                    final_title, final_artist = title, artist
                    logger.debug("[Parser] 아티스트 필드에서 곡 정보 파싱: 제목=%r 가사=%r", title, raw_title)
                final_lyric = raw_title
        elif is_transition:
            final_title = prev_title
            final_artist = prev_artist
            final_lyric = raw_title
        elif not lyric_mode:
            final_title, final_artist, final_lyric = self._parse_static(
                rule, raw_title, raw_artist, album, is_false_positive
            )

        state.last_title = raw_title
        state.last_artist = raw_artist
        state.last_duration_ms = duration_ms
        state.lyric_mode = lyric_mode
        return final_title, final_artist, final_lyric

    def _parse_static(
        self,
        rule: ParserRule,
        raw_title: Optional[str],
        raw_artist: Optional[str],
        album: Optional[str],
        is_false_positive: bool,
    ) -> tuple[Optional[str], Optional[str], Optional[str]]:
        """가사 모드가 아닐 때: 제목 필드 → 아티스트 필드 순으로 규칙 파싱"""
        # 제목에 "아티스트-제목"이 들어있는 경우 (블루투스 메타데이터 등)
        artist, title = self._splitter.split_with_rule(raw_title or "", rule)
        if artist is not None:
            return title, artist, None

        # 아티스트 필드에 "아티스트-제목", 제목 필드에 가사
        artist, title = self._splitter.split_with_rule(raw_artist or "", rule)
        if artist is None:
            return raw_title, raw_artist, None

        is_risky = rule.separator_pattern == RISKY_SEPARATOR and SAFE_SEPARATOR_HINT not in (raw_artist or "")
        is_anomalous = is_risky and "/" in title and "/" not in artist
        album_match = bool(album) and title == album

        if not is_false_positive and not is_anomalous and (not is_risky or album_match):
            logger.debug("[Parser] 파싱 기반 가사: safe=%s album=%s", not is_risky, album_match)
            return title, artist, raw_title or None
        if is_risky:
            logger.debug("[Parser] 위험 구분자, 판별 근거 없음. 제목=%r", raw_title)
        return raw_title, raw_artist, None

    @staticmethod
    def _is_instrumental(title: Optional[str]) -> bool:
        """반주/연주곡 제목 여부"""
        if not title:
            return False
        lowered = title.lower()
        return (any(keyword in lowered for keyword in INSTRUMENTAL_KEYWORDS_CI)
                or any(keyword in title for keyword in INSTRUMENTAL_KEYWORDS))
