"""
앱 조립 및 실행 진입점.
규칙 저장소 → 레지스트리 → 파서/분리기 → 메타데이터 판별기를 조립합니다.
이 파일은 앱의 의존성 주입(DI) 역할을 담당합니다.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

# 프로젝트 루트를 sys.path에 추가 (패키지 임포트 지원)
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

from core.constants import PARSER_RULES_FILE
from services.field_splitter import NotificationFieldSplitter
from services.metadata_resolver import MetadataResolver
from services.rule_registry import RuleRegistry
from services.title_parser import TitleParser
from settings.rule_store import RuleStore

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Pipeline:
    """조립된 서비스 묶음"""
    store: RuleStore
    registry: RuleRegistry
    parser: TitleParser
    splitter: NotificationFieldSplitter
    resolver: MetadataResolver


def configure_logging(level: int = logging.INFO) -> None:
    """루트 로거 설정 (앱 진입점에서 한 번만 호출)"""
    logging.basicConfig(level=level, format=_LOG_FORMAT)


def create_pipeline(rules_file: str = PARSER_RULES_FILE) -> Pipeline:
    """서비스 생성 및 연결 (의존성 주입)"""

    # ── 1. 규칙 로드 ───────────────────────────────────────────────────────────
    store = RuleStore(rules_file)
    registry = RuleRegistry(store.load())

    # 규칙 변경 시 파일에 저장
    registry.add_observer(store.save)

    # ── 2. 파싱 서비스 생성 ────────────────────────────────────────────────────
    parser = TitleParser()
    splitter = NotificationFieldSplitter(registry, parser)
    resolver = MetadataResolver(registry, splitter, parser)

    # 규칙 변경 시 앱별 판별 상태(중복 이벤트 캐시 포함) 초기화
    registry.add_observer(lambda _rules: resolver.reset())

    return Pipeline(store, registry, parser, splitter, resolver)


def main(argv: Optional[list[str]] = None) -> int:
    """사용법: python -m app.main <패키지명> <알림 텍스트>"""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print(main.__doc__, file=sys.stderr)
        return 2

    configure_logging()
    pipeline = create_pipeline()
    package_name, raw_text = args

    artist, parsed = pipeline.splitter.process(package_name, raw_text)
    print(f"앱: {pipeline.registry.get_app_name(package_name)}")
    print(f"  -> 아티스트: {artist if artist is not None else '-'}")
    print(f"  -> 제목: {parsed.primary_line}")
    print(f"  -> 부가 정보: {parsed.secondary_info}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
