"""
앱 전역 상수 모음.
파서 규칙 기본값, CJK 판별 범위, 메타데이터 판별 휴리스틱 값을 관리합니다.
"""

# ── 파서 규칙 ─────────────────────────────────────────────────────────────────

# 규칙 저장 파일 (실행 위치 기준)
PARSER_RULES_FILE = "parser_rules.json"

# 기본 구분자: 공백 없는 하이픈 ("周杰伦-晴天")
DEFAULT_SEPARATOR = "-"

# 아티스트/제목 필드가 없을 때 표시할 값
UNKNOWN_TITLE = "Unknown"
UNKNOWN_ARTIST = "Unknown"


# ── CJK 판별 ──────────────────────────────────────────────────────────────────

# (시작, 끝) 코드 포인트, 양끝 포함
CJK_RANGES: tuple[tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),       # CJK Unified Ideographs
    (0x3400, 0x4DBF),       # CJK Unified Ideographs Extension A
    (0x20000, 0x2A6DF),     # CJK Unified Ideographs Extension B
    (0xF900, 0xFAFF),       # CJK Compatibility Ideographs
    (0x3040, 0x309F),       # Hiragana
    (0x30A0, 0x30FF),       # Katakana
    (0xAC00, 0xD7A3),       # Hangul Syllables
)

# 이중 언어 제목 분리 시 각 부분의 최소 길이
MIN_BILINGUAL_PART_LENGTH = 2


# ── 동적 가사 감지 ────────────────────────────────────────────────────────────

# 곡 길이가 이 값(ms)보다 크게 바뀌면 새 곡으로 간주
NEW_SONG_DURATION_DELTA_MS = 1000

# 제목에 포함되면 가사가 아닌 반주/연주곡으로 간주
INSTRUMENTAL_KEYWORDS_CI = ("instrument",)     # 대소문자 무시
INSTRUMENTAL_KEYWORDS = ("纯音乐", "伴奏")

# 오탐 위험이 큰 구분자 ("Title-Artist"와 "AC/DC-Song" 구분 불가)
RISKY_SEPARATOR = "-"
SAFE_SEPARATOR_HINT = " - "
