"""
기본 파서 규칙 상수.
규칙 파일이 없는 첫 실행 시 또는 파일이 손상되었을 때 사용합니다.
"""

from core.models import FieldOrder, ParserRule

# 알림에 가사를 직접 싣는 앱은 차량 프로토콜 사용,
# SuperLyric API 등 별도 경로가 필요한 앱은 차량 프로토콜 비활성화
DEFAULT_PARSER_RULES: tuple[ParserRule, ...] = (
    ParserRule("com.tencent.qqmusic", custom_name="QQ Music",
               uses_car_protocol=True, separator_pattern="-"),
    ParserRule("com.netease.cloudmusic", custom_name="NetEase Cloud Music",
               uses_car_protocol=True, separator_pattern=" - "),
    ParserRule("com.miui.player", custom_name="Mi Music",
               uses_car_protocol=True, separator_pattern="-"),
    ParserRule("com.kugou.android", custom_name="KuGou Music",
               uses_car_protocol=False, separator_pattern="-"),
    ParserRule("com.apple.android.music", custom_name="Apple Music",
               uses_car_protocol=False, separator_pattern=" - "),
)


def create_default_rule(package_name: str) -> ParserRule:
    """규칙이 없는 앱에 적용할 기본 규칙 ("-", 아티스트-제목 순서)"""
    return ParserRule(
        package_name=package_name,
        enabled=True,
        field_order=FieldOrder.ARTIST_TITLE,
        use_online_lyrics=False,
    )
