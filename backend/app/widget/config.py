from dataclasses import dataclass

from app.utils.config import get_env, get_env_int


@dataclass
class WidgetSettings:
    """
    表示ウィジェットが /api/media を呼び出すための設定値。
    """
    api_base_url: str = "http://localhost:8000"
    timeout_seconds: int = 10


def get_widget_settings() -> WidgetSettings:
    """
    ウィジェット設定値を環境変数から読み出す。

    任意:
      - WIDGET_API_BASE_URL（デフォルト http://localhost:8000）
      - WIDGET_TIMEOUT_SECONDS（デフォルト 10秒）
    """
    defaults = WidgetSettings()
    return WidgetSettings(
        api_base_url=get_env(
            "WIDGET_API_BASE_URL",
            default=defaults.api_base_url,
            required=False,
        ),
        timeout_seconds=get_env_int("WIDGET_TIMEOUT_SECONDS", defaults.timeout_seconds),
    )
