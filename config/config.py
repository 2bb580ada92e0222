"""
設定管理模組
統一管理 axe-core 注入、Appium server 與行動瀏覽器 capabilities 等設定。
所有預設值都可透過環境變數覆蓋，方便 CI/CD 整合。

環境變數：
    AXE_SCRIPT_PATH         axe-core bundle 路徑 (預設 config/axe.min.js)
    MAX_FRAME_DEPTH         frame 巢狀遞迴上限，0 = 不限制 (預設 16)
    SCRIPT_TIMEOUT          driver 執行 async script 的逾時秒數 (預設 30)
    PAGE_LOAD_TIMEOUT       行動瀏覽器載入頁面的逾時秒數 (預設 60)
    DISABLE_IFRAME_TESTING  設為 1 時只注入最上層文件
"""

import json
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = Path(__file__).resolve().parent

# capabilities 必填欄位定義
_REQUIRED_CAPS = {
    "android": ["appium:deviceName", "platformName", "browserName"],
    "ios": ["appium:deviceName", "platformName", "browserName"],
}

# capabilities 建議欄位（缺少時發出警告）
_RECOMMENDED_CAPS = {
    "android": ["appium:automationName", "appium:chromedriverExecutable"],
    "ios": ["appium:automationName", "appium:platformVersion"],
}


class ConfigValidationError(Exception):
    """Capabilities 設定驗證失敗"""

    def __init__(self, errors: list[str]):
        self.errors = errors
        msg = "Capabilities 驗證失敗:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(msg)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigValidationError([f"{name} 必須為整數: {raw!r}"]) from None


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


class Config:
    """框架全域設定"""

    # Appium Server
    APPIUM_HOST = os.getenv("APPIUM_HOST", "127.0.0.1")
    APPIUM_PORT = _env_int("APPIUM_PORT", 4723)

    # 超時設定 (秒)
    IMPLICIT_WAIT = _env_int("IMPLICIT_WAIT", 10)
    SCRIPT_TIMEOUT = _env_int("SCRIPT_TIMEOUT", 30)
    PAGE_LOAD_TIMEOUT = _env_int("PAGE_LOAD_TIMEOUT", 60)

    # axe-core 注入
    AXE_SCRIPT_PATH = Path(os.getenv("AXE_SCRIPT_PATH", str(CONFIG_DIR / "axe.min.js")))
    MAX_FRAME_DEPTH = _env_int("MAX_FRAME_DEPTH", 16)
    DISABLE_IFRAME_TESTING = _env_flag("DISABLE_IFRAME_TESTING")

    # 報告
    REPORT_DIR = BASE_DIR / "reports"

    # 平台
    PLATFORM = os.getenv("PLATFORM", "android").lower()

    @classmethod
    def appium_server_url(cls) -> str:
        return f"http://{cls.APPIUM_HOST}:{cls.APPIUM_PORT}"

    @classmethod
    def frame_depth_limit(cls) -> int | None:
        """MAX_FRAME_DEPTH 轉為注入器使用的上限，0 或負數代表不限制"""
        if cls.MAX_FRAME_DEPTH <= 0:
            return None
        return cls.MAX_FRAME_DEPTH

    @classmethod
    def load_caps(cls, platform: str | None = None, validate: bool = True) -> dict:
        """
        從 JSON 檔載入行動瀏覽器的 desired capabilities。

        Args:
            platform: 'android' 或 'ios'，預設讀取 Config.PLATFORM
            validate: 是否驗證必填欄位（預設 True）

        Returns:
            capabilities dict

        Raises:
            FileNotFoundError: 設定檔不存在
            ConfigValidationError: 必填欄位缺失
        """
        platform = platform or cls.PLATFORM
        caps_file = CONFIG_DIR / f"{platform}_caps.json"
        if not caps_file.exists():
            raise FileNotFoundError(f"找不到 capabilities 設定檔: {caps_file}")
        with open(caps_file, "r", encoding="utf-8") as f:
            caps = json.load(f)

        if validate:
            cls.validate_caps(caps, platform)

        return caps

    @classmethod
    def validate_caps(cls, caps: dict, platform: str) -> list[str]:
        """
        驗證 capabilities 結構。

        Returns:
            警告訊息列表

        Raises:
            ConfigValidationError: 必填欄位缺失時拋出
        """
        errors: list[str] = []
        warnings: list[str] = []

        for key in _REQUIRED_CAPS.get(platform, []):
            if key not in caps:
                errors.append(f"缺少必填欄位: {key}")

        for key in _RECOMMENDED_CAPS.get(platform, []):
            if key not in caps:
                warnings.append(f"建議填寫欄位: {key}")

        if errors:
            raise ConfigValidationError(errors)

        return warnings
