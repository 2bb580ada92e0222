"""
行動瀏覽器 session 管理

注入器只借用 driver，不建立也不關閉它；session 的生命週期都在這裡：
    1. 依平台挑選 Appium options，載入並驗證 capabilities
       (必須有 browserName，注入只在網頁 context 有意義)
    2. 連線 Appium server，失敗時指數退避重試
    3. 套用 implicit wait / script timeout / page load timeout
    4. 結束時關閉 session，即使 quit() 失敗也清掉 thread-local 參照

平行測試時每個 worker thread 各自持有一個 session。
"""

import threading
import time
import urllib.error
import urllib.request

from appium import webdriver
from appium.options.android import UiAutomator2Options
from appium.options.ios import XCUITestOptions

from config.config import Config
from core.exceptions import (
    DriverConnectionError,
    DriverNotInitializedError,
)
from utils.logger import logger

# 平台 → Appium options 類別
_PLATFORM_OPTIONS = {
    "android": UiAutomator2Options,
    "ios": XCUITestOptions,
}


class DriverManager:
    """每個 thread 一個行動瀏覽器 session"""

    _local = threading.local()

    @classmethod
    def health_check(cls, url: str | None = None, timeout: float = 5.0) -> bool:
        """Appium server 的 /status 回 200 才算可用"""
        status_url = f"{url or Config.appium_server_url()}/status"
        try:
            with urllib.request.urlopen(
                urllib.request.Request(status_url, method="GET"), timeout=timeout
            ) as resp:
                return resp.status == 200
        except (urllib.error.URLError, OSError, TimeoutError):
            return False

    @classmethod
    def build_options(cls, platform: str, caps: dict | None = None):
        """
        建立平台對應的 Appium options。

        Args:
            platform: 'android' 或 'ios'
            caps: 自訂 capabilities，None 時讀 config/{platform}_caps.json

        Raises:
            ValueError: 不支援的平台
            ConfigValidationError: 缺少 browserName 等必填欄位
        """
        options_cls = _PLATFORM_OPTIONS.get(platform)
        if options_cls is None:
            raise ValueError(f"不支援的平台: {platform}")

        if caps is None:
            caps = Config.load_caps(platform)
        else:
            Config.validate_caps(caps, platform)

        logger.debug(f"{platform} capabilities: browserName={caps.get('browserName')}")
        return options_cls().load_capabilities(caps)

    @classmethod
    def create_driver(
        cls,
        platform: str | None = None,
        caps: dict | None = None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> webdriver.Remote:
        """
        建立行動瀏覽器 session 並綁定到目前 thread。

        Args:
            platform: 'android' 或 'ios'，預設讀取 Config.PLATFORM
            caps: 自訂 capabilities，None 時讀設定檔
            max_retries: 連線最多嘗試次數
            retry_delay: 第一次重試前等待秒數，之後每次加倍

        Raises:
            ValueError: 不支援的平台
            ConfigValidationError: capabilities 驗證失敗
            DriverConnectionError: 所有嘗試都連不上
        """
        platform = (platform or Config.PLATFORM).lower()
        options = cls.build_options(platform, caps)
        url = Config.appium_server_url()

        if not cls.health_check(url):
            logger.warning(f"Appium server 健康檢查失敗: {url}，仍嘗試連線...")

        drv = cls._connect(url, options, max_retries, retry_delay)
        cls._apply_timeouts(drv)

        cls._local.driver = drv
        logger.info(f"行動瀏覽器 session 已建立: {platform} -> {url}")
        return drv

    @classmethod
    def _connect(cls, url: str, options, max_retries: int, retry_delay: float):
        last_error: Exception | None = None
        for attempt in range(1, max_retries + 1):
            try:
                return webdriver.Remote(command_executor=url, options=options)
            except Exception as e:
                last_error = e
                if attempt == max_retries:
                    break
                wait = retry_delay * 2 ** (attempt - 1)
                logger.warning(f"連線失敗 ({attempt}/{max_retries})，{wait:.1f}s 後重試: {e}")
                time.sleep(wait)
        raise DriverConnectionError(url, last_error)

    @staticmethod
    def _apply_timeouts(drv) -> None:
        drv.implicitly_wait(Config.IMPLICIT_WAIT)
        # 卡住的 async 注入交給 driver 逾時
        drv.set_script_timeout(Config.SCRIPT_TIMEOUT)
        drv.set_page_load_timeout(Config.PAGE_LOAD_TIMEOUT)
        logger.debug(
            f"timeouts: implicit={Config.IMPLICIT_WAIT}s "
            f"script={Config.SCRIPT_TIMEOUT}s page_load={Config.PAGE_LOAD_TIMEOUT}s"
        )

    @classmethod
    def get_driver(cls) -> webdriver.Remote:
        """目前 thread 的 session"""
        drv = getattr(cls._local, "driver", None)
        if drv is None:
            raise DriverNotInitializedError()
        return drv

    @classmethod
    def quit_driver(cls) -> None:
        """關閉目前 thread 的 session，quit() 拋錯時照樣往外拋但先清掉參照"""
        drv = getattr(cls._local, "driver", None)
        if drv is None:
            return
        try:
            drv.quit()
        finally:
            cls._local.driver = None
        logger.info("行動瀏覽器 session 已關閉")
