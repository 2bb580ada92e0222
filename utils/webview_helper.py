"""
WebView 掃描工具
Hybrid App 的網頁內容在 WEBVIEW context 裡，必須先從 NATIVE_APP 切過去
才能注入 axe-core；注入完成後可選擇切回原本的 context。
"""

import time

from core.frame_injector import FrameInjector, InjectionReport
from utils.logger import logger

NATIVE_CONTEXT = "NATIVE_APP"


class WebViewHelper:
    """Hybrid App 的 Native / WebView context 切換與 axe 注入"""

    def __init__(self, driver, timeout: int = 10):
        self.driver = driver
        self.timeout = timeout

    def webview_contexts(self) -> list[str]:
        """目前可用的 WEBVIEW context"""
        contexts = self.driver.contexts
        logger.debug(f"可用 contexts: {contexts}")
        return [c for c in contexts if "WEBVIEW" in c.upper()]

    def switch_to_native(self) -> None:
        logger.info(f"切換到 {NATIVE_CONTEXT}")
        self.driver.switch_to.context(NATIVE_CONTEXT)

    def switch_to_webview(self, index: int = 0) -> str:
        """
        切換到 WebView context。

        Args:
            index: 若有多個 WebView，指定 index (0-based)

        Returns:
            切換到的 context 名稱
        """
        webviews = self.webview_contexts()
        if not webviews:
            raise RuntimeError("找不到 WebView context")
        if index >= len(webviews):
            raise IndexError(f"WebView index {index} 超出範圍 (共 {len(webviews)} 個)")

        target = webviews[index]
        logger.info(f"切換到 WebView: {target}")
        self.driver.switch_to.context(target)
        return target

    def wait_for_webview(self, timeout: int | None = None) -> str:
        """等待 WebView context 出現後切換"""
        timeout = timeout or self.timeout
        logger.info(f"等待 WebView 出現 (最多 {timeout}s)...")

        end_time = time.time() + timeout
        while time.time() < end_time:
            webviews = self.webview_contexts()
            if webviews:
                self.driver.switch_to.context(webviews[0])
                logger.info(f"已切換到: {webviews[0]}")
                return webviews[0]
            time.sleep(0.5)

        raise TimeoutError(f"等待 WebView 逾時 ({timeout}s)")

    def inject_axe(self, payload, index: int = 0, skip_frames: bool | None = None,
                   async_mode: bool = False, restore: bool = True) -> InjectionReport:
        """
        切到 WebView 後把 axe-core 注入頁面與所有 frame。

        Args:
            payload: script 字串 / ScriptProvider / AxeScript 序列
            index: 要注入的 WebView index
            skip_frames: True 時只注入最上層文件
            async_mode: 使用 execute_async_script
            restore: 注入後切回原本的 context
        """
        original = self.driver.context
        self.switch_to_webview(index)
        injector = FrameInjector(self.driver)
        try:
            if async_mode:
                return injector.inject_async(payload, skip_frames)
            return injector.inject(payload, skip_frames)
        finally:
            if restore and original != self.driver.context:
                logger.info(f"切回原本的 context: {original}")
                self.driver.switch_to.context(original)
