"""
Frame Context 管理

Driver 的「目前 frame」是隱藏的可變狀態，沒有任何 API 可以查詢。
因此進出 frame 一律走 FrameScope：進入時 switch_to.frame，
離開時 (不論正常結束或拋出例外) 一定 pop 回上一層。

pop 失敗時改從 default content 依祖先鏈重新往下切換；
連重新切換都失敗就拋出 FrameContextLostError，
讓上層知道 driver 已不在已知的 context，剩下的 frame 走訪必須中止。

用法：
    with FrameScope(driver, frame_el, ancestors, path="iframe[0]"):
        driver.execute_script(source)
"""

from __future__ import annotations

from typing import Sequence

from selenium.common.exceptions import JavascriptException, WebDriverException
from selenium.webdriver.remote.webelement import WebElement

from core.exceptions import FrameContextLostError, ScriptExecutionError
from utils.logger import logger


class FrameScope:
    """
    進入一個 frame，離開時保證回到它的 parent。

    Args:
        driver: WebDriver (Selenium / Appium)
        frame: 要進入的 frame 元素，必須是在 parent context 中找到的
        ancestors: 從最上層到 parent 的 frame 元素鏈，pop 失敗時用來重新下探
        path: 給 log / 錯誤訊息用的 frame 路徑
    """

    def __init__(self, driver, frame: WebElement,
                 ancestors: Sequence[WebElement] = (), path: str = ""):
        self.driver = driver
        self.frame = frame
        self.ancestors = tuple(ancestors)
        self.path = path

    def __enter__(self) -> "FrameScope":
        self.driver.switch_to.frame(self.frame)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        # 下層已經失去 context，再 pop 只會切到錯的地方
        if exc_type is not None and issubclass(exc_type, FrameContextLostError):
            return False

        try:
            self.restore_parent()
        except FrameContextLostError:
            if isinstance(exc, (JavascriptException, ScriptExecutionError)):
                logger.warning(
                    f"回報 script 錯誤時無法回到 {self.path} 的 parent，保留原始錯誤"
                )
                return False
            raise
        return False

    def restore_parent(self) -> None:
        """回到 parent context，必要時從最上層依祖先鏈重新下探"""
        try:
            self.driver.switch_to.parent_frame()
            return
        except WebDriverException as e:
            logger.debug(f"parent_frame() 失敗 @ {self.path}，改由最上層重新切換: {e}")

        try:
            self.driver.switch_to.default_content()
            for ancestor in self.ancestors:
                self.driver.switch_to.frame(ancestor)
        except WebDriverException as e:
            raise FrameContextLostError(self.path, f"無法回到 parent: {e}") from e
