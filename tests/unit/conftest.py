"""
單元測試用的假 driver

FakeFrameDriver 模擬 WebDriver 的 frame 狀態機：
switch_to.default_content / frame / parent_frame 維護一個 context stack，
execute_script 記錄在哪個 context 執行，find_elements 回傳目前 context 的子 frame。
"""

import pytest
from selenium.common.exceptions import (
    JavascriptException,
    NoSuchFrameException,
    StaleElementReferenceException,
    WebDriverException,
)
from selenium.webdriver.common.by import By


class FakeFrame:
    """
    假 frame 元素

    Args:
        name: 用來辨識 context 的名稱
        children: 子 frame
        tag: "iframe" 或 "frame"
        detached: 切換進去時拋 StaleElementReferenceException
        script_error: 在此 context 執行 script 時拋 JavascriptException
        exec_error: 在此 context 執行 script 時拋一般 WebDriverException
        find_error: 在此 context 列舉 frame 時拋 WebDriverException
        detach_after_visit: 第一次進入後就變成 detached
    """

    def __init__(self, name, children=(), tag="iframe", detached=False,
                 script_error=False, exec_error=False, find_error=False,
                 detach_after_visit=False):
        self.name = name
        self.children = list(children)
        self.tag = tag
        self.detached = detached
        self.script_error = script_error
        self.exec_error = exec_error
        self.find_error = find_error
        self.detach_after_visit = detach_after_visit

    def __repr__(self):
        return f"FakeFrame({self.name!r})"


class _FakeSwitchTo:
    def __init__(self, driver):
        self._driver = driver

    def default_content(self):
        self._driver.calls.append(("default",))
        if self._driver.calls.count(("default",)) in self._driver.failing_default_calls:
            raise WebDriverException("default_content 失敗")
        self._driver.stack = [self._driver.root]

    def frame(self, frame):
        self._driver.calls.append(("frame", frame.name))
        current = self._driver.current
        if frame.detached:
            raise StaleElementReferenceException(f"{frame.name} 已卸載")
        if frame not in current.children:
            raise NoSuchFrameException(f"{frame.name} 不在 {current.name} 裡")
        self._driver.stack.append(frame)
        if frame.detach_after_visit:
            frame.detached = True

    def parent_frame(self):
        self._driver.calls.append(("parent",))
        if self._driver.parent_frame_fails:
            raise WebDriverException("parent_frame 失敗")
        if len(self._driver.stack) > 1:
            self._driver.stack.pop()


class FakeFrameDriver:
    """最小的 WebDriver 替身，只實作注入器會用到的 API"""

    def __init__(self, frames=(), top_script_error=False, parent_frame_fails=False,
                 failing_default_calls=()):
        self.root = FakeFrame("top", frames, script_error=top_script_error)
        self.stack = [self.root]
        self.parent_frame_fails = parent_frame_fails
        # 第幾次 (從 1 起算) default_content() 呼叫要失敗
        self.failing_default_calls = set(failing_default_calls)
        self.calls = []
        self.executed = []
        self.switch_to = _FakeSwitchTo(self)

    @property
    def current(self):
        return self.stack[-1]

    @property
    def visited(self) -> list[str]:
        """依序列出執行過 script 的 context 名稱 (同一 context 多個 script 只記一次)"""
        order = []
        for name, _src, _mode in self.executed:
            if not order or order[-1] != name:
                order.append(name)
        return order

    def _run(self, source, mode):
        ctx = self.current
        self.calls.append(("execute", ctx.name, mode))
        if ctx.script_error:
            raise JavascriptException(f"axe is not defined ({ctx.name})")
        if ctx.exec_error:
            raise WebDriverException(f"{ctx.name} 無法執行")
        self.executed.append((ctx.name, source, mode))
        return None

    def execute_script(self, source, *args):
        return self._run(source, "sync")

    def execute_async_script(self, source, *args):
        return self._run(source, "async")

    def find_elements(self, by, value):
        ctx = self.current
        self.calls.append(("find", ctx.name, value))
        assert by == By.TAG_NAME
        if ctx.find_error:
            raise WebDriverException(f"{ctx.name} 無法列舉")
        return [child for child in ctx.children if child.tag == value]


@pytest.fixture
def frame():
    """建立 FakeFrame 的 factory"""
    return FakeFrame


@pytest.fixture
def make_driver():
    """建立 FakeFrameDriver 的 factory"""
    return FakeFrameDriver
