"""
Frame Injector — 把 axe-core 注入頁面與所有巢狀 frame

WebDriver 只會在「目前的 context」執行 script，不會自動深入 iframe。
這裡先在最上層文件執行，再以深度優先 (pre-order) 走訪每一層 frame，
每個 context 恰好注入一次，走完一個 frame 的子樹後 pop 回 parent 再處理下一個兄弟。

錯誤分類 (classify_error)：
    ErrorKind.SCRIPT             注入的 script 本身拋錯 → 立刻中止整個呼叫
    ErrorKind.FRAME_UNAVAILABLE  frame 已卸載 / 跨網域 / 尚未渲染 → 略過該子樹，繼續兄弟
    ErrorKind.CONTEXT_LOST       無法回到已知 context → 停止走訪，回到最上層後正常結束

呼叫結束後 driver 一律切回 default content (最上層文件)，
包括 ScriptExecutionError 往外拋的情況：FrameScope 逐層 pop，
最後 _run 的 finally 再切一次 default content，避免 pop 失敗時停在半路。

用法：
    from core.frame_injector import inject, inject_async
    from core.script_provider import FileScriptProvider

    report = inject(driver, FileScriptProvider("axe.min.js"))
    print(report.summary())
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from selenium.common.exceptions import JavascriptException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webelement import WebElement

from config.config import Config
from core.exceptions import (
    FrameContextLostError,
    FrameUnavailableError,
    NullPayloadError,
    ProviderError,
    ScriptExecutionError,
)
from core.frame_context import FrameScope
from core.script_provider import AxeScript
from utils.allure_helper import allure_step, attach_report
from utils.logger import logger

TOP_CONTEXT = "top"

# frame 元素的搜尋順序：先 iframe 再 frame，各自保持文件順序
FRAME_TAGS = ("iframe", "frame")


class _Unset(Enum):
    """max_depth 未指定時改讀 Config"""
    FROM_CONFIG = "from_config"


_FROM_CONFIG = _Unset.FROM_CONFIG


class ErrorKind(Enum):
    """走訪 frame 時錯誤的處理方式"""
    SCRIPT = "script"
    FRAME_UNAVAILABLE = "frame_unavailable"
    CONTEXT_LOST = "context_lost"

    @property
    def is_fatal(self) -> bool:
        return self is ErrorKind.SCRIPT


def classify_error(exc: BaseException) -> ErrorKind:
    """判斷一個錯誤是 script 本身的問題，還是 frame 狀態造成的"""
    if isinstance(exc, (JavascriptException, ScriptExecutionError)):
        return ErrorKind.SCRIPT
    if isinstance(exc, FrameContextLostError):
        return ErrorKind.CONTEXT_LOST
    return ErrorKind.FRAME_UNAVAILABLE


@dataclass
class SkippedFrame:
    path: str
    reason: str
    error: FrameUnavailableError | None = field(default=None, compare=False, repr=False)


@dataclass
class InjectionReport:
    """單次注入的診斷資訊，不影響呼叫端的控制流程"""
    async_mode: bool = False
    skip_frames: bool = False
    contexts: list[str] = field(default_factory=list)
    skipped: list[SkippedFrame] = field(default_factory=list)
    context_lost: bool = False

    @property
    def injected_count(self) -> int:
        return len(self.contexts)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def summary(self) -> str:
        mode = "async" if self.async_mode else "sync"
        text = f"axe 注入 ({mode}): {self.injected_count} 個 context"
        if self.skip_frames:
            text += "，已停用 iframe 測試"
        if self.skipped:
            text += f"，略過 {self.skipped_count} 個 frame"
        if self.context_lost:
            text += "，context 遺失後提前結束"
        return text


def resolve_payload(payload) -> tuple[AxeScript, ...]:
    """
    把各種 payload 形式統一成 AxeScript tuple。

    接受：
        str                      單一 script
        AxeScript                單一 script (含診斷資訊)
        ScriptProvider           任何有 get_script() 的物件
        Iterable[AxeScript|str]  批次注入，依序執行

    Raises:
        NullPayloadError: payload 為 None、空字串或空序列
        ProviderError: provider 無法產生 script
        TypeError: 不支援的 payload 型別
    """
    if payload is None:
        raise NullPayloadError()

    if isinstance(payload, AxeScript):
        payload = (payload,)
    elif isinstance(payload, str):
        if not payload:
            raise NullPayloadError()
        return (AxeScript(payload),)
    elif hasattr(payload, "get_script"):
        return (_load_from_provider(payload),)

    if not isinstance(payload, Iterable):
        raise TypeError(f"不支援的 payload 型別: {type(payload).__name__}")

    scripts = []
    for item in payload:
        if isinstance(item, AxeScript):
            scripts.append(item)
        elif isinstance(item, str):
            scripts.append(AxeScript(item))
        else:
            raise TypeError(f"批次 payload 只接受 AxeScript 或 str，收到 {type(item).__name__}")

    if not scripts:
        raise NullPayloadError()
    return tuple(scripts)


def _load_from_provider(provider) -> AxeScript:
    name = getattr(provider, "name", type(provider).__name__)
    try:
        source = provider.get_script()
    except ProviderError:
        raise
    except Exception as e:
        raise ProviderError(name, f"{type(e).__name__}: {e}", original=e) from e

    if not source:
        raise ProviderError(name, "provider 回傳空的 script")
    return AxeScript(source, message=name)


class FrameInjector:
    """
    在單一 driver session 上執行 frame 注入。

    Args:
        driver: Selenium / Appium WebDriver，注入器不會建立或關閉它
        max_depth: frame 巢狀上限，None = 不限制，預設讀 Config.MAX_FRAME_DEPTH
        skip_frames: inject() 沒指定 skip_frames 時使用的值，None 時讀 Config.DISABLE_IFRAME_TESTING
    """

    def __init__(self, driver, max_depth: int | None | _Unset = _FROM_CONFIG,
                 skip_frames: bool | None = None):
        self.driver = driver
        self.max_depth = Config.frame_depth_limit() if max_depth is _FROM_CONFIG else max_depth
        self.skip_frames = skip_frames
        self.last_report: InjectionReport | None = None

    @allure_step("注入 axe-core")
    def inject(self, payload, skip_frames: bool | None = None) -> InjectionReport:
        """
        在最上層與所有可到達的 frame 同步執行 payload。

        Args:
            payload: script 字串 / ScriptProvider / AxeScript 序列
            skip_frames: True 時只注入最上層文件，None 時沿用建構時的設定

        Raises:
            NullPayloadError / ProviderError: 在任何 driver 操作之前拋出
            ScriptExecutionError: 注入的 script 在任一 context 拋錯
        """
        return self._run(payload, skip_frames, async_mode=False)

    @allure_step("注入 axe-core (async)")
    def inject_async(self, payload, skip_frames: bool | None = None) -> InjectionReport:
        """同 inject()，但每個 context 都改用 execute_async_script"""
        return self._run(payload, skip_frames, async_mode=True)

    # ── 內部方法 ──

    def _run(self, payload, skip_frames: bool | None, async_mode: bool) -> InjectionReport:
        scripts = resolve_payload(payload)
        if skip_frames is None:
            skip_frames = self.skip_frames
        if skip_frames is None:
            skip_frames = Config.DISABLE_IFRAME_TESTING

        report = InjectionReport(async_mode=async_mode, skip_frames=skip_frames)
        self.last_report = report
        execute = self.driver.execute_async_script if async_mode else self.driver.execute_script

        logger.info(
            f"開始注入 {len(scripts)} 個 script "
            f"({'async' if async_mode else 'sync'}, skip_frames={skip_frames})"
        )

        self.driver.switch_to.default_content()
        try:
            self._execute_all(execute, scripts, TOP_CONTEXT)
            report.contexts.append(TOP_CONTEXT)
            if not skip_frames:
                self._traverse(execute, scripts, report)
        finally:
            self.driver.switch_to.default_content()

        logger.info(report.summary())
        attach_report(report)
        return report

    def _traverse(self, execute: Callable, scripts: tuple[AxeScript, ...],
                  report: InjectionReport) -> None:
        try:
            self._inject_into_frames(execute, scripts, (), "", report)
        except Exception as e:
            kind = classify_error(e)
            if kind.is_fatal:
                raise
            if kind is ErrorKind.CONTEXT_LOST:
                logger.warning(f"frame 走訪中止: {e}", extra={"frame_path": e.frame_path})
                report.context_lost = True
            else:
                # 最上層列舉 frame 本身失敗 (例如頁面正在導覽)
                logger.debug(f"無法列舉最上層的 frame: {_describe(e)}")
                self._skip(report, TOP_CONTEXT, _describe(e), e)

    @staticmethod
    def _skip(report: InjectionReport, path: str, reason: str,
              original: BaseException | None = None) -> None:
        error = FrameUnavailableError(path, reason, original=original)
        report.skipped.append(SkippedFrame(path, reason, error))

    def _execute_all(self, execute: Callable, scripts: tuple[AxeScript, ...], path: str) -> None:
        for script in scripts:
            try:
                execute(script.source)
            except JavascriptException as e:
                logger.error(
                    f"注入的 script 執行失敗 @ {path}: {e.msg}",
                    extra={"frame_path": path},
                )
                raise ScriptExecutionError(path, script.message, original=e) from e

    def _find_frames(self) -> list[tuple[str, WebElement]]:
        """列出目前 context 中的 frame 元素，路徑片段如 iframe[0]、frame[1]"""
        found = []
        for tag in FRAME_TAGS:
            for index, element in enumerate(self.driver.find_elements(By.TAG_NAME, tag)):
                found.append((f"{tag}[{index}]", element))
        return found

    def _inject_into_frames(self, execute: Callable, scripts: tuple[AxeScript, ...],
                            ancestors: tuple[WebElement, ...], parent_path: str,
                            report: InjectionReport) -> None:
        depth = len(ancestors) + 1

        for label, frame in self._find_frames():
            path = f"{parent_path} > {label}" if parent_path else label

            if self.max_depth is not None and depth > self.max_depth:
                logger.warning(
                    f"frame 巢狀超過 {self.max_depth} 層，不再深入: {path}",
                    extra={"frame_path": path},
                )
                self._skip(report, path, "max depth")
                continue

            try:
                with FrameScope(self.driver, frame, ancestors, path):
                    self._execute_all(execute, scripts, path)
                    report.contexts.append(path)
                    self._inject_into_frames(
                        execute, scripts, ancestors + (frame,), path, report
                    )
            except Exception as e:
                if classify_error(e) is not ErrorKind.FRAME_UNAVAILABLE:
                    raise
                logger.debug(f"略過 frame {path}: {_describe(e)}", extra={"frame_path": path})
                self._skip(report, path, _describe(e), e)


def _describe(exc: BaseException) -> str:
    detail = getattr(exc, "msg", None) or str(exc)
    return f"{type(exc).__name__}: {detail}".strip().rstrip(":")


# ── 模組層級捷徑 ──

def inject(driver, payload, skip_frames: bool | None = None,
           max_depth: int | None | _Unset = _FROM_CONFIG) -> InjectionReport:
    """在最上層與所有巢狀 frame 注入 payload (同步)"""
    return FrameInjector(driver, max_depth).inject(payload, skip_frames)


def inject_async(driver, payload, skip_frames: bool | None = None,
                 max_depth: int | None | _Unset = _FROM_CONFIG) -> InjectionReport:
    """在最上層與所有巢狀 frame 注入 payload (execute_async_script)"""
    return FrameInjector(driver, max_depth).inject_async(payload, skip_frames)


def execute_async_script(driver, command: str, *args):
    """執行一個 async command，回傳它傳給 callback 的結果"""
    return driver.execute_async_script(command, *args)
