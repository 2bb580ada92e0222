"""
自訂 Exception 體系

注入流程的每種失敗都有明確分類。
上層可以 catch 大類別 (如 InjectionError)，
也可以精準 catch 子類別 (如 ScriptExecutionError)。

Exception 樹：
    A11yFrameworkError
    ├── DriverError
    │   ├── DriverNotInitializedError
    │   └── DriverConnectionError
    └── InjectionError
        ├── NullPayloadError
        ├── ProviderError
        ├── ScriptExecutionError
        └── FrameUnavailableError
            └── FrameContextLostError
"""


class A11yFrameworkError(Exception):
    """框架所有例外的基底，catch 這個就能攔截一切框架錯誤"""

    def __init__(self, message: str = "", context: dict | None = None):
        self.context = context or {}
        super().__init__(message)


# ── Driver 相關 ──

class DriverError(A11yFrameworkError):
    """Driver 相關錯誤"""


class DriverNotInitializedError(DriverError):
    """Driver 尚未初始化就被使用"""

    def __init__(self, message: str = "Driver 尚未建立，請先呼叫 create_driver()"):
        super().__init__(message)


class DriverConnectionError(DriverError):
    """無法連接到 Appium Server"""

    def __init__(self, url: str = "", original: Exception | None = None):
        self.original = original
        msg = f"無法連接到 Appium Server: {url}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"url": url})


# ── 注入相關 ──

class InjectionError(A11yFrameworkError):
    """axe-core 注入流程錯誤"""


class NullPayloadError(InjectionError):
    """沒有提供 script 或 script provider"""

    def __init__(self, message: str = "未提供要注入的 script (payload 為 None 或空序列)"):
        super().__init__(message)


class ProviderError(InjectionError):
    """Script provider 無法產生 script 內容"""

    def __init__(self, provider: str = "", reason: str = "",
                 original: Exception | None = None):
        self.original = original
        msg = f"Script provider 失敗 [{provider}]"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, context={"provider": provider})


class ScriptExecutionError(InjectionError):
    """注入的 script 本身在瀏覽器中拋出錯誤，一律視為致命錯誤"""

    def __init__(self, frame_path: str = "top", script: str = "",
                 original: Exception | None = None):
        self.frame_path = frame_path
        self.original = original
        msg = f"注入的 script 執行失敗 @ {frame_path}"
        if script:
            msg += f" [{script}]"
        if original is not None:
            detail = getattr(original, "msg", None) or str(original)
            msg += f": {detail}"
        super().__init__(msg, context={"frame_path": frame_path, "script": script})


class FrameUnavailableError(InjectionError):
    """
    無法進入或在 frame 內執行 (已卸載、跨網域、尚未渲染)

    注入器不會拋出這個錯誤：被略過的 frame 以實例形式記在
    InjectionReport.skipped[i].error，original 為 driver 原本拋出的例外。
    """

    def __init__(self, frame_path: str = "", reason: str = "",
                 original: BaseException | None = None):
        self.frame_path = frame_path
        self.original = original
        msg = f"Frame 無法使用: {frame_path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, context={"frame_path": frame_path, "reason": reason})


class FrameContextLostError(FrameUnavailableError):
    """離開 frame 後無法回到已知的 context，剩餘的 frame 走訪必須中止"""
