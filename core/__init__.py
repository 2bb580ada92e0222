"""
core — 框架核心

統一匯出注入器與相關元件，方便外部 import。

用法：
    from core import inject, inject_async, FrameInjector
    from core import FileScriptProvider, AxeScript
    from core import ScriptExecutionError, NullPayloadError
"""

from core.driver_manager import DriverManager
from core.exceptions import (
    A11yFrameworkError,
    DriverConnectionError,
    DriverError,
    DriverNotInitializedError,
    FrameContextLostError,
    FrameUnavailableError,
    InjectionError,
    NullPayloadError,
    ProviderError,
    ScriptExecutionError,
)
from core.frame_context import FrameScope
from core.frame_injector import (
    ErrorKind,
    FrameInjector,
    InjectionReport,
    SkippedFrame,
    classify_error,
    execute_async_script,
    inject,
    inject_async,
)
from core.script_provider import (
    AxeScript,
    FileScriptProvider,
    InlineScriptProvider,
    ScriptProvider,
    default_provider,
)

__all__ = [
    # Injection
    "inject",
    "inject_async",
    "execute_async_script",
    "FrameInjector",
    "FrameScope",
    "InjectionReport",
    "SkippedFrame",
    "ErrorKind",
    "classify_error",
    # Script providers
    "AxeScript",
    "ScriptProvider",
    "FileScriptProvider",
    "InlineScriptProvider",
    "default_provider",
    # Driver
    "DriverManager",
    # Exceptions
    "A11yFrameworkError",
    "DriverError",
    "DriverNotInitializedError",
    "DriverConnectionError",
    "InjectionError",
    "NullPayloadError",
    "ProviderError",
    "ScriptExecutionError",
    "FrameUnavailableError",
    "FrameContextLostError",
]
