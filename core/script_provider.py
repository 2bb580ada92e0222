"""
Script Provider — 提供要注入的 axe-core 原始碼

注入器只認得 get_script() -> str 這個介面，
provider 自己的失敗 (檔案不存在、不支援的操作) 一律轉成 ProviderError，
在任何 driver 操作之前拋給呼叫端。

用法：
    from core.script_provider import FileScriptProvider

    provider = FileScriptProvider("vendor/axe.min.js")
    inject(driver, provider)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from config.config import Config
from core.exceptions import ProviderError
from utils.logger import logger


@dataclass(frozen=True)
class AxeScript:
    """
    批次注入的單一 script。

    message / type 只作為診斷資訊與排序用途，注入器不解讀。
    """
    source: str
    message: str = ""
    type: str = ""


class ScriptProvider(ABC):
    """Script 來源的抽象介面"""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def get_script(self) -> str:
        """回傳要注入的 JavaScript 原始碼"""


class FileScriptProvider(ScriptProvider):
    """從檔案讀取 axe-core bundle (例如 axe.min.js)"""

    def __init__(self, path: str | Path, encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding

    @property
    def name(self) -> str:
        return f"file:{self.path.name}"

    def get_script(self) -> str:
        if not self.path.is_file():
            raise ProviderError(self.name, f"找不到 script 檔案: {self.path}")
        try:
            source = self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ProviderError(self.name, f"讀取失敗: {e}", original=e) from e

        if not source.strip():
            raise ProviderError(self.name, f"script 檔案是空的: {self.path}")

        logger.debug(f"已載入 script {self.path} ({len(source)} 字元)")
        return source


class InlineScriptProvider(ScriptProvider):
    """直接包裝一段 script 字串"""

    def __init__(self, source: str):
        self.source = source

    @property
    def name(self) -> str:
        return "inline"

    def get_script(self) -> str:
        if not self.source or not self.source.strip():
            raise ProviderError(self.name, "inline script 是空的")
        return self.source


def default_provider() -> FileScriptProvider:
    """依 Config.AXE_SCRIPT_PATH 建立預設 provider"""
    return FileScriptProvider(Config.AXE_SCRIPT_PATH)
