"""
Allure 報告整合輔助
把 axe-core 注入包成 Allure step，並把注入結果附加到報告。
沒有 allure 監聽器 (未加 --alluredir) 時，allure.step / allure.attach 不做任何事。
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

import allure

if TYPE_CHECKING:
    from core.frame_injector import InjectionReport


def allure_step(title: str):
    """
    裝飾器：將函式標記為 Allure step。

    用法：
        @allure_step("注入 axe-core")
        def inject(self, payload): ...
    """
    def decorator(func):
        @allure.step(title)
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)
        return wrapper
    return decorator


def attach_text(text: str, name: str = "log") -> None:
    """將文字附加到 Allure 報告"""
    allure.attach(text, name=name, attachment_type=allure.attachment_type.TEXT)


def attach_report(report: "InjectionReport", name: str = "axe 注入結果") -> None:
    """將 InjectionReport 的摘要與略過清單附加到 Allure 報告"""
    lines = [report.summary()]
    lines.extend(f"  注入: {path}" for path in report.contexts)
    lines.extend(f"  略過: {s.path} ({s.reason})" for s in report.skipped)
    attach_text("\n".join(lines), name=name)
