"""
pytest 全域 fixtures

提供：
- driver fixture：每個測試自動建立/銷毀 Appium 行動瀏覽器 session
- injector / axe_provider fixture：在 session 上注入 axe-core
- 命令列參數支援 (--platform, --axe-script, --skip-frames)
- 測試失敗時把最後一次注入結果附加到 Allure 報告
"""

import pytest

from config.config import Config
from utils.allure_helper import attach_report
from utils.logger import logger

pytest_plugins = ["pytester"]


# ── 命令列參數 ──

def pytest_addoption(parser):
    """新增自訂命令列參數"""
    parser.addoption(
        "--platform",
        action="store",
        default=Config.PLATFORM,
        choices=["android", "ios"],
        help="測試平台: android 或 ios",
    )
    parser.addoption(
        "--axe-script",
        action="store",
        default=str(Config.AXE_SCRIPT_PATH),
        help="axe-core bundle 路徑",
    )
    parser.addoption(
        "--skip-frames",
        action="store_true",
        default=Config.DISABLE_IFRAME_TESTING,
        help="只注入最上層文件，不走訪 iframe",
    )


# ── Session ──

@pytest.fixture(scope="session")
def platform(request) -> str:
    return request.config.getoption("--platform")


@pytest.fixture(scope="session")
def skip_frames(request) -> bool:
    return request.config.getoption("--skip-frames")


@pytest.fixture(scope="session")
def axe_provider(request):
    """依 --axe-script 建立 FileScriptProvider"""
    from core.script_provider import FileScriptProvider
    return FileScriptProvider(request.config.getoption("--axe-script"))


# ── Driver ──

@pytest.fixture(scope="function")
def driver(platform):
    """
    每個測試函式自動建立並銷毀 driver。

    scope=function 確保每個測試獨立，互不影響。
    """
    from core.driver_manager import DriverManager

    logger.info(f"===== 建立 {platform} driver =====")
    drv = DriverManager.create_driver(platform)
    yield drv
    logger.info("===== 關閉 driver =====")
    DriverManager.quit_driver()


@pytest.fixture
def injector(driver, skip_frames):
    """綁定目前 driver 的 FrameInjector，沒指定 skip_frames 時沿用 --skip-frames"""
    from core.frame_injector import FrameInjector
    return FrameInjector(driver, skip_frames=skip_frames)


# ── 測試生命週期 Hook ──

@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """測試失敗時附上最後一次注入的結果"""
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        logger.error(f"測試失敗: {item.name}")
        inj = item.funcargs.get("injector")
        if inj is not None and inj.last_report is not None:
            attach_report(inj.last_report, name=f"注入結果: {item.name}")
