from utils.logger import logger
from utils.allure_helper import allure_step, attach_report, attach_text

__all__ = [
    "logger",
    "allure_step",
    "attach_report",
    "attach_text",
]
