"""
彩色日志配置模块
提供统一的彩色日志配置
- 默认使用 rich 的 RichHandler
- LOG_RICH=0 时使用 ANSI 颜色的 StreamHandler (适合不支持 rich 的终端或日志采集)
- LOG_LEVEL 控制默认日志级别
"""
import logging
import os
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def _env_flag(name: str, default: bool = True) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


RICH_ENABLED = _env_flag("LOG_RICH")


def default_level() -> int:
    """从 LOG_LEVEL 读取日志级别，无效值回退到 INFO"""
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


class ColorfulFormatter(logging.Formatter):
    """給時間、級別和日志器名稱上色，消息內容保持原樣"""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',     # 青色
        logging.INFO: '\033[32m',      # 绿色
        logging.WARNING: '\033[33m',   # 黄色
        logging.ERROR: '\033[31m',     # 红色
        logging.CRITICAL: '\033[35m',  # 紫色
    }
    TIME_COLOR = '\033[34m'   # 蓝色
    NAME_COLOR = '\033[90m'   # 灰色
    RESET = '\033[0m'

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{self.RESET}"

    def formatTime(self, record, datefmt=None):
        return self._paint(super().formatTime(record, datefmt), self.TIME_COLOR)

    def format(self, record):
        # 在副本上改字段，其他 handler 看到的 record 不受影響
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno)
        if color:
            colored.levelname = self._paint(record.levelname, color)
        colored.name = self._paint(record.name, self.NAME_COLOR)
        return super().format(colored)


def setup_colorful_logging(level: Optional[int] = None, name: Optional[str] = None) -> logging.Logger:
    """
    设置彩色日志配置

    Args:
        level: 日志级别，为空时读取 LOG_LEVEL
        name: 日志器名称

    Returns:
        配置好的日志器
    """
    level = default_level() if level is None else level
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 避免重复添加处理器
    if logger.handlers:
        return logger

    if RICH_ENABLED:
        console = Console()
        handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=False,
            enable_link_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_width=console.width,
            tracebacks_show_locals=False,
        )
        handler.setLevel(level)
        # RichHandler 自带时间和级别
        handler.setFormatter(logging.Formatter('%(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(ColorfulFormatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

    logger.addHandler(handler)
    return logger


def get_colorful_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取彩色日志器

    Args:
        name: 日志器名称

    Returns:
        彩色日志器
    """
    return setup_colorful_logging(name=name)
