"""
日志记录模块
============

提供统一的日志记录功能，支持彩色输出和调用位置追踪。
"""

import datetime
import logging
import sys
from typing import Dict, Optional


DEFAULT_LOGGER_NAME = "flight_controller_link"


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',    # 青色
        'INFO': '\033[0m',      # 默认色
        'WARNING': '\033[33m',  # 黄色
        'ERROR': '\033[31m',    # 红色
        'CRITICAL': '\033[35m', # 紫色
        'RESET': '\033[0m'      # 重置
    }

    def format(self, record: logging.LogRecord) -> str:
        """格式化日志记录"""
        created = datetime.datetime.fromtimestamp(record.created)
        timestamp = created.strftime("%Y-%m-%d %H:%M:%S") + f".{created.microsecond // 1000:03d}"

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        message = (
            f"{color}[{timestamp}] {record.levelname[0]} {record.getMessage()} "
            f"[{record.filename}.{record.funcName}():{record.lineno}]{reset}"
        )
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


# 全局日志器字典
_loggers: Dict[str, logging.Logger] = {}
_level = logging.INFO


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    设置日志器

    Args:
        name: 日志器名称
        level: 日志级别，None表示使用当前全局级别
        log_file: 日志文件路径，None表示不写入文件
        console_output: 是否输出到控制台

    Returns:
        配置好的日志器
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level if level is None else level)

    # 清除已有的处理器
    logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ColoredFormatter())
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(file_handler)

    # 防止重复输出
    logger.propagate = False

    _loggers[name] = logger
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    获取日志器实例

    Args:
        name: 日志器名称，通常传入 __name__

    Returns:
        日志器实例
    """
    if name not in _loggers:
        setup_logger(name)
    return _loggers[name]


def set_log_level(level: int) -> None:
    """
    统一调整所有已创建日志器的级别，--verbose 时切换到 DEBUG

    Args:
        level: 新的日志级别
    """
    global _level
    _level = level
    for logger in _loggers.values():
        logger.setLevel(level)
