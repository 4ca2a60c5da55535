"""
命令行接口模块
=============

提供通过串口操作飞控的命令行功能。
"""

from .console import ConsoleSession, format_event

__all__ = [
    "ConsoleSession",
    "format_event",
]
