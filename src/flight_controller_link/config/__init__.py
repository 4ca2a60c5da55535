"""
配置模块
=======

包含协议常量定义和配置管理功能。
"""

from .constants import *
from .settings import *

__all__ = [
    # 常量
    "CommandId",
    "COMMAND_HEADER",
    "RESPONSE_HEADER",
    "HEADER_SIZE",
    "MAX_PAYLOAD_LENGTH",
    "MAX_FRAME_SIZE",
    "DEFAULT_BAUDRATE",
    "DEFAULT_TIMEOUT",
    "DEFAULT_BUFFER_CAPACITY",
    # 配置
    "SerialConfig",
    "CodecConfig",
]
