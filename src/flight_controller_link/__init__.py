"""
飞控通信协议库
==============

LaunchPad飞控与上位机之间的二进制命令/遥测协议实现，
通过蓝牙SPP或串口等字节流传输。

主要功能：
- 命令帧编码
- 应答帧流式重组、校验与解码
- 命令表（载荷结构定义）
- 解码事件分发
- 串口传输适配

作者: lanford
版本: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "lanford"
__email__ = ""
__description__ = "飞控蓝牙/串口通信协议编解码库"

# 导出主要类
from .config.constants import CommandId
from .core.catalog import Direction, DEFAULT_CATALOG
from .core.errors import DecodeError, DecodeErrorKind, ProtocolError
from .core.events import PidValues, SettingsValues, AngleValues
from .core.frame_encoder import FrameEncoder
from .core.frame_decoder import FrameDecoder
from .core.dispatcher import Dispatcher
from .control.flight_controller import FlightController

__all__ = [
    "CommandId",
    "Direction",
    "DEFAULT_CATALOG",
    "DecodeError",
    "DecodeErrorKind",
    "ProtocolError",
    "PidValues",
    "SettingsValues",
    "AngleValues",
    "FrameEncoder",
    "FrameDecoder",
    "Dispatcher",
    "FlightController",
]
