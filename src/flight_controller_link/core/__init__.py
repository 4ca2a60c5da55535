"""
核心模块
========

包含校验算法、命令表、帧编解码、事件分发和串口传输等核心功能。
"""

from .checksum import calculate_checksum
from .catalog import CommandCatalog, Direction, FieldType, FieldSpec, PayloadSchema, DEFAULT_CATALOG
from .errors import (
    ProtocolError,
    UnknownCommandError,
    SchemaMismatchError,
    PayloadTooLargeError,
    BadHeaderError,
    ChecksumMismatchError,
    BufferOverflowError,
    DecodeError,
    DecodeErrorKind,
)
from .events import DecodedEvent, PidValues, SettingsValues, AngleValues
from .frame_encoder import FrameEncoder, encode_frame
from .frame_decoder import FrameDecoder
from .dispatcher import Dispatcher
from .serial_manager import SerialManager
from .io_thread import IoThread

__all__ = [
    "calculate_checksum",
    "CommandCatalog",
    "Direction",
    "FieldType",
    "FieldSpec",
    "PayloadSchema",
    "DEFAULT_CATALOG",
    "ProtocolError",
    "UnknownCommandError",
    "SchemaMismatchError",
    "PayloadTooLargeError",
    "BadHeaderError",
    "ChecksumMismatchError",
    "BufferOverflowError",
    "DecodeError",
    "DecodeErrorKind",
    "DecodedEvent",
    "PidValues",
    "SettingsValues",
    "AngleValues",
    "FrameEncoder",
    "encode_frame",
    "FrameDecoder",
    "Dispatcher",
    "SerialManager",
    "IoThread",
]
