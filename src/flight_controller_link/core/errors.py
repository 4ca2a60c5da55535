"""
协议错误定义
============

编码期错误以异常形式同步抛给调用方；解码期错误以 DecodeError 值的形式
随 feed() 的结果返回，不会中断数据流。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type


class ProtocolError(Exception):
    """协议错误基类"""


class UnknownCommandError(ProtocolError):
    """命令字未在命令表中注册（或该方向没有载荷定义）"""


class SchemaMismatchError(ProtocolError):
    """字段数量、名称、类型或取值与载荷定义不符"""


class PayloadTooLargeError(ProtocolError):
    """载荷超过255字节，无法用1字节长度表示"""


class BadHeaderError(ProtocolError):
    """缓冲区起始位置不是应答帧头"""


class ChecksumMismatchError(ProtocolError):
    """校验和不一致"""


class BufferOverflowError(ProtocolError):
    """单次投递的数据超过重组缓冲区剩余容量"""


class DecodeErrorKind(Enum):
    """解码期错误类型"""

    BAD_HEADER = "bad_header"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    UNKNOWN_COMMAND = "unknown_command"
    SCHEMA_MISMATCH = "schema_mismatch"
    BUFFER_OVERFLOW = "buffer_overflow"


_EXCEPTION_TYPES: Dict[DecodeErrorKind, Type[ProtocolError]] = {
    DecodeErrorKind.BAD_HEADER: BadHeaderError,
    DecodeErrorKind.CHECKSUM_MISMATCH: ChecksumMismatchError,
    DecodeErrorKind.UNKNOWN_COMMAND: UnknownCommandError,
    DecodeErrorKind.SCHEMA_MISMATCH: SchemaMismatchError,
    DecodeErrorKind.BUFFER_OVERFLOW: BufferOverflowError,
}


@dataclass(frozen=True)
class DecodeError:
    """解码期错误值"""

    kind: DecodeErrorKind
    message: str
    data: bytes = b""  # 被丢弃（或被拒绝）的原始字节

    def to_exception(self) -> ProtocolError:
        """转换为对应的异常对象，供需要抛出的调用方使用"""
        return _EXCEPTION_TYPES[self.kind](self.message)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
