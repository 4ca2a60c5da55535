"""
数据帧编码模块
==============

负责把命令字和字段值封装成线上数据帧。

数据帧格式：| 帧头(3B) | 命令字(1B) | 数据长度(1B) | 数据内容(NB) | 校验和(1B) |

- 帧头：上行 "$S>"，下行 "$S<"
- 校验和：命令字、数据长度、数据内容逐字节异或
"""

import struct
from typing import Any, Mapping, Sequence, Union

from ..config.constants import COMMAND_HEADER, RESPONSE_HEADER, MAX_PAYLOAD_LENGTH
from .catalog import CommandCatalog, Direction, DEFAULT_CATALOG
from .checksum import calculate_checksum
from .errors import PayloadTooLargeError
from ..utils.logger import get_logger

logger = get_logger(__name__)

FieldValues = Union[Sequence[Any], Mapping[str, Any]]


def header_for(direction: Direction) -> bytes:
    """返回指定方向使用的帧头"""
    return COMMAND_HEADER if direction is Direction.OUTBOUND else RESPONSE_HEADER


class FrameEncoder:
    """数据帧编码器（无状态，可跨线程共用）"""

    def __init__(self, catalog: CommandCatalog = DEFAULT_CATALOG):
        self.catalog = catalog

    def encode(
        self,
        command: int,
        fields: FieldValues = (),
        direction: Direction = Direction.OUTBOUND,
    ) -> bytes:
        """
        将命令和字段值打包成数据帧

        Args:
            command: 命令字
            fields: 按载荷定义顺序排列的字段值，或以字段名为键的映射
            direction: 帧方向，OUTBOUND 用于发送给飞控，INBOUND 用于模拟飞控应答

        Returns:
            完整数据帧

        Raises:
            UnknownCommandError: 命令字在该方向上没有载荷定义
            SchemaMismatchError: 字段与载荷定义不符
            PayloadTooLargeError: 载荷超过255字节

        Examples:
            >>> FrameEncoder().encode(CommandId.GET_SETTINGS)
            b'$S>\\t\\x00\\t'
        """
        schema = self.catalog.lookup(command, direction)
        payload = schema.pack(fields)
        return self.pack_frame(command, payload, direction)

    @staticmethod
    def pack_frame(
        command: int,
        payload: bytes,
        direction: Direction = Direction.OUTBOUND,
    ) -> bytes:
        """
        按帧格式封装已经序列化好的载荷，不查询命令表

        Raises:
            PayloadTooLargeError: 载荷超过255字节
            ValueError: 命令字不在0-255范围内
        """
        if len(payload) > MAX_PAYLOAD_LENGTH:
            raise PayloadTooLargeError(
                f"载荷长度 {len(payload)} 超过上限 {MAX_PAYLOAD_LENGTH}"
            )
        if not 0 <= int(command) <= 0xFF:
            raise ValueError(f"命令字必须在0-255之间: {command}")

        body = struct.pack("<BB", int(command), len(payload)) + bytes(payload)
        frame = header_for(direction) + body + bytes([calculate_checksum(body)])

        logger.debug(f"打包数据帧: {frame.hex(' ')}")
        return frame


_default_encoder = FrameEncoder()


def encode_frame(
    command: int,
    fields: FieldValues = (),
    direction: Direction = Direction.OUTBOUND,
) -> bytes:
    """使用默认命令表编码数据帧"""
    return _default_encoder.encode(command, fields, direction)
