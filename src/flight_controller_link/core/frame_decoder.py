"""
数据帧解码模块
==============

从字节流中重组飞控应答帧，校验后解码为类型化事件。

数据帧格式：| "$S<"(3B) | 命令字(1B) | 数据长度(1B) | 数据内容(NB) | 校验和(1B) |

传输层可能把一帧拆成多次投递，也可能把多帧合并成一次投递，
因此解码器内部维护一个有界的重组缓冲区，跨 feed() 调用累积数据。
解码期错误不会抛出异常，而是作为 DecodeError 随结果返回，
出错的字节被丢弃后继续扫描后续数据。

同一个解码器实例只能由一个线程调用 feed()。
"""

from typing import List, Optional, Union

from ..config.constants import (
    CommandId,
    RESPONSE_HEADER,
    HEADER_SIZE,
    FRAME_PREFIX_SIZE,
    FRAME_CHECKSUM_SIZE,
    MAX_FRAME_SIZE,
    DEFAULT_BUFFER_CAPACITY,
)
from .catalog import CommandCatalog, Direction, DEFAULT_CATALOG
from .checksum import calculate_checksum
from .errors import DecodeError, DecodeErrorKind, UnknownCommandError, SchemaMismatchError
from .events import DecodedEvent, AngleValues
from ..utils.logger import get_logger

logger = get_logger(__name__)

DecodeResult = Union[DecodedEvent, DecodeError]


class FrameDecoder:
    """数据帧解码器"""

    def __init__(
        self,
        catalog: CommandCatalog = DEFAULT_CATALOG,
        capacity: int = DEFAULT_BUFFER_CAPACITY,
    ):
        """
        初始化解码器

        Args:
            catalog: 命令表
            capacity: 重组缓冲区容量，不能小于最大帧长度
        """
        if capacity < MAX_FRAME_SIZE:
            raise ValueError(f"缓冲区容量不能小于最大帧长度{MAX_FRAME_SIZE}: {capacity}")
        self.catalog = catalog
        self._capacity = capacity
        self._buffer = bytearray()

    @property
    def capacity(self) -> int:
        """重组缓冲区容量"""
        return self._capacity

    @property
    def pending(self) -> int:
        """缓冲区中尚未组成完整帧的字节数"""
        return len(self._buffer)

    def reset(self) -> None:
        """清空重组缓冲区"""
        self._buffer.clear()

    def feed(self, data: bytes) -> List[DecodeResult]:
        """
        投递新收到的数据并解析其中所有完整帧

        Args:
            data: 传输层收到的一段原始字节

        Returns:
            每个完整帧对应一个结果（DecodedEvent 或 DecodeError），按到达顺序排列；
            数据不足一帧时返回空列表
        """
        if not data:
            return []

        if len(self._buffer) + len(data) > self._capacity:
            # 整段拒收，不做部分处理
            return [self._error(
                DecodeErrorKind.BUFFER_OVERFLOW,
                f"缓冲区溢出: 已缓存={len(self._buffer)}, 新数据={len(data)}, 容量={self._capacity}",
                bytes(data),
            )]

        logger.debug(f"收到数据: {bytes(data).hex(' ')}")
        self._buffer.extend(data)

        results: List[DecodeResult] = []
        while True:
            result = self._parse_next()
            if result is None:
                break  # 数据不足，等待后续数据
            results.append(result)
        return results

    def _parse_next(self) -> Optional[DecodeResult]:
        """从缓冲区头部解析一帧，数据不足时返回None"""
        buffer = self._buffer

        # 至少需要帧头、命令字和长度
        if len(buffer) < FRAME_PREFIX_SIZE:
            return None

        if not buffer.startswith(RESPONSE_HEADER):
            skip = self._resync_offset()
            discarded = bytes(buffer[:skip])
            del buffer[:skip]
            return self._error(
                DecodeErrorKind.BAD_HEADER,
                f"帧头错误，丢弃{len(discarded)}字节: {discarded!r}",
                discarded,
            )

        command = buffer[HEADER_SIZE]
        length = buffer[HEADER_SIZE + 1]
        frame_size = FRAME_PREFIX_SIZE + length + FRAME_CHECKSUM_SIZE
        if len(buffer) < frame_size:
            return None

        frame = bytes(buffer[:frame_size])
        del buffer[:frame_size]

        body = frame[HEADER_SIZE:-FRAME_CHECKSUM_SIZE]  # 命令字 + 长度 + 数据内容
        payload = body[2:]
        received_checksum = frame[-1]
        expected_checksum = calculate_checksum(body)
        if received_checksum != expected_checksum:
            return self._error(
                DecodeErrorKind.CHECKSUM_MISMATCH,
                f"校验和错误: 接收={received_checksum:#04x}, 计算={expected_checksum:#04x}",
                frame,
            )

        try:
            schema = self.catalog.lookup(command, Direction.INBOUND)
        except UnknownCommandError as e:
            return self._error(DecodeErrorKind.UNKNOWN_COMMAND, str(e), frame)

        try:
            values = schema.unpack(payload)
        except SchemaMismatchError as e:
            return self._error(
                DecodeErrorKind.SCHEMA_MISMATCH,
                f"命令字 {command}: {e}",
                frame,
            )

        event = schema.event_type(command=CommandId(command), **values)
        if isinstance(event, AngleValues):
            logger.debug(f"姿态角: roll={event.roll} pitch={event.pitch} yaw={event.yaw}")
        else:
            logger.info(f"收到应答: {event}")
        return event

    def _resync_offset(self) -> int:
        """
        计算帧头错误时需要丢弃的字节数

        丢弃到下一个完整帧头为止；找不到时保留末尾可能是帧头前缀的字节。
        """
        buffer = self._buffer
        index = buffer.find(RESPONSE_HEADER, 1)
        if index != -1:
            return index

        for keep in range(HEADER_SIZE - 1, 0, -1):
            if buffer.endswith(RESPONSE_HEADER[:keep]):
                return len(buffer) - keep
        return len(buffer)

    @staticmethod
    def _error(kind: DecodeErrorKind, message: str, data: bytes) -> DecodeError:
        logger.warning(message)
        return DecodeError(kind=kind, message=message, data=data)
