"""
配置管理
========

提供串口和编解码相关的配置类。
"""

from dataclasses import dataclass
import serial

from .constants import (
    DEFAULT_BAUDRATE,
    DEFAULT_TIMEOUT,
    DEFAULT_BUFFER_CAPACITY,
    DEFAULT_READ_CHUNK_SIZE,
    DEFAULT_EVENT_QUEUE_SIZE,
    MAX_FRAME_SIZE,
)


@dataclass
class SerialConfig:
    """串口配置类"""

    port: str  # 串口号（蓝牙SPP虚拟串口或USB转串口）
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    bytesize: int = serial.EIGHTBITS  # 数据位
    parity: str = serial.PARITY_NONE  # 校验位
    stopbits: float = serial.STOPBITS_ONE  # 停止位
    timeout: float = DEFAULT_TIMEOUT  # 读超时时间

    def to_serial_kwargs(self) -> dict:
        """转换为serial.Serial的参数字典"""
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "timeout": self.timeout,
        }


@dataclass
class CodecConfig:
    """编解码配置类"""

    buffer_capacity: int = DEFAULT_BUFFER_CAPACITY  # 接收重组缓冲区容量
    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE  # IO线程单次读取字节数
    event_queue_size: int = DEFAULT_EVENT_QUEUE_SIZE  # 事件队列大小

    def __post_init__(self):
        """参数验证"""
        if self.buffer_capacity < MAX_FRAME_SIZE:
            raise ValueError(f"buffer_capacity不能小于最大帧长度{MAX_FRAME_SIZE}")
        if self.read_chunk_size <= 0:
            raise ValueError("read_chunk_size必须大于0")
        if self.read_chunk_size > self.buffer_capacity:
            raise ValueError("read_chunk_size不能大于buffer_capacity")
        if self.event_queue_size <= 0:
            raise ValueError("event_queue_size必须大于0")
