"""
串口管理模块
============

蓝牙SPP/USB串口的传输适配器：打开、关闭、读写，并实现 send() 供编码后的帧发送。
连接重试和设备发现由上层应用负责。
"""

from typing import Optional

import serial

from ..config.settings import SerialConfig
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SerialManager:
    """串口管理器"""

    def __init__(self, config: SerialConfig):
        """
        初始化串口管理器

        Args:
            config: 串口配置对象
        """
        self.config = config
        self._port: Optional[serial.Serial] = None

    @property
    def port(self) -> Optional[serial.Serial]:
        """获取串口对象"""
        return self._port

    @property
    def is_open(self) -> bool:
        """检查串口是否已打开"""
        return self._port is not None and self._port.is_open

    def open(self) -> bool:
        """
        打开串口连接

        Returns:
            成功返回True，失败返回False
        """
        if self.is_open:
            logger.warning(f"串口 {self.config.port} 已经打开")
            return True

        try:
            self._port = serial.Serial(**self.config.to_serial_kwargs())
        except (serial.SerialException, ValueError) as e:
            logger.error(f"打开串口失败: {e}")
            self._port = None
            return False

        logger.info(f"成功打开串口 {self.config.port} @ {self.config.baudrate}")
        return True

    def close(self) -> None:
        """关闭串口连接"""
        try:
            if self._port is not None and self._port.is_open:
                self._port.close()
                logger.info(f"已关闭串口 {self.config.port}")
        except serial.SerialException as e:
            logger.error(f"关闭串口失败: {e}")
        finally:
            self._port = None

    def write(self, data: bytes) -> bool:
        """
        向串口写入数据

        Returns:
            全部写入返回True，否则返回False
        """
        if not self.is_open:
            logger.error("串口未打开，无法写入数据")
            return False

        try:
            bytes_written = self._port.write(data)
        except serial.SerialException as e:
            logger.error(f"写入数据失败: {e}")
            return False
        return bytes_written == len(data)

    def send(self, data: bytes) -> None:
        """
        发送一帧数据（传输适配器接口）

        Raises:
            ConnectionError: 串口未打开或写入不完整
        """
        if not self.write(data):
            raise ConnectionError(f"发送数据失败: {self.config.port}")

    def read(self, size: int) -> bytes:
        """
        从串口读取最多 size 字节，超时返回已读到的数据

        Returns:
            读取到的数据，失败时返回空bytes
        """
        if not self.is_open:
            logger.error("串口未打开，无法读取数据")
            return b''

        try:
            return self._port.read(size)
        except serial.SerialException as e:
            logger.error(f"读取数据失败: {e}")
            return b''

    def __enter__(self):
        """支持with语句"""
        if not self.open():
            raise RuntimeError(f"无法打开串口 {self.config.port}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.close()
