"""
IO线程模块
==========

独立线程读取串口数据并喂给解码器，解码事件投递到队列，
业务线程从队列取事件后再分发，处理函数不会在IO线程中执行。
"""

import threading
import queue
import time
from typing import Optional

from ..config.settings import CodecConfig
from ..core.serial_manager import SerialManager
from ..core.frame_decoder import FrameDecoder
from ..core.errors import DecodeError
from ..core.events import DecodedEvent
from ..utils.logger import get_logger

logger = get_logger(__name__)


class IoThread:
    """
    IO线程类

    该线程是所属解码器唯一的 feed() 调用方。
    """

    def __init__(
        self,
        serial_manager: SerialManager,
        decoder: Optional[FrameDecoder] = None,
        config: Optional[CodecConfig] = None,
    ):
        """
        初始化IO线程

        Args:
            serial_manager: 串口管理器
            decoder: 解码器，None时按config创建
            config: 编解码配置
        """
        self.config = config or CodecConfig()
        self.serial_manager = serial_manager
        self.decoder = decoder or FrameDecoder(capacity=self.config.buffer_capacity)
        self.event_queue: "queue.Queue[DecodedEvent]" = queue.Queue(
            maxsize=self.config.event_queue_size
        )

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        # 统计信息
        self.events_received = 0
        self.events_dropped = 0
        self.decode_errors = 0
        self.read_errors = 0

    def start(self) -> bool:
        """
        启动IO线程

        Returns:
            启动成功返回True，失败返回False
        """
        if self.is_running:
            logger.warning("IO线程已经在运行")
            return True

        if not self.serial_manager.is_open:
            logger.error("串口未打开，无法启动IO线程")
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._io_loop, name="fc-link-io", daemon=True)
        self._thread.start()

        logger.info("IO线程已启动")
        return True

    def stop(self, timeout: float = 2.0) -> bool:
        """
        停止IO线程

        Args:
            timeout: 等待线程结束的超时时间(秒)

        Returns:
            停止成功返回True，超时返回False
        """
        if self._thread is None:
            return True

        logger.info("正在停止IO线程...")
        self._stop_event.set()

        if self._thread.is_alive():
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"IO线程未在{timeout}秒内结束")
                return False

        self._thread = None
        logger.info("IO线程已停止")
        return True

    def get_event(self, timeout: Optional[float] = None) -> Optional[DecodedEvent]:
        """
        从队列获取解码事件

        Args:
            timeout: 超时时间(秒)，None表示阻塞等待

        Returns:
            成功返回事件，超时返回None
        """
        try:
            return self.event_queue.get(timeout=timeout)
        except queue.Empty:
            return None

    @property
    def is_running(self) -> bool:
        """检查IO线程是否在运行"""
        return self._thread is not None and self._thread.is_alive()

    @property
    def queue_size(self) -> int:
        """获取当前队列大小"""
        return self.event_queue.qsize()

    def get_statistics(self) -> dict:
        """
        获取IO线程统计信息

        Returns:
            包含统计信息的字典
        """
        return {
            "running": self.is_running,
            "queue_size": self.queue_size,
            "pending_bytes": self.decoder.pending,
            "events_received": self.events_received,
            "events_dropped": self.events_dropped,
            "decode_errors": self.decode_errors,
            "read_errors": self.read_errors,
        }

    def _io_loop(self) -> None:
        """IO线程主循环"""
        logger.debug("IO线程开始运行")

        while not self._stop_event.is_set():
            try:
                data = self.serial_manager.read(self._read_size())
            except Exception as e:
                self.read_errors += 1
                logger.error(f"IO线程读取异常: {e}")
                time.sleep(0.01)  # 错误时稍长等待
                continue

            if not data:
                # 串口读超时已经限制了等待，这里只避免无超时时的忙循环
                time.sleep(0.001)
                continue

            self.process_chunk(data)

        logger.debug("IO线程已结束")

    def _read_size(self) -> int:
        """单次读取字节数，不超过解码缓冲区剩余空间，避免整段溢出被拒收"""
        free = self.decoder.capacity - self.decoder.pending
        return max(1, min(self.config.read_chunk_size, free))

    def process_chunk(self, data: bytes) -> int:
        """
        解码一段数据并把事件放入队列

        Returns:
            本次得到的事件数
        """
        events = 0
        for result in self.decoder.feed(data):
            if isinstance(result, DecodeError):
                self.decode_errors += 1
                continue
            self._queue_event(result)
            events += 1
        return events

    def _queue_event(self, event: DecodedEvent) -> None:
        """
        将事件加入队列，队列满时丢弃最老的事件

        Args:
            event: 要加入的事件
        """
        try:
            self.event_queue.put_nowait(event)
            self.events_received += 1
            return
        except queue.Full:
            pass

        try:
            self.event_queue.get_nowait()  # 移除最老的
        except queue.Empty:
            pass  # 消费者刚好取空了队列
        self.event_queue.put_nowait(event)
        self.events_received += 1
        self.events_dropped += 1
        logger.warning("事件队列满，丢弃旧事件")

    def __enter__(self):
        """支持with语句"""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.stop()
