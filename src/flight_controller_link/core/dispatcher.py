"""
事件分发模块
============

按事件携带的命令字把解码事件路由到注册的处理函数。
"""

from typing import Callable, Dict, Iterable, Union

from ..config.constants import CommandId
from .catalog import CommandCatalog, Direction, DEFAULT_CATALOG
from .errors import DecodeError
from .events import DecodedEvent
from ..utils.logger import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[DecodedEvent], None]


class Dispatcher:
    """事件分发器，每个命令字对应一个处理函数"""

    def __init__(self, catalog: CommandCatalog = DEFAULT_CATALOG):
        self.catalog = catalog
        self._handlers: Dict[CommandId, EventHandler] = {}

    def register(self, command: int, handler: EventHandler) -> None:
        """
        注册处理函数，重复注册时替换原处理函数

        Args:
            command: 命令字，必须是有下行载荷定义的命令
            handler: 处理函数，参数为解码事件

        Raises:
            ValueError: 该命令字不会产生下行事件
        """
        if not self.catalog.contains(command, Direction.INBOUND):
            raise ValueError(f"命令字 {int(command)} 没有下行事件，无法注册处理函数")
        if not callable(handler):
            raise TypeError("handler必须是可调用对象")

        key = CommandId(command)
        if key in self._handlers:
            logger.debug(f"替换处理函数: {key.name}")
        self._handlers[key] = handler

    def unregister(self, command: int) -> None:
        """注销处理函数，未注册时忽略"""
        self._handlers.pop(int(command), None)

    def is_registered(self, command: int) -> bool:
        return int(command) in self._handlers

    def dispatch(self, event: DecodedEvent) -> bool:
        """
        把事件交给对应的处理函数

        处理函数抛出的异常会直接传给调用方。

        Returns:
            找到处理函数返回True；未注册时记录警告并丢弃事件，返回False
        """
        handler = self._handlers.get(event.command)
        if handler is None:
            logger.warning(f"没有注册处理函数，丢弃事件: {event}")
            return False

        handler(event)
        return True

    def dispatch_all(self, results: Iterable[Union[DecodedEvent, DecodeError]]) -> int:
        """
        分发解码结果序列，DecodeError 只记录日志

        Returns:
            成功分发的事件数
        """
        dispatched = 0
        for result in results:
            if isinstance(result, DecodeError):
                logger.debug(f"跳过解码错误: {result}")
                continue
            if self.dispatch(result):
                dispatched += 1
        return dispatched
