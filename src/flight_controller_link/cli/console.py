"""
命令行控制台
============

通过串口连接飞控，发送单条命令或持续显示遥测数据。
"""

import time
from typing import Optional

from ..config.constants import CommandId, DEFAULT_RESPONSE_TIMEOUT
from ..config.settings import SerialConfig, CodecConfig
from ..control.flight_controller import FlightController
from ..core.catalog import Direction, DEFAULT_CATALOG
from ..core.errors import ProtocolError
from ..core.frame_encoder import encode_frame
from ..core.events import DecodedEvent, PidValues, SettingsValues, AngleValues
from ..core.io_thread import IoThread
from ..core.serial_manager import SerialManager
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 命令行中的PID分组名 -> (设置命令, 读取命令)
PID_GROUPS = {
    "roll-pitch": (CommandId.SET_PID_ROLL_PITCH, CommandId.GET_PID_ROLL_PITCH),
    "yaw": (CommandId.SET_PID_YAW, CommandId.GET_PID_YAW),
    "sonar": (CommandId.SET_PID_SONAR_ALT_HOLD, CommandId.GET_PID_SONAR_ALT_HOLD),
    "baro": (CommandId.SET_PID_BARO_ALT_HOLD, CommandId.GET_PID_BARO_ALT_HOLD),
}

# get 子命令的查询目标 -> 读取命令
GET_TARGETS = {
    "pid-roll-pitch": CommandId.GET_PID_ROLL_PITCH,
    "pid-yaw": CommandId.GET_PID_YAW,
    "pid-sonar": CommandId.GET_PID_SONAR_ALT_HOLD,
    "pid-baro": CommandId.GET_PID_BARO_ALT_HOLD,
    "settings": CommandId.GET_SETTINGS,
}

CALIBRATE_TARGETS = {
    "acc": CommandId.CAL_ACC,
    "mag": CommandId.CAL_MAG,
}


def format_event(event: DecodedEvent) -> str:
    """把解码事件格式化为一行文本"""
    if isinstance(event, AngleValues):
        return f"姿态角  roll={event.roll:8.2f}  pitch={event.pitch:8.2f}  yaw={event.yaw:7.2f}"
    if isinstance(event, PidValues):
        return (
            f"{event.command.name}  Kp={event.kp}  Ki={event.ki}  "
            f"Kd={event.kd}  IntLimit={event.int_limit}"
        )
    if isinstance(event, SettingsValues):
        return (
            f"{event.command.name}  AngleKp={event.angle_kp}  HeadingKp={event.heading_kp}  "
            f"AngleMaxInc={event.angle_max_inc}  AngleMaxIncSonar={event.angle_max_inc_sonar}  "
            f"StickScalingRollPitch={event.stick_scaling_roll_pitch}  "
            f"StickScalingYaw={event.stick_scaling_yaw}"
        )
    return repr(event)


class ConsoleSession:
    """一次串口会话：打开串口、启动IO线程，退出时按相反顺序释放"""

    def __init__(self, serial_config: SerialConfig, codec_config: Optional[CodecConfig] = None):
        self.serial_manager = SerialManager(serial_config)
        self.controller = FlightController(self.serial_manager)
        self.io_thread = IoThread(self.serial_manager, self.controller.decoder, codec_config)

    def __enter__(self):
        if not self.serial_manager.open():
            raise RuntimeError(f"无法打开串口 {self.serial_manager.config.port}")
        if not self.io_thread.start():
            self.serial_manager.close()
            raise RuntimeError("无法启动IO线程")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.io_thread.stop()
        self.serial_manager.close()

    def wait_for(self, command: CommandId, timeout: float) -> Optional[DecodedEvent]:
        """
        等待指定命令字的应答，其他事件丢弃

        Returns:
            收到的事件，超时返回None
        """
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            event = self.io_thread.get_event(timeout=remaining)
            if event is None:
                return None
            if event.command == command:
                return event
            logger.debug(f"等待 {command.name} 期间收到其他事件: {event}")

    def monitor(self, duration: Optional[float] = None, angles: bool = True) -> None:
        """
        持续打印收到的事件

        Args:
            duration: 持续时间(秒)，None表示直到被中断
            angles: 是否开启姿态角遥测
        """
        dispatcher = self.controller.dispatcher
        for command in DEFAULT_CATALOG.commands(Direction.INBOUND):
            dispatcher.register(command, lambda event: print(format_event(event)))

        if angles:
            self.controller.send_angles(True)
        deadline = None if duration is None else time.monotonic() + duration
        try:
            while deadline is None or time.monotonic() < deadline:
                event = self.io_thread.get_event(timeout=0.1)
                if event is not None:
                    dispatcher.dispatch(event)
        finally:
            if angles:
                self.controller.send_angles(False)
            logger.info(f"IO统计: {self.io_thread.get_statistics()}")


def run_monitor(serial_config: SerialConfig, duration: Optional[float], angles: bool) -> bool:
    """monitor 子命令"""
    with ConsoleSession(serial_config) as session:
        session.monitor(duration=duration, angles=angles)
    return True


def run_get(serial_config: SerialConfig, target: str, timeout: float = DEFAULT_RESPONSE_TIMEOUT) -> bool:
    """get 子命令：发送读取请求并打印应答"""
    command = GET_TARGETS[target]
    with ConsoleSession(serial_config) as session:
        session.controller.send_command(command)
        event = session.wait_for(command, timeout)

    if event is None:
        print(f"❌ {timeout}秒内没有收到 {command.name} 应答")
        return False
    print(format_event(event))
    return True


def run_send(serial_config: SerialConfig, command: CommandId, fields=()) -> bool:
    """发送一条无需应答的命令"""
    try:
        frame = encode_frame(command, fields)
    except ProtocolError as e:
        print(f"❌ 参数错误: {e}")
        return False

    with SerialManager(serial_config) as manager:
        manager.send(frame)
    print(f"✅ 已发送 {command.name}")
    return True


def run_set_pid(serial_config: SerialConfig, group: str, kp: int, ki: int, kd: int, int_limit: int) -> bool:
    """set-pid 子命令"""
    set_command, _ = PID_GROUPS[group]
    return run_send(serial_config, set_command, (kp, ki, kd, int_limit))

