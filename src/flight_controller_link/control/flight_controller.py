"""
飞控命令接口
============

面向应用的命令接口：每个飞控命令一个方法，编码后交给传输层发送；
收到的字节经 on_bytes() 解码并分发给注册的处理函数。
"""

from typing import List, Optional, Protocol

from ..config.constants import CommandId
from ..core.dispatcher import Dispatcher
from ..core.frame_decoder import FrameDecoder, DecodeResult
from ..core.frame_encoder import FrameEncoder, FieldValues
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Transport(Protocol):
    """传输层接口"""

    def send(self, data: bytes) -> None:
        ...


class FlightController:
    """飞控命令接口"""

    def __init__(
        self,
        transport: Transport,
        dispatcher: Optional[Dispatcher] = None,
        encoder: Optional[FrameEncoder] = None,
        decoder: Optional[FrameDecoder] = None,
    ):
        """
        Args:
            transport: 传输层，需实现 send(bytes)
            dispatcher: 事件分发器，None时新建
            encoder: 帧编码器，None时使用默认命令表
            decoder: 帧解码器，None时使用默认命令表和缓冲区容量
        """
        self.transport = transport
        self.dispatcher = dispatcher or Dispatcher()
        self.encoder = encoder or FrameEncoder()
        self.decoder = decoder or FrameDecoder()

    def send_command(self, command: CommandId, fields: FieldValues = ()) -> bytes:
        """
        编码并发送一条命令

        编码失败时异常直接抛出，不会发送任何数据。

        Returns:
            已发送的数据帧
        """
        frame = self.encoder.encode(command, fields)
        self.transport.send(frame)
        return frame

    def on_bytes(self, data: bytes) -> List[DecodeResult]:
        """
        传输层收到数据时调用：解码并分发其中的事件

        Returns:
            本次解码的全部结果，包括 DecodeError
        """
        results = self.decoder.feed(data)
        self.dispatcher.dispatch_all(results)
        return results

    # PID参数

    def set_pid_roll_pitch(self, kp: int, ki: int, kd: int, int_limit: int) -> None:
        """设置横滚/俯仰PID"""
        logger.info(f"设置横滚/俯仰PID: {kp} {ki} {kd} {int_limit}")
        self.send_command(CommandId.SET_PID_ROLL_PITCH, (kp, ki, kd, int_limit))

    def get_pid_roll_pitch(self) -> None:
        """请求横滚/俯仰PID，应答为 PidValues 事件"""
        logger.info("请求横滚/俯仰PID")
        self.send_command(CommandId.GET_PID_ROLL_PITCH)

    def set_pid_yaw(self, kp: int, ki: int, kd: int, int_limit: int) -> None:
        """设置偏航PID"""
        logger.info(f"设置偏航PID: {kp} {ki} {kd} {int_limit}")
        self.send_command(CommandId.SET_PID_YAW, (kp, ki, kd, int_limit))

    def get_pid_yaw(self) -> None:
        logger.info("请求偏航PID")
        self.send_command(CommandId.GET_PID_YAW)

    def set_pid_sonar_alt_hold(self, kp: int, ki: int, kd: int, int_limit: int) -> None:
        """设置超声波定高PID"""
        logger.info(f"设置超声波定高PID: {kp} {ki} {kd} {int_limit}")
        self.send_command(CommandId.SET_PID_SONAR_ALT_HOLD, (kp, ki, kd, int_limit))

    def get_pid_sonar_alt_hold(self) -> None:
        logger.info("请求超声波定高PID")
        self.send_command(CommandId.GET_PID_SONAR_ALT_HOLD)

    def set_pid_baro_alt_hold(self, kp: int, ki: int, kd: int, int_limit: int) -> None:
        """设置气压计定高PID"""
        logger.info(f"设置气压计定高PID: {kp} {ki} {kd} {int_limit}")
        self.send_command(CommandId.SET_PID_BARO_ALT_HOLD, (kp, ki, kd, int_limit))

    def get_pid_baro_alt_hold(self) -> None:
        logger.info("请求气压计定高PID")
        self.send_command(CommandId.GET_PID_BARO_ALT_HOLD)

    # 通用设置

    def set_settings(
        self,
        angle_kp: int,
        heading_kp: int,
        angle_max_inc: int,
        angle_max_inc_sonar: int,
        stick_scaling_roll_pitch: int,
        stick_scaling_yaw: int,
    ) -> None:
        """设置通用参数"""
        logger.info(
            f"设置通用参数: {angle_kp} {heading_kp} {angle_max_inc} {angle_max_inc_sonar} "
            f"{stick_scaling_roll_pitch} {stick_scaling_yaw}"
        )
        self.send_command(CommandId.SET_SETTINGS, (
            angle_kp,
            heading_kp,
            angle_max_inc,
            angle_max_inc_sonar,
            stick_scaling_roll_pitch,
            stick_scaling_yaw,
        ))

    def get_settings(self) -> None:
        """请求通用参数，应答为 SettingsValues 事件"""
        logger.info("请求通用参数")
        self.send_command(CommandId.GET_SETTINGS)

    # 遥测、校准与恢复

    def send_angles(self, enable: bool) -> None:
        """开启或关闭姿态角遥测，数据为 AngleValues 事件"""
        logger.info(f"姿态角遥测开关: {int(enable)}")
        self.send_command(CommandId.SEND_ANGLES, (int(enable),))

    def calibrate_accelerometer(self) -> None:
        logger.info("校准加速度计")
        self.send_command(CommandId.CAL_ACC)

    def calibrate_magnetometer(self) -> None:
        logger.info("校准磁力计")
        self.send_command(CommandId.CAL_MAG)

    def restore_defaults(self) -> None:
        """恢复飞控出厂设置"""
        logger.info("恢复出厂设置")
        self.send_command(CommandId.RESTORE_DEFAULTS)
