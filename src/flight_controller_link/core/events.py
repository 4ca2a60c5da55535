"""
解码事件定义
============

飞控应答/遥测帧解码后的类型化事件。每个事件都带有 command 字段，
作为分发器路由时使用的标签。
"""

from dataclasses import dataclass
from typing import Union

from ..config.constants import CommandId


@dataclass(frozen=True)
class PidValues:
    """PID参数应答（GET_PID_* 四种分组共用）"""

    command: CommandId
    kp: int
    ki: int
    kd: int
    int_limit: int  # 积分限幅


@dataclass(frozen=True)
class SettingsValues:
    """通用设置应答"""

    command: CommandId
    angle_kp: int
    heading_kp: int
    angle_max_inc: int  # 最大倾角增量
    angle_max_inc_sonar: int  # 超声波定高时的最大倾角增量
    stick_scaling_roll_pitch: int
    stick_scaling_yaw: int


@dataclass(frozen=True)
class AngleValues:
    """姿态角遥测，单位：度"""

    command: CommandId
    roll: float
    pitch: float
    yaw: float  # 航向，始终为非负值


DecodedEvent = Union[PidValues, SettingsValues, AngleValues]
