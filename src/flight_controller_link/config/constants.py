"""
系统常量定义
============

定义飞控蓝牙/串口通信协议中使用的各种常量。
"""

from enum import IntEnum
from typing import Final


class CommandId(IntEnum):
    """飞控通信命令字枚举"""

    # PID参数
    SET_PID_ROLL_PITCH = 0  # 设置横滚/俯仰PID
    GET_PID_ROLL_PITCH = 1  # 读取横滚/俯仰PID
    SET_PID_YAW = 2  # 设置偏航PID
    GET_PID_YAW = 3  # 读取偏航PID
    SET_PID_SONAR_ALT_HOLD = 4  # 设置超声波定高PID
    GET_PID_SONAR_ALT_HOLD = 5  # 读取超声波定高PID
    SET_PID_BARO_ALT_HOLD = 6  # 设置气压计定高PID
    GET_PID_BARO_ALT_HOLD = 7  # 读取气压计定高PID

    # 通用设置
    SET_SETTINGS = 8
    GET_SETTINGS = 9

    # 姿态角遥测开关/数据
    SEND_ANGLES = 10

    # 校准与恢复
    CAL_ACC = 11  # 加速度计校准
    CAL_MAG = 12  # 磁力计校准
    RESTORE_DEFAULTS = 13  # 恢复出厂设置


# 帧头定义（ASCII）
COMMAND_HEADER: Final[bytes] = b"$S>"  # 上位机 -> 飞控
RESPONSE_HEADER: Final[bytes] = b"$S<"  # 飞控 -> 上位机

# 帧大小计算
HEADER_SIZE: Final[int] = len(COMMAND_HEADER)
FRAME_PREFIX_SIZE: Final[int] = HEADER_SIZE + 2  # 帧头 + 命令字(1B) + 长度(1B)
FRAME_CHECKSUM_SIZE: Final[int] = 1
MAX_PAYLOAD_LENGTH: Final[int] = 0xFF
MAX_FRAME_SIZE: Final[int] = FRAME_PREFIX_SIZE + MAX_PAYLOAD_LENGTH + FRAME_CHECKSUM_SIZE

# 遥测角度为 角度 x 100 的定点数
ANGLE_SCALE: Final[int] = 100

# 串口配置默认值
DEFAULT_BAUDRATE: Final[int] = 115200  # 默认波特率
DEFAULT_TIMEOUT: Final[float] = 0.1  # 默认超时时间(秒)

# 编解码配置默认值
DEFAULT_BUFFER_CAPACITY: Final[int] = 1024  # 接收重组缓冲区容量
DEFAULT_READ_CHUNK_SIZE: Final[int] = 256  # IO线程单次读取字节数
DEFAULT_EVENT_QUEUE_SIZE: Final[int] = 100  # 事件队列大小
DEFAULT_RESPONSE_TIMEOUT: Final[float] = 2.0  # 等待应答超时时间(秒)
