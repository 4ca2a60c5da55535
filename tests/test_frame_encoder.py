"""
数据帧编码器测试
================

测试FrameEncoder生成的线上字节。
"""

import pytest

from flight_controller_link.config.constants import CommandId, COMMAND_HEADER, RESPONSE_HEADER
from flight_controller_link.core.catalog import Direction
from flight_controller_link.core.checksum import calculate_checksum
from flight_controller_link.core.errors import (
    PayloadTooLargeError,
    SchemaMismatchError,
    UnknownCommandError,
)
from flight_controller_link.core.frame_encoder import FrameEncoder, encode_frame


class TestFrameEncoder:
    """数据帧编码器测试类"""

    @pytest.fixture
    def encoder(self):
        return FrameEncoder()

    def test_encode_set_pid(self, encoder):
        """SET_PID_ROLL_PITCH 帧逐字节校验"""
        frame = encoder.encode(CommandId.SET_PID_ROLL_PITCH, (1500, 500, 1000, 200))

        body = bytes([0x00, 0x08, 0xDC, 0x05, 0xF4, 0x01, 0xE8, 0x03, 0xC8, 0x00])
        assert frame == b"$S>" + body + bytes([calculate_checksum(body)])
        assert len(frame) == 3 + 2 + 8 + 1

    def test_encode_negative_values(self, encoder):
        """负数按二进制补码小端编码"""
        frame = encoder.encode(CommandId.SET_PID_YAW, (-1, -32768, 32767, 0))
        assert frame[5:13] == bytes([0xFF, 0xFF, 0x00, 0x80, 0xFF, 0x7F, 0x00, 0x00])

    @pytest.mark.parametrize(
        "command",
        [
            CommandId.GET_PID_ROLL_PITCH,
            CommandId.GET_PID_YAW,
            CommandId.GET_PID_SONAR_ALT_HOLD,
            CommandId.GET_PID_BARO_ALT_HOLD,
            CommandId.GET_SETTINGS,
            CommandId.CAL_ACC,
            CommandId.CAL_MAG,
            CommandId.RESTORE_DEFAULTS,
        ],
    )
    def test_encode_empty_payload(self, encoder, command):
        """空载荷命令：帧头 + 命令字 + 0 + 校验和(=命令字)"""
        frame = encoder.encode(command)
        assert frame == COMMAND_HEADER + bytes([command, 0, command])

    def test_encode_settings(self, encoder):
        """SET_SETTINGS 为10字节载荷，第5、6字节为u8"""
        frame = encoder.encode(CommandId.SET_SETTINGS, (500, 300, 10, 5, 256, 128))

        assert frame[:5] == b"$S>" + bytes([CommandId.SET_SETTINGS, 10])
        assert frame[5:15] == bytes([0xF4, 0x01, 0x2C, 0x01, 10, 5, 0x00, 0x01, 0x80, 0x00])
        assert frame[-1] == calculate_checksum(frame[3:-1])

    def test_encode_send_angles(self, encoder):
        assert encoder.encode(CommandId.SEND_ANGLES, (1,)) == b"$S>" + bytes([10, 1, 1, 10])
        assert encoder.encode(CommandId.SEND_ANGLES, (0,)) == b"$S>" + bytes([10, 1, 0, 11])

    def test_encode_with_mapping(self, encoder):
        by_name = encoder.encode(
            CommandId.SET_PID_BARO_ALT_HOLD, {"kp": 1, "ki": 2, "kd": 3, "int_limit": 4}
        )
        assert by_name == encoder.encode(CommandId.SET_PID_BARO_ALT_HOLD, (1, 2, 3, 4))

    def test_encode_inbound_uses_response_header(self, encoder):
        """INBOUND 方向使用 "$S<" 帧头和下行载荷定义"""
        frame = encoder.encode(CommandId.SEND_ANGLES, (1.0, -2.56, 0.5), Direction.INBOUND)
        assert frame.startswith(RESPONSE_HEADER)
        assert frame[5:11] == bytes([100, 0, 0x00, 0xFF, 50, 0])

    def test_encode_unknown_command(self, encoder):
        with pytest.raises(UnknownCommandError):
            encoder.encode(0x99)

    def test_encode_response_only_direction(self, encoder):
        """SET_PID_* 没有下行定义"""
        with pytest.raises(UnknownCommandError):
            encoder.encode(CommandId.SET_PID_YAW, (1, 2, 3, 4), Direction.INBOUND)

    def test_encode_schema_mismatch(self, encoder):
        with pytest.raises(SchemaMismatchError):
            encoder.encode(CommandId.SET_PID_YAW, (1, 2, 3))
        with pytest.raises(SchemaMismatchError):
            encoder.encode(CommandId.GET_SETTINGS, (1,))
        with pytest.raises(SchemaMismatchError):
            encoder.encode(CommandId.SET_SETTINGS, (500, 300, 256, 5, 256, 128))

    def test_pack_frame_payload_too_large(self):
        with pytest.raises(PayloadTooLargeError):
            FrameEncoder.pack_frame(CommandId.SET_SETTINGS, b"\x00" * 256)

    def test_pack_frame_max_payload(self):
        """255字节载荷是允许的最大长度"""
        frame = FrameEncoder.pack_frame(0x20, b"\x01" * 255)
        assert frame[4] == 255
        assert len(frame) == 3 + 2 + 255 + 1

    def test_pack_frame_command_range(self):
        with pytest.raises(ValueError):
            FrameEncoder.pack_frame(256, b"")

    def test_encode_frame_function(self):
        """模块级函数使用默认命令表"""
        assert encode_frame(CommandId.CAL_MAG) == FrameEncoder().encode(CommandId.CAL_MAG)
