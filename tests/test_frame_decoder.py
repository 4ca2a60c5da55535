"""
数据帧解码器测试
================

测试FrameDecoder的流式重组、校验和错误恢复。
"""

import pytest

from flight_controller_link.config.constants import CommandId, MAX_FRAME_SIZE
from flight_controller_link.core.catalog import Direction, PID_COMMAND_PAIRS
from flight_controller_link.core.errors import (
    ChecksumMismatchError,
    DecodeError,
    DecodeErrorKind,
)
from flight_controller_link.core.events import AngleValues, PidValues, SettingsValues
from flight_controller_link.core.frame_decoder import FrameDecoder
from flight_controller_link.core.frame_encoder import FrameEncoder


def response_frame(command, fields=()):
    """构造一帧飞控应答"""
    return FrameEncoder().encode(command, fields, Direction.INBOUND)


def raw_response(command, payload):
    """构造一帧不经过命令表校验的飞控应答"""
    return FrameEncoder.pack_frame(command, payload, Direction.INBOUND)


class TestFrameDecoder:
    """数据帧解码器测试类"""

    @pytest.fixture
    def decoder(self):
        return FrameDecoder()

    def test_decode_angles_scaling(self, decoder):
        """姿态角定点数除以100，横滚/俯仰有符号，航向无符号"""
        frame = raw_response(CommandId.SEND_ANGLES, bytes([100, 0, 200, 0xFF, 50, 0]))

        results = decoder.feed(frame)

        assert len(results) == 1
        event = results[0]
        assert isinstance(event, AngleValues)
        assert event.command is CommandId.SEND_ANGLES
        assert event.roll == pytest.approx(1.00)
        # 小端 [200, 0xFF] = 0xFFC8 = -56
        assert event.pitch == pytest.approx(-0.56)
        assert event.yaw == pytest.approx(0.50)
        assert decoder.pending == 0

    def test_decode_negative_pitch_high_byte_only(self, decoder):
        """pitch 原始值 0xFF00 = -256 -> -2.56度"""
        frame = raw_response(CommandId.SEND_ANGLES, bytes([100, 0, 0x00, 0xFF, 50, 0]))

        event = decoder.feed(frame)[0]

        assert (event.roll, event.pitch, event.yaw) == pytest.approx((1.00, -2.56, 0.50))

    def test_decode_yaw_not_sign_extended(self, decoder):
        """航向高位为1时仍按无符号解释"""
        frame = raw_response(CommandId.SEND_ANGLES, bytes([0, 0, 0, 0, 0x10, 0x8C]))

        event = decoder.feed(frame)[0]

        assert event.yaw == pytest.approx(0x8C10 / 100.0)
        assert event.yaw > 0

    @pytest.mark.parametrize("get_cmd", list(PID_COMMAND_PAIRS.values()))
    def test_decode_pid_values(self, decoder, get_cmd):
        """PID应答为四个有符号16位值"""
        frame = response_frame(get_cmd, (1500, -20, 0, 32767))

        results = decoder.feed(frame)

        assert results == [PidValues(get_cmd, 1500, -20, 0, 32767)]

    def test_decode_settings(self, decoder):
        frame = response_frame(CommandId.GET_SETTINGS, (500, -300, 10, 200, 256, 128))

        results = decoder.feed(frame)

        assert results == [SettingsValues(CommandId.GET_SETTINGS, 500, -300, 10, 200, 256, 128)]

    @pytest.mark.parametrize(
        "set_cmd,values",
        [
            (CommandId.SET_PID_ROLL_PITCH, (0, 0, 0, 0)),
            (CommandId.SET_PID_YAW, (-32768, 32767, -1, 1)),
            (CommandId.SET_PID_SONAR_ALT_HOLD, (1234, -4321, 100, -100)),
            (CommandId.SET_PID_BARO_ALT_HOLD, (7, 8, 9, 10)),
        ],
    )
    def test_pid_round_trip(self, decoder, set_cmd, values):
        """SET_PID_* 的载荷按对应 GET_PID_* 应答解码后与原值一致"""
        outbound = FrameEncoder().encode(set_cmd, values)
        payload = outbound[5:-1]

        event = decoder.feed(raw_response(PID_COMMAND_PAIRS[set_cmd], payload))[0]

        assert (event.kp, event.ki, event.kd, event.int_limit) == values

    def test_settings_round_trip(self, decoder):
        values = (-1, 32767, 0, 255, -32768, 1)
        outbound = FrameEncoder().encode(CommandId.SET_SETTINGS, values)

        event = decoder.feed(raw_response(CommandId.GET_SETTINGS, outbound[5:-1]))[0]

        assert (
            event.angle_kp,
            event.heading_kp,
            event.angle_max_inc,
            event.angle_max_inc_sonar,
            event.stick_scaling_roll_pitch,
            event.stick_scaling_yaw,
        ) == values

    @pytest.mark.parametrize("length", [0, 1, 2, 3, 4])
    def test_truncated_prefix_waits(self, decoder, length):
        """不足 帧头+命令字+长度 时不产生事件也不报错"""
        frame = response_frame(CommandId.SEND_ANGLES, (1.0, 2.0, 3.0))

        assert decoder.feed(frame[:length]) == []
        assert decoder.pending == length

    def test_short_garbage_waits(self, decoder):
        """少于5字节的任意数据同样只等待"""
        assert decoder.feed(b"xyz") == []

    def test_truncated_payload_waits_then_completes(self, decoder):
        """载荷未收全时等待，补齐后产生事件"""
        frame = response_frame(CommandId.GET_PID_YAW, (1, 2, 3, 4))

        assert decoder.feed(frame[:9]) == []
        assert decoder.feed(frame[9:-1]) == []
        results = decoder.feed(frame[-1:])

        assert results == [PidValues(CommandId.GET_PID_YAW, 1, 2, 3, 4)]
        assert decoder.pending == 0

    def test_byte_by_byte_delivery(self, decoder):
        """逐字节投递也能重组出完整帧"""
        frame = response_frame(CommandId.GET_SETTINGS, (1, 2, 3, 4, 5, 6))

        results = []
        for byte in frame:
            results.extend(decoder.feed(bytes([byte])))

        assert results == [SettingsValues(CommandId.GET_SETTINGS, 1, 2, 3, 4, 5, 6)]

    def test_multiple_frames_in_one_chunk(self, decoder):
        """一次投递两帧，按顺序得到两个事件"""
        first = response_frame(CommandId.GET_PID_ROLL_PITCH, (1, 2, 3, 4))
        second = response_frame(CommandId.SEND_ANGLES, (10.0, -10.0, 180.0))

        results = decoder.feed(first + second)

        assert len(results) == 2
        assert isinstance(results[0], PidValues)
        assert isinstance(results[1], AngleValues)
        assert results[1].yaw == pytest.approx(180.0)

    def test_frame_split_across_chunks_with_next_frame(self, decoder):
        """前一帧的尾部和下一帧的头部在同一次投递中"""
        first = response_frame(CommandId.GET_PID_YAW, (1, 2, 3, 4))
        second = response_frame(CommandId.GET_PID_BARO_ALT_HOLD, (5, 6, 7, 8))
        stream = first + second

        assert decoder.feed(stream[:7]) == []
        results = decoder.feed(stream[7:20])
        assert results == [PidValues(CommandId.GET_PID_YAW, 1, 2, 3, 4)]
        results = decoder.feed(stream[20:])
        assert results == [PidValues(CommandId.GET_PID_BARO_ALT_HOLD, 5, 6, 7, 8)]

    def test_checksum_mismatch(self, decoder):
        """校验和被篡改：得到一个CHECKSUM_MISMATCH，整帧被丢弃"""
        frame = bytearray(response_frame(CommandId.GET_PID_YAW, (1, 2, 3, 4)))
        frame[-1] ^= 0xFF

        results = decoder.feed(bytes(frame))

        assert len(results) == 1
        error = results[0]
        assert isinstance(error, DecodeError)
        assert error.kind is DecodeErrorKind.CHECKSUM_MISMATCH
        assert error.data == bytes(frame)
        assert isinstance(error.to_exception(), ChecksumMismatchError)
        assert decoder.pending == 0

    def test_checksum_mismatch_does_not_desync(self, decoder):
        """坏帧之后的好帧仍能正常解码"""
        bad = bytearray(response_frame(CommandId.GET_PID_YAW, (1, 2, 3, 4)))
        bad[-1] ^= 0x01
        good = response_frame(CommandId.GET_SETTINGS, (1, 2, 3, 4, 5, 6))

        results = decoder.feed(bytes(bad) + good)

        assert [type(r) for r in results] == [DecodeError, SettingsValues]
        assert results[0].kind is DecodeErrorKind.CHECKSUM_MISMATCH

    def test_corrupted_payload_detected(self, decoder):
        """载荷中任意一位翻转都会被校验和发现"""
        frame = bytearray(response_frame(CommandId.SEND_ANGLES, (1.0, 2.0, 3.0)))
        frame[7] ^= 0x10

        results = decoder.feed(bytes(frame))

        assert results[0].kind is DecodeErrorKind.CHECKSUM_MISMATCH

    def test_unknown_command(self, decoder):
        """结构合法但命令字未注册：UNKNOWN_COMMAND，不影响后续解析"""
        unknown = raw_response(0x42, b"\x01\x02")
        good = response_frame(CommandId.GET_PID_ROLL_PITCH, (9, 8, 7, 6))

        results = decoder.feed(unknown + good)

        assert len(results) == 2
        assert results[0].kind is DecodeErrorKind.UNKNOWN_COMMAND
        assert results[0].data == unknown
        assert results[1] == PidValues(CommandId.GET_PID_ROLL_PITCH, 9, 8, 7, 6)

    def test_command_without_inbound_schema(self, decoder):
        """只有上行定义的命令字出现在应答中同样视为未知"""
        frame = raw_response(CommandId.CAL_ACC, b"")

        results = decoder.feed(frame)

        assert results[0].kind is DecodeErrorKind.UNKNOWN_COMMAND

    def test_length_does_not_match_schema(self, decoder):
        """长度与载荷定义不符时报SCHEMA_MISMATCH并丢弃整帧"""
        frame = raw_response(CommandId.SEND_ANGLES, b"\x01\x02\x03\x04")
        good = response_frame(CommandId.SEND_ANGLES, (0.0, 0.0, 0.0))

        results = decoder.feed(frame + good)

        assert results[0].kind is DecodeErrorKind.SCHEMA_MISMATCH
        assert isinstance(results[1], AngleValues)

    def test_bad_header(self, decoder):
        """帧头不匹配时报BAD_HEADER，丢弃到下一个帧头"""
        good = response_frame(CommandId.GET_PID_YAW, (1, 2, 3, 4))

        results = decoder.feed(b"noise" + good)

        assert len(results) == 2
        assert results[0].kind is DecodeErrorKind.BAD_HEADER
        assert results[0].data == b"noise"
        assert results[1] == PidValues(CommandId.GET_PID_YAW, 1, 2, 3, 4)

    def test_outbound_echo_rejected(self, decoder):
        """自己发出的命令帧回显不会被当作应答"""
        echo = FrameEncoder().encode(CommandId.GET_SETTINGS)

        results = decoder.feed(echo)

        assert results[0].kind is DecodeErrorKind.BAD_HEADER
        assert decoder.pending == 0

    def test_bad_header_keeps_partial_header(self, decoder):
        """垃圾数据末尾可能是帧头前缀时保留，等待后续数据"""
        frame = response_frame(CommandId.GET_PID_YAW, (1, 2, 3, 4))

        results = decoder.feed(b"garbage" + frame[:2])
        assert [r.kind for r in results] == [DecodeErrorKind.BAD_HEADER]
        assert results[0].data == b"garbage"
        assert decoder.pending == 2

        results = decoder.feed(frame[2:])
        assert results == [PidValues(CommandId.GET_PID_YAW, 1, 2, 3, 4)]

    def test_buffer_overflow(self):
        """单次投递超出剩余容量时整段拒收，已有数据保持不变"""
        decoder = FrameDecoder(capacity=MAX_FRAME_SIZE)
        frame = response_frame(CommandId.GET_PID_YAW, (1, 2, 3, 4))

        assert decoder.feed(frame[:4]) == []
        results = decoder.feed(b"\x00" * MAX_FRAME_SIZE)

        assert len(results) == 1
        assert results[0].kind is DecodeErrorKind.BUFFER_OVERFLOW
        assert decoder.pending == 4

        # 拒收后继续正常工作
        assert decoder.feed(frame[4:]) == [PidValues(CommandId.GET_PID_YAW, 1, 2, 3, 4)]

    def test_capacity_too_small(self):
        with pytest.raises(ValueError):
            FrameDecoder(capacity=MAX_FRAME_SIZE - 1)

    def test_empty_feed(self, decoder):
        assert decoder.feed(b"") == []

    def test_reset(self, decoder):
        decoder.feed(b"$S<")
        assert decoder.pending == 3

        decoder.reset()

        assert decoder.pending == 0
        assert decoder.capacity == 1024
