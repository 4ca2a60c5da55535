"""
命令表模块
==========

定义每个命令字在两个方向上的载荷结构（字段顺序即线上顺序，多字节字段为小端）。

命令表在导入时构建，之后只读::

    命令字                  上行(OUTBOUND)                  下行(INBOUND)
    SET_PID_*              Kp, Ki, Kd, IntLimit (i16 x4)   -
    GET_PID_*              -(空载荷)                        Kp, Ki, Kd, IntLimit
    SET_SETTINGS           6个设置字段(10字节)               -
    GET_SETTINGS           -(空载荷)                        6个设置字段
    SEND_ANGLES            enable (u8)                      roll, pitch (i16), yaw (u16), 均 /100
    CAL_ACC/CAL_MAG/...    -(空载荷)                        -
"""

import struct
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union

from ..config.constants import CommandId, ANGLE_SCALE, MAX_PAYLOAD_LENGTH
from .errors import UnknownCommandError, SchemaMismatchError, PayloadTooLargeError
from .events import PidValues, SettingsValues, AngleValues


class Direction(Enum):
    """传输方向"""

    OUTBOUND = "outbound"  # 上位机 -> 飞控
    INBOUND = "inbound"  # 飞控 -> 上位机


class FieldType(Enum):
    """载荷字段类型，值为struct格式字符"""

    INT16 = "h"
    UINT16 = "H"
    UINT8 = "B"

    @property
    def size(self) -> int:
        return struct.calcsize("<" + self.value)

    @property
    def signed(self) -> bool:
        return self.value.islower()

    @property
    def min_value(self) -> int:
        return -(1 << (self.size * 8 - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        bits = self.size * 8 - 1 if self.signed else self.size * 8
        return (1 << bits) - 1


@dataclass(frozen=True)
class FieldSpec:
    """单个载荷字段"""

    name: str
    type: FieldType
    scale: int = 1  # 定点缩放系数，解码值 = 原始值 / scale

    def to_raw(self, value: Any) -> int:
        """把调用方给出的值转换为线上原始整数"""
        if self.scale != 1:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SchemaMismatchError(f"字段 {self.name} 需要数值类型，实际为 {type(value).__name__}")
            try:
                raw = int(round(value * self.scale))
            except (ValueError, OverflowError):
                raise SchemaMismatchError(f"字段 {self.name} 不是有限数值: {value}") from None
        else:
            if isinstance(value, bool) or not isinstance(value, int):
                raise SchemaMismatchError(f"字段 {self.name} 需要整数类型，实际为 {type(value).__name__}")
            raw = int(value)

        if not self.type.min_value <= raw <= self.type.max_value:
            raise SchemaMismatchError(
                f"字段 {self.name} 超出 {self.type.name} 范围: {raw} "
                f"(允许 {self.type.min_value}~{self.type.max_value})"
            )
        return raw

    def from_raw(self, raw: int) -> Union[int, float]:
        """把线上原始整数转换为解码值"""
        if self.scale != 1:
            return raw / float(self.scale)
        return raw


@dataclass(frozen=True)
class PayloadSchema:
    """载荷结构定义"""

    fields: Tuple[FieldSpec, ...] = ()
    event_type: Optional[Type] = None  # 下行方向解码得到的事件类型

    _struct: struct.Struct = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        fmt = "<" + "".join(f.type.value for f in self.fields)
        object.__setattr__(self, "_struct", struct.Struct(fmt))
        if self._struct.size > MAX_PAYLOAD_LENGTH:
            raise PayloadTooLargeError(f"载荷定义超过{MAX_PAYLOAD_LENGTH}字节: {self._struct.size}")

    @property
    def size(self) -> int:
        """载荷字节数"""
        return self._struct.size

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def pack(self, values: Union[Sequence[Any], Mapping[str, Any]] = ()) -> bytes:
        """
        按字段顺序打包载荷

        Args:
            values: 按字段顺序排列的序列，或以字段名为键的映射

        Returns:
            载荷字节

        Raises:
            SchemaMismatchError: 字段数量、名称、类型或取值不符
        """
        if isinstance(values, Mapping):
            if set(values) != set(self.names):
                raise SchemaMismatchError(
                    f"字段名不匹配: 期望={list(self.names)}, 实际={sorted(values)}"
                )
            ordered = [values[name] for name in self.names]
        elif isinstance(values, (str, bytes, bytearray)):
            raise SchemaMismatchError("字段值必须是序列或映射，不能是字符串或字节")
        else:
            ordered = list(values)
            if len(ordered) != len(self.fields):
                raise SchemaMismatchError(
                    f"字段数量不匹配: 期望={len(self.fields)}, 实际={len(ordered)}"
                )

        raw = [spec.to_raw(value) for spec, value in zip(self.fields, ordered)]
        return self._struct.pack(*raw)

    def unpack(self, payload: bytes) -> Dict[str, Union[int, float]]:
        """
        按字段顺序解包载荷

        有符号字段做符号扩展，无符号字段不做；带缩放的字段除以缩放系数。

        Raises:
            SchemaMismatchError: 载荷长度与定义不符
        """
        if len(payload) != self.size:
            raise SchemaMismatchError(f"载荷长度不匹配: 期望={self.size}, 实际={len(payload)}")
        raw_values = self._struct.unpack(bytes(payload))
        return {spec.name: spec.from_raw(raw) for spec, raw in zip(self.fields, raw_values)}


@dataclass(frozen=True)
class CatalogEntry:
    """命令表条目"""

    command: CommandId
    outbound: Optional[PayloadSchema] = None
    inbound: Optional[PayloadSchema] = None

    def schema_for(self, direction: Direction) -> Optional[PayloadSchema]:
        return self.outbound if direction is Direction.OUTBOUND else self.inbound


class CommandCatalog:
    """命令表（只读）"""

    def __init__(self, entries: Iterable[CatalogEntry]):
        table: Dict[int, CatalogEntry] = {}
        for entry in entries:
            if not isinstance(entry.command, CommandId):
                raise ValueError(f"命令字必须是CommandId: {entry.command!r}")
            key = int(entry.command)
            if key in table:
                raise ValueError(f"命令字重复注册: {entry.command!r}")
            if entry.inbound is not None and entry.inbound.event_type is None:
                raise ValueError(f"下行载荷缺少事件类型: {entry.command!r}")
            table[key] = entry
        self._entries: Mapping[int, CatalogEntry] = MappingProxyType(table)

    def lookup(self, command: int, direction: Direction) -> PayloadSchema:
        """
        查询命令字在指定方向上的载荷结构

        Raises:
            UnknownCommandError: 命令字未注册，或该方向没有载荷定义
        """
        entry = self._entries.get(int(command))
        schema = entry.schema_for(direction) if entry is not None else None
        if schema is None:
            raise UnknownCommandError(f"未知命令字: {int(command)} ({direction.value})")
        return schema

    def contains(self, command: int, direction: Direction) -> bool:
        entry = self._entries.get(int(command))
        return entry is not None and entry.schema_for(direction) is not None

    def commands(self, direction: Direction) -> List[CommandId]:
        """返回在指定方向上有载荷定义的命令字"""
        return [
            entry.command for entry in self._entries.values()
            if entry.schema_for(direction) is not None
        ]

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


EMPTY_PAYLOAD = PayloadSchema()

PID_FIELDS = (
    FieldSpec("kp", FieldType.INT16),
    FieldSpec("ki", FieldType.INT16),
    FieldSpec("kd", FieldType.INT16),
    FieldSpec("int_limit", FieldType.INT16),
)

SETTINGS_FIELDS = (
    FieldSpec("angle_kp", FieldType.INT16),
    FieldSpec("heading_kp", FieldType.INT16),
    FieldSpec("angle_max_inc", FieldType.UINT8),
    FieldSpec("angle_max_inc_sonar", FieldType.UINT8),
    FieldSpec("stick_scaling_roll_pitch", FieldType.INT16),
    FieldSpec("stick_scaling_yaw", FieldType.INT16),
)

# 横滚/俯仰可为负；航向按无符号处理（0~360度）
ANGLE_FIELDS = (
    FieldSpec("roll", FieldType.INT16, ANGLE_SCALE),
    FieldSpec("pitch", FieldType.INT16, ANGLE_SCALE),
    FieldSpec("yaw", FieldType.UINT16, ANGLE_SCALE),
)

PID_SET_SCHEMA = PayloadSchema(PID_FIELDS)
PID_RESPONSE_SCHEMA = PayloadSchema(PID_FIELDS, PidValues)
SETTINGS_SET_SCHEMA = PayloadSchema(SETTINGS_FIELDS)
SETTINGS_RESPONSE_SCHEMA = PayloadSchema(SETTINGS_FIELDS, SettingsValues)
SEND_ANGLES_SCHEMA = PayloadSchema((FieldSpec("enable", FieldType.UINT8),))
ANGLES_RESPONSE_SCHEMA = PayloadSchema(ANGLE_FIELDS, AngleValues)

# SET_PID_* 与 GET_PID_* 的对应关系
PID_COMMAND_PAIRS: Mapping[CommandId, CommandId] = MappingProxyType({
    CommandId.SET_PID_ROLL_PITCH: CommandId.GET_PID_ROLL_PITCH,
    CommandId.SET_PID_YAW: CommandId.GET_PID_YAW,
    CommandId.SET_PID_SONAR_ALT_HOLD: CommandId.GET_PID_SONAR_ALT_HOLD,
    CommandId.SET_PID_BARO_ALT_HOLD: CommandId.GET_PID_BARO_ALT_HOLD,
})


def _build_default_entries() -> List[CatalogEntry]:
    entries = []
    for set_cmd, get_cmd in PID_COMMAND_PAIRS.items():
        entries.append(CatalogEntry(set_cmd, outbound=PID_SET_SCHEMA))
        entries.append(CatalogEntry(get_cmd, outbound=EMPTY_PAYLOAD, inbound=PID_RESPONSE_SCHEMA))
    entries.extend([
        CatalogEntry(CommandId.SET_SETTINGS, outbound=SETTINGS_SET_SCHEMA),
        CatalogEntry(CommandId.GET_SETTINGS, outbound=EMPTY_PAYLOAD, inbound=SETTINGS_RESPONSE_SCHEMA),
        CatalogEntry(CommandId.SEND_ANGLES, outbound=SEND_ANGLES_SCHEMA, inbound=ANGLES_RESPONSE_SCHEMA),
        CatalogEntry(CommandId.CAL_ACC, outbound=EMPTY_PAYLOAD),
        CatalogEntry(CommandId.CAL_MAG, outbound=EMPTY_PAYLOAD),
        CatalogEntry(CommandId.RESTORE_DEFAULTS, outbound=EMPTY_PAYLOAD),
    ])
    return entries


DEFAULT_CATALOG = CommandCatalog(_build_default_entries())
