"""
校验算法模块
============

提供协议帧使用的异或校验。
"""


def calculate_checksum(data: bytes) -> int:
    """
    计算数据的异或校验和

    从0开始依次与每个字节异或，结果为8位无符号整数。
    协议中的输入固定为 命令字 + 长度 + 数据内容。

    Args:
        data: 需要计算校验和的字节数据

    Returns:
        校验和值，0-255

    Raises:
        TypeError: 当输入不是bytes/bytearray/memoryview类型时抛出

    Examples:
        >>> calculate_checksum(b'')
        0
        >>> calculate_checksum(bytes([0x01, 0x08]))
        9
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("输入数据必须是bytes类型")

    checksum = 0
    for byte in bytes(data):
        checksum ^= byte

    return checksum
