#!/usr/bin/env python3
"""
偏航PID调参示例
===============

读取当前偏航PID，写入新参数后再次读取确认。
"""

import sys
from pathlib import Path

# 添加src路径到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flight_controller_link.cli.console import ConsoleSession, format_event
from flight_controller_link.config.constants import CommandId
from flight_controller_link.config.settings import SerialConfig

PORT = "/dev/rfcomm0"


def main():
    """主函数"""
    print("飞控通信工具 - 偏航PID调参")
    print("=" * 40)

    try:
        with ConsoleSession(SerialConfig(port=PORT)) as session:
            session.controller.get_pid_yaw()
            event = session.wait_for(CommandId.GET_PID_YAW, timeout=2.0)
            print(f"当前: {format_event(event) if event else '无应答'}")

            session.controller.set_pid_yaw(400, 50, 0, 100)
            session.controller.get_pid_yaw()
            event = session.wait_for(CommandId.GET_PID_YAW, timeout=2.0)
            print(f"写入后: {format_event(event) if event else '无应答'}")
    except Exception as e:
        print(f"\n💥 程序异常: {e}")


if __name__ == "__main__":
    main()
