#!/usr/bin/env python3
"""
飞控通信工具 - 模块CLI入口
==========================

支持通过 python -m flight_controller_link 或 fc-link 调用
"""

import sys
import argparse
import logging

from . import __version__
from .cli.console import (
    CALIBRATE_TARGETS,
    GET_TARGETS,
    PID_GROUPS,
    run_get,
    run_monitor,
    run_send,
    run_set_pid,
)
from .config.constants import CommandId, DEFAULT_BAUDRATE, DEFAULT_RESPONSE_TIMEOUT
from .config.settings import SerialConfig
from .utils.logger import get_logger, set_log_level

logger = get_logger(__name__)

PROGRAM_NAME = "飞控通信工具"


def _add_port_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--port", required=True, help="串口号（如 COM5, /dev/rfcomm0）")
    parser.add_argument(
        "--baudrate", type=int, default=DEFAULT_BAUDRATE, help=f"波特率（默认{DEFAULT_BAUDRATE}）"
    )


def create_parser() -> argparse.ArgumentParser:
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="fc-link",
        description=f"{PROGRAM_NAME} v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例：
  # 显示姿态角遥测
  python -m flight_controller_link monitor --port /dev/rfcomm0

  # 读取横滚/俯仰PID
  python -m flight_controller_link get pid-roll-pitch --port COM5

  # 设置偏航PID
  python -m flight_controller_link set-pid yaw 400 50 0 100 --port COM5
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"{PROGRAM_NAME} v{__version__}"
    )
    parser.add_argument("--verbose", action="store_true", help="输出调试日志")

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    monitor_parser = subparsers.add_parser("monitor", help="显示飞控发来的数据")
    _add_port_arguments(monitor_parser)
    monitor_parser.add_argument("--no-angles", action="store_true", help="不开启姿态角遥测")
    monitor_parser.add_argument("--duration", type=float, default=None, help="持续时间(秒)，默认直到Ctrl+C")

    get_parser = subparsers.add_parser("get", help="读取飞控参数")
    get_parser.add_argument("target", choices=sorted(GET_TARGETS), help="读取目标")
    _add_port_arguments(get_parser)
    get_parser.add_argument(
        "--timeout", type=float, default=DEFAULT_RESPONSE_TIMEOUT,
        help=f"等待应答的超时时间（默认{DEFAULT_RESPONSE_TIMEOUT}秒）",
    )

    pid_parser = subparsers.add_parser("set-pid", help="设置PID参数")
    pid_parser.add_argument("group", choices=sorted(PID_GROUPS), help="PID分组")
    for name in ("kp", "ki", "kd", "int_limit"):
        pid_parser.add_argument(name, type=int)
    _add_port_arguments(pid_parser)

    settings_parser = subparsers.add_parser("set-settings", help="设置通用参数")
    for name in (
        "angle_kp",
        "heading_kp",
        "angle_max_inc",
        "angle_max_inc_sonar",
        "stick_scaling_roll_pitch",
        "stick_scaling_yaw",
    ):
        settings_parser.add_argument(name, type=int)
    _add_port_arguments(settings_parser)

    calibrate_parser = subparsers.add_parser("calibrate", help="校准传感器")
    calibrate_parser.add_argument("sensor", choices=sorted(CALIBRATE_TARGETS), help="acc: 加速度计, mag: 磁力计")
    _add_port_arguments(calibrate_parser)

    restore_parser = subparsers.add_parser("restore-defaults", help="恢复出厂设置")
    _add_port_arguments(restore_parser)

    return parser


def run_command(args: argparse.Namespace) -> bool:
    """根据子命令执行相应操作"""
    serial_config = SerialConfig(port=args.port, baudrate=args.baudrate)

    if args.command == "monitor":
        return run_monitor(serial_config, duration=args.duration, angles=not args.no_angles)
    if args.command == "get":
        return run_get(serial_config, args.target, timeout=args.timeout)
    if args.command == "set-pid":
        return run_set_pid(serial_config, args.group, args.kp, args.ki, args.kd, args.int_limit)
    if args.command == "set-settings":
        return run_send(serial_config, CommandId.SET_SETTINGS, (
            args.angle_kp,
            args.heading_kp,
            args.angle_max_inc,
            args.angle_max_inc_sonar,
            args.stick_scaling_roll_pitch,
            args.stick_scaling_yaw,
        ))
    if args.command == "calibrate":
        return run_send(serial_config, CALIBRATE_TARGETS[args.sensor])
    if args.command == "restore-defaults":
        return run_send(serial_config, CommandId.RESTORE_DEFAULTS)

    raise ValueError(f"未知命令: {args.command}")


def main(argv=None):
    """主函数"""
    try:
        parser = create_parser()
        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return

        if args.verbose:
            set_log_level(logging.DEBUG)

        success = run_command(args)
        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 用户中断程序，退出")
        sys.exit(1)
    except Exception as e:
        logger.error(f"程序异常: {e}")
        print(f"\n💥 程序异常: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
