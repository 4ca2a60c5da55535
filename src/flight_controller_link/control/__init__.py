"""
控制模块
========

面向应用的飞控命令接口。
"""

from .flight_controller import FlightController, Transport

__all__ = [
    "FlightController",
    "Transport",
]
