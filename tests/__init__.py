"""
测试模块
========

包含协议编解码、事件分发和串口适配的单元测试。
"""

# 未安装包时直接运行测试，也能从 src 导入 flight_controller_link
from pathlib import Path
import sys

SRC_DIR = Path(__file__).parent.parent.resolve() / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))
