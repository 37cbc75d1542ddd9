"""clinsim -- 临床模拟训练的学习事件遥测管线"""

__version__ = "0.1.0"
