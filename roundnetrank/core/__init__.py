"""
核心业务模块
训练场次管理、选手统计与异常定义
"""
