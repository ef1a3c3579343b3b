"""健康记录客户端：用药提醒排程。"""
__version__ = "0.1.0"
