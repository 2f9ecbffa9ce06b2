import logging
import sys
import os
from logging.handlers import TimedRotatingFileHandler
from pythonjsonlogger import jsonlogger

LOG_DIR = 'logs'
LOG_FILE = 'bot.log'


def _build_console_handler(level: int) -> logging.Handler:
    """控制台处理器，人类可读格式。"""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    handler.setLevel(level)
    return handler


def _build_file_handler() -> logging.Handler:
    """文件处理器，JSON 格式，按天轮转。extra 中的上下文字段会一并写入。"""
    os.makedirs(LOG_DIR, exist_ok=True)

    interval = int(os.getenv('LOG_ROTATION_INTERVAL_DAYS', '1'))
    backup_count = int(os.getenv('LOG_BACKUP_COUNT', '7'))
    handler = TimedRotatingFileHandler(
        os.path.join(LOG_DIR, LOG_FILE),
        when='midnight',
        interval=interval,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={
            'asctime': 'timestamp',
            'levelname': 'level',
            'name': 'logger'
        },
        json_ensure_ascii=False
    ))
    # 文件记录所有 DEBUG 及以上的日志
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging():
    """
    配置根 logger：控制台输出文本，文件输出 JSON。
    重复调用不会重复添加处理器。
    """
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        return

    log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    # 根 logger 放行全部级别，由各处理器自行过滤
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(_build_console_handler(log_level))
    root_logger.addHandler(_build_file_handler())

    # discord.py 内部日志过于嘈杂
    logging.getLogger('discord').setLevel(logging.WARNING)
    logging.getLogger('discord.http').setLevel(logging.WARNING)

    root_logger.info(f"日志系统初始化完成 (控制台级别: {logging.getLevelName(log_level)}, 文件: json)")
