"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler


PACKAGE_LOGGER = "plume_compress"


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        # 获取调用者的模块名
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
    log_file: str | None = None,
) -> logging.Logger:
    """按 LoggingDefaults 配置包级日志记录器。

    未显式传入的参数从全局配置读取；重复调用不会叠加处理器。

    Returns:
        logging.Logger: 包级日志记录器
    """
    from ..config import get_config

    defaults = get_config().logging
    level = (level or defaults.LOG_LEVEL).upper()
    log_format = log_format or defaults.LOG_FORMAT
    if log_file is None and defaults.ENABLE_FILE_LOGGING:
        log_file = defaults.LOG_FILE_PATH

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not any(getattr(h, "_plume_handler", False) for h in logger.handlers):
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if log_file:
            handlers.append(
                RotatingFileHandler(
                    log_file,
                    maxBytes=defaults.LOG_FILE_MAX_SIZE,
                    backupCount=defaults.LOG_FILE_BACKUP_COUNT,
                    encoding="utf-8",
                )
            )
        for handler in handlers:
            handler.setFormatter(logging.Formatter(log_format))
            handler._plume_handler = True  # type: ignore[attr-defined]
            logger.addHandler(handler)

    return logger
