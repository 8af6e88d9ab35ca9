"""
Logging Utility Module

패키지 로거("repo_attribution") 설정과 작업 시간 측정 유틸리티.
라이브러리로 임포트할 때는 핸들러를 설치하지 않으며, CLI 가 setup_logger 로 출력을 구성합니다.
"""
import functools
import logging
import time
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "repo_attribution"

FILE_LOG_FORMAT = '%(asctime)s %(levelname)-8s %(name)s [%(threadName)s] %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# 표 출력(stdout)과 섞이지 않도록 로그는 stderr 로
console = Console(stderr=True)

# setup_logger 호출 전에는 "No handlers could be found" 경고 없이 조용히 버림
logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _parse_level(log_level: Union[str, int]) -> int:
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(level)
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding='utf-8')
    handler.setLevel(logging.DEBUG)  # 파일에는 모든 로그 저장
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logger(log_level: Union[str, int] = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    패키지 로거에 Rich 콘솔 핸들러(및 선택적 파일 핸들러)를 설치합니다.

    다시 호출하면 이전 핸들러를 닫고 교체합니다.

    Args:
        log_level: 콘솔 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: 로그 파일 경로 (선택사항, 항상 DEBUG 레벨로 기록)

    Returns:
        설정된 패키지 로거
    """
    level = _parse_level(log_level)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(level))
    if log_file:
        logger.addHandler(_file_handler(log_file))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    패키지 로거 또는 그 하위 로거를 반환합니다.

    모듈의 __name__ 을 그대로 넘기면 중복 접두사 없이 사용됩니다.
    """
    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class LogContext:
    """
    작업 시작/완료를 기록하고 소요 시간을 측정하는 컨텍스트 관리자

    실패한 경우 예외는 그대로 전파되며, 측정 시간은 elapsed 에 남습니다.
    """

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or get_logger()
        self.elapsed: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self) -> 'LogContext':
        self._started = time.perf_counter()
        self.logger.info("Starting %s", self.operation)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.info("Completed %s in %.2fs", self.operation, self.elapsed)
        else:
            self.logger.error("Failed %s after %.2fs: %s", self.operation, self.elapsed, exc_val)
        return False


def log_execution_time(func):
    """함수 호출을 LogContext 로 감싸 소요 시간을 기록하는 데코레이터"""
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with LogContext(func.__qualname__, logger):
            return func(*args, **kwargs)

    return wrapper
