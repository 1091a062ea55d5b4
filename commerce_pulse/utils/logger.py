"""
日志工具模块
统一的控制台/文件日志，附带结构化字段和耗时统计

默认实例只输出到控制台；CLI 通过 init_logger() 开启按日轮转的文件日志
"""

import logging
import sys
import json
import time
import functools
from collections import deque
from pathlib import Path
from typing import Optional, Dict, Any, Callable, Deque, List, Union
from logging.handlers import RotatingFileHandler
from datetime import datetime
from contextlib import contextmanager
from dataclasses import dataclass, field


LOGGER_NAME = "commerce_pulse"
MAX_TRACKED_METRICS = 500


@dataclass
class PerformanceMetrics:
    """单次操作耗时记录"""
    operation: str
    start_time: float = 0.0
    duration: float = 0.0
    success: bool = True
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return round(self.duration * 1000, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operation': self.operation,
            'duration_ms': self.duration_ms,
            'success': self.success,
            'error': self.error,
            'metadata': self.metadata,
            'started_at': datetime.fromtimestamp(self.start_time).isoformat() if self.start_time else None
        }


class ConsoleFormatter(logging.Formatter):
    """控制台格式：INFO 及以下只输出消息，WARNING 以上带级别前缀"""

    def format(self, record):
        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            message = f"[{record.levelname}] {message}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class JsonFormatter(logging.Formatter):
    """每条日志一行 JSON，附带 extra_data 结构化字段"""

    def format(self, record):
        payload = {
            'time': datetime.fromtimestamp(record.created).isoformat(timespec='milliseconds'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        extra = getattr(record, 'extra_data', None)
        if extra:
            payload['data'] = extra

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def _resolve_level(level: Union[int, str]) -> int:
    """级别名（如 "debug"）转为 logging 常量，无法识别时回落到 INFO"""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


class Logger:
    """日志管理器"""

    def __init__(
        self,
        name: str = LOGGER_NAME,
        log_dir: Optional[Path] = None,
        log_level: Union[int, str] = logging.INFO,
        console_output: bool = True,
        file_output: bool = False,
        json_output: bool = False,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3
    ):
        """
        初始化日志管理器

        Args:
            name: 日志记录器名称
            log_dir: 日志文件目录（仅在开启文件输出时创建）
            log_level: 日志级别，接受 logging 常量或级别名
            console_output: 是否输出到控制台
            file_output: 是否输出文本日志文件
            json_output: 是否输出 JSON Lines 日志文件
            max_bytes: 单个日志文件最大字节数
            backup_count: 轮转保留的文件数
        """
        self.name = name
        self.log_level = _resolve_level(log_level)
        self.json_output = json_output
        self.log_dir = Path(log_dir) if log_dir is not None else Path(__file__).parent.parent.parent / "logs"

        self._metrics: Deque[PerformanceMetrics] = deque(maxlen=MAX_TRACKED_METRICS)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(self.log_level)
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        if console_output:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(ConsoleFormatter())
            self._attach(handler)

        if file_output or json_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        if file_output:
            self._attach(self._rotating_handler(".log", max_bytes, backup_count, logging.Formatter(
                '%(asctime)s %(levelname)-7s %(module)s:%(lineno)d %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )))

        if json_output:
            self._attach(self._rotating_handler(".jsonl", max_bytes, backup_count, JsonFormatter()))

    def _rotating_handler(
        self,
        suffix: str,
        max_bytes: int,
        backup_count: int,
        formatter: logging.Formatter
    ) -> RotatingFileHandler:
        log_file = self.log_dir / f"{self.name}_{datetime.now():%Y%m%d}{suffix}"
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
        handler.setFormatter(formatter)
        return handler

    def _attach(self, handler: logging.Handler) -> None:
        handler.setLevel(self.log_level)
        self.logger.addHandler(handler)

    def debug(self, message: str, *args, **kwargs) -> None:
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self.logger.error(message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs) -> None:
        self.logger.exception(message, *args, **kwargs)

    def set_level(self, level: Union[int, str]) -> None:
        """同时调整记录器和所有处理器的级别"""
        self.log_level = _resolve_level(level)
        self.logger.setLevel(self.log_level)
        for handler in self.logger.handlers:
            handler.setLevel(self.log_level)

    # ==================== 结构化日志 ====================

    def log_with_data(self, level: int, message: str, data: Dict[str, Any]) -> None:
        """
        记录带结构化字段的日志（JSON 处理器输出到 data 字段）

        Args:
            level: 日志级别
            message: 日志消息
            data: 结构化字段
        """
        self.logger.log(level, message, extra={'extra_data': data})

    # ==================== 耗时统计 ====================

    @contextmanager
    def track_performance(self, operation: str, metadata: Optional[Dict[str, Any]] = None):
        """
        记录一段代码的耗时，异常照常抛出

        Example:
            with logger.track_performance("关键词数据生成", {"keyword": "螺钿"}):
                session.select_keyword("螺钿")
        """
        metrics = PerformanceMetrics(operation=operation, start_time=time.time(), metadata=metadata or {})
        started = time.perf_counter()
        try:
            yield metrics
        except Exception as e:
            metrics.success = False
            metrics.error = str(e)
            raise
        finally:
            metrics.duration = time.perf_counter() - started
            self._metrics.append(metrics)
            self._log_performance(metrics)

    def _log_performance(self, metrics: PerformanceMetrics) -> None:
        message = f"[性能] {metrics.operation} {metrics.duration_ms:.2f}ms"
        if metrics.metadata:
            message += " (" + ", ".join(f"{k}={v}" for k, v in metrics.metadata.items()) + ")"

        if metrics.success:
            self.log_with_data(logging.DEBUG, message, metrics.to_dict())
        else:
            self.log_with_data(logging.ERROR, f"{message} 失败: {metrics.error}", metrics.to_dict())

    def log_api_call(
        self,
        api: str,
        success: bool,
        latency: float,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        记录外部服务调用结果（成功为 INFO，失败为 WARNING）

        Args:
            api: 服务名称，如 "Gemini/gemini-3-flash-preview"
            success: 是否成功
            latency: 耗时（秒）
            metadata: 附加字段
        """
        data = {'api': api, 'success': success, 'latency_ms': round(latency * 1000, 2), **(metadata or {})}
        message = f"[API] {api} {'成功' if success else '失败'} {data['latency_ms']:.2f}ms"
        self.log_with_data(logging.INFO if success else logging.WARNING, message, data)

    @property
    def recent_metrics(self) -> List[PerformanceMetrics]:
        """最近的耗时记录（最多保留 MAX_TRACKED_METRICS 条）"""
        return list(self._metrics)

    def get_performance_summary(self) -> Dict[str, Any]:
        """
        按操作名汇总耗时

        Returns:
            {'total_operations', 'failed', 'by_operation': {操作: {count, failed, avg_ms, max_ms}}}
        """
        by_operation: Dict[str, Dict[str, Any]] = {}
        for m in self._metrics:
            stats = by_operation.setdefault(m.operation, {'count': 0, 'failed': 0, 'total_ms': 0.0, 'max_ms': 0.0})
            stats['count'] += 1
            stats['total_ms'] += m.duration_ms
            stats['max_ms'] = max(stats['max_ms'], m.duration_ms)
            if not m.success:
                stats['failed'] += 1

        for stats in by_operation.values():
            stats['avg_ms'] = round(stats.pop('total_ms') / stats['count'], 2)

        return {
            'total_operations': len(self._metrics),
            'failed': sum(1 for m in self._metrics if not m.success),
            'by_operation': by_operation
        }

    def clear_performance_metrics(self) -> None:
        self._metrics.clear()


def performance_tracker(operation: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
    """
    耗时统计装饰器，使用调用时的全局日志实例

    Example:
        @performance_tracker("关键词数据生成")
        def select_keyword(self, keyword):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with get_logger().track_performance(operation or func.__name__, metadata):
                return func(*args, **kwargs)

        return wrapper
    return decorator


# 全局日志实例
_logger_instance: Optional[Logger] = None


def get_logger() -> Logger:
    """获取全局日志实例（未初始化时创建仅控制台输出的实例）"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = Logger()
    return _logger_instance


def init_logger(
    name: str = LOGGER_NAME,
    log_dir: Optional[Path] = None,
    log_level: Union[int, str] = logging.INFO,
    console_output: bool = True,
    file_output: bool = True,
    json_output: bool = False
) -> Logger:
    """
    重新初始化全局日志实例

    Args:
        name: 日志记录器名称
        log_dir: 日志文件目录
        log_level: 日志级别（logging 常量或 "DEBUG" 等级别名）
        console_output: 是否输出到控制台
        file_output: 是否输出文本日志文件
        json_output: 是否输出 JSON Lines 日志文件

    Returns:
        Logger实例
    """
    global _logger_instance
    _logger_instance = Logger(
        name=name,
        log_dir=log_dir,
        log_level=log_level,
        console_output=console_output,
        file_output=file_output,
        json_output=json_output
    )
    return _logger_instance
