"""
Utility functions for lazy sequences

Helpers for measuring how much work a sequence pipeline does, checking
that a pipeline is still unevaluated, paging, and building pipelines
from declarative operation lists.
"""

import gc
import logging
import time
import tracemalloc
from typing import Any, Callable, Dict, List, Sequence, Union

from models import Operation, OperationType, PageResult, PerformanceReport, PerformanceSummary
from seq import Seq

logger = logging.getLogger(__name__)


# Global performance tracking
_performance_reports: List[PerformanceReport] = []


def measure_performance(operation_name: str, func: Callable[..., Any], *args, **kwargs) -> PerformanceReport:
    """Measure a function call with timing and memory tracking"""
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        report = PerformanceReport(
            operation=operation_name,
            execution_time_ms=execution_time_ms,
            memory_usage_mb=peak / 1024 / 1024,
            success=False,
            error=str(e)
        )
        _performance_reports.append(report)
        logger.error(f"Error in {operation_name} after {execution_time_ms:.2f}ms: {e}")
        raise
    else:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        report = PerformanceReport(
            operation=operation_name,
            execution_time_ms=execution_time_ms,
            memory_usage_mb=peak / 1024 / 1024,
            success=True,
            result_size=len(result) if hasattr(result, "__len__") else None
        )
        _performance_reports.append(report)
        logger.debug(f"Completed {operation_name} in {execution_time_ms:.2f}ms")
        return report
    finally:
        tracemalloc.stop()


def get_performance_summary() -> PerformanceSummary:
    """Get summary of all performance metrics"""
    count = len(_performance_reports)
    if count == 0:
        return PerformanceSummary()

    total_time = sum(r.execution_time_ms for r in _performance_reports)
    total_memory = sum(r.memory_usage_mb for r in _performance_reports)
    return PerformanceSummary(
        total_operations=count,
        total_time_ms=total_time,
        total_memory_mb=total_memory,
        avg_time_ms=total_time / count,
        avg_memory_mb=total_memory / count
    )


def clear_performance_metrics() -> None:
    _performance_reports.clear()


def validate_lazy_evaluation(seq: Any) -> bool:
    """True when ``seq`` is a Seq that has not evaluated any element yet"""
    return isinstance(seq, Seq) and seq.cache_size == 0


def page_info(seq: Seq, page_number: int, page_size: int) -> PageResult:
    """Materialize one page and report whether neighbouring pages exist"""
    items = seq.page(page_number, page_size).to_list_unsafe()
    # probe the single element right after this page
    next_index = page_number * page_size
    return PageResult(
        items=items,
        current_page=page_number,
        page_size=page_size,
        has_next_page=len(items) == page_size and seq.get(next_index).is_some(),
        has_previous_page=page_number > 1
    )


def apply_operations(seq: Seq, operations: Sequence[Union[Operation, Dict[str, Any]]]) -> Seq:
    """Fold declarative operations onto ``seq``; nothing is evaluated"""
    result = seq
    for raw in operations:
        op = raw if isinstance(raw, Operation) else Operation(**raw)

        if op.type == OperationType.MAP:
            result = result.map(op.fn)
        elif op.type == OperationType.FILTER:
            result = result.filter(op.fn)
        elif op.type == OperationType.TAKE:
            result = result.take(op.count)
        elif op.type == OperationType.DROP:
            result = result.drop(op.count)
        elif op.type == OperationType.CHUNK:
            result = result.chunk(op.size)
        elif op.type == OperationType.WINDOW:
            result = result.window(op.size)
        elif op.type == OperationType.DISTINCT:
            result = result.distinct()
        elif op.type == OperationType.SCAN:
            result = result.scan(op.fn, op.initial)

        logger.debug(f"Applied {op.describe()}")
    return result
