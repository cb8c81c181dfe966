"""
Pydantic Models

Settings, diagnostics reports and declarative pipeline steps for the
lazy sequence library.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SeqSettings(BaseModel):
    """Library-wide settings"""
    max_size: int = Field(
        10_000,
        description="Default cap for length, reverse and to_list",
        ge=1
    )
    log_level: str = Field(
        "WARNING",
        description="Level applied to the library loggers"
    )

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate the level is a standard logging level name"""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level: {v}")
        return level


class PerformanceReport(BaseModel):
    """Timing and memory figures for one measured operation"""
    operation: str = Field(..., description="Name of the measured operation")
    execution_time_ms: float = Field(..., description="Wall time in milliseconds", ge=0)
    memory_usage_mb: float = Field(..., description="Peak traced memory in megabytes", ge=0)
    success: bool = Field(..., description="Whether the operation returned normally")
    result_size: Optional[int] = Field(None, description="len() of the result when it has one")
    error: Optional[str] = Field(None, description="Error message if the operation raised")
    timestamp: datetime = Field(default_factory=datetime.now)


class PerformanceSummary(BaseModel):
    """Aggregate of all recorded performance reports"""
    total_operations: int = 0
    total_time_ms: float = 0.0
    total_memory_mb: float = 0.0
    avg_time_ms: float = 0.0
    avg_memory_mb: float = 0.0


class PageResult(BaseModel):
    """One page of a sequence"""
    items: List[Any] = Field(default_factory=list)
    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    has_next_page: bool
    has_previous_page: bool


class OperationType(str, Enum):
    """Supported declarative pipeline steps"""
    MAP = "map"
    FILTER = "filter"
    TAKE = "take"
    DROP = "drop"
    CHUNK = "chunk"
    WINDOW = "window"
    DISTINCT = "distinct"
    SCAN = "scan"


_NEEDS_FN = {OperationType.MAP, OperationType.FILTER, OperationType.SCAN}
_NEEDS_COUNT = {OperationType.TAKE, OperationType.DROP}
_NEEDS_SIZE = {OperationType.CHUNK, OperationType.WINDOW}


class Operation(BaseModel):
    """A single declarative pipeline step"""
    type: OperationType = Field(..., description="Which combinator to apply")
    fn: Optional[Callable[..., Any]] = Field(
        None,
        description="Function for map, filter and scan"
    )
    count: Optional[int] = Field(
        None,
        description="Element count for take and drop",
        ge=0
    )
    size: Optional[int] = Field(
        None,
        description="Group size for chunk and window",
        ge=1
    )
    initial: Any = Field(None, description="Seed for scan")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode='after')
    def validate_arguments(self):
        """Each step type needs its own argument"""
        if self.type in _NEEDS_FN and self.fn is None:
            raise ValueError(f"'{self.type.value}' requires fn")
        if self.type in _NEEDS_COUNT and self.count is None:
            raise ValueError(f"'{self.type.value}' requires count")
        if self.type in _NEEDS_SIZE and self.size is None:
            raise ValueError(f"'{self.type.value}' requires size")
        return self

    def describe(self) -> Dict[str, Any]:
        """Plain-dict view without the callable"""
        return self.model_dump(exclude={"fn"}, exclude_none=True, mode="json")
