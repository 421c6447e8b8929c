"""
Data containers shared by the pipeline stages.

`MetadataRecord` is parsed from JSON written by external producers. Only the
numbers the statistics compute on are typed; every other field is taken as
written, missing or null counts default to 0, and extra keys are kept. The
derived containers are plain dataclasses.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator, model_validator


class MetadataRecord(BaseModel):
    """One automated test run, as described by its `metadata.json`."""

    model_config = ConfigDict(extra="allow", frozen=True)

    project: Any = None
    timestamp: Optional[str] = None
    run_number: Any = None
    branch: Any = None
    status: Any = None
    total_tests: Union[int, float] = 0
    passed: Union[int, float] = 0
    failed: Union[int, float] = 0
    pass_rate: float = 0.0
    failed_tests: List[Any] = []

    _raw: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_raw(cls, data: Any, handler: Any) -> "MetadataRecord":
        record = handler(data)
        if isinstance(data, dict):
            record._raw = dict(data)
        return record

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp_as_text(cls, value: Any) -> Any:
        return value if value is None or isinstance(value, str) else str(value)

    @field_validator("total_tests", "passed", "failed", "pass_rate", mode="before")
    @classmethod
    def _null_count_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("failed_tests", mode="before")
    @classmethod
    def _null_list_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def as_metadata(self) -> Dict[str, Any]:
        """Returns the record exactly as its producer wrote it."""
        return dict(self._raw)


@dataclass
class TrendStatistics:
    """Descriptive statistics over the records of a trend window."""

    period_days: int
    records: List[MetadataRecord]
    average: float
    median: float
    std_dev: float
    max_pass_rate: float
    max_record: MetadataRecord
    min_pass_rate: float
    min_record: MetadataRecord
    historical_data: str

    @property
    def total_runs(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class AnalysisResult:
    project: str
    analysis_type: str  # "single" | "trend"
    analysis: str
    generated_at: str
    report_path: str
    insights_path: Optional[str] = None
    record: Optional[MetadataRecord] = None
    statistics: Optional[TrendStatistics] = None
    pass_rate_change: Optional[float] = None
