"""
Schema catalog data transfer objects.

The catalog is discovered from the input itself: classes and metrics come from
the METADATA stanza, devices from the first data block. Each device keeps a
buffer of exactly one block of raw values plus running statistics that
accumulate over every block of every input file.
"""
from enum import Enum
from typing import Iterator, List, Optional, Tuple
import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from perfmon_analyzer.errors import FatalError


# Vector class metrics have no real devices; their data lives in this one
NO_DEVICE_NAME = "None"


class ClassKind(str, Enum):
    VECTOR = "V"
    ARRAY = "A"


class Device(BaseModel):
    """A named data source of a metric (disk, interface, or the implicit one)"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    scale: float = 0.0
    count: int = 0
    max: float = 0.0
    sum: float = 0.0
    values: np.ndarray

    @classmethod
    def create(cls, name: str, rows: int) -> "Device":
        return cls(name=name, values=np.zeros(rows, dtype=float))

    @property
    def active(self) -> bool:
        """Zero-scale devices are left out of every output file"""
        return self.scale != 0

    @property
    def average(self) -> float:
        return self.sum / self.count if self.count else float("nan")

    def record(self, index: int, value: float):
        self.count += 1
        self.max = max(self.max, value)
        self.sum += value
        self.values[index] = value


class Metric(BaseModel):
    """A tracked quantity, e.g. cpu_us or tps"""
    name: str
    count: int = 0
    max: float = 0.0
    sum: float = 0.0
    devices: List[Device] = Field(default_factory=list)

    @property
    def num_devices(self) -> int:
        return len(self.devices)

    @property
    def average(self) -> float:
        return self.sum / self.count if self.count else float("nan")

    def add_device(self, name: str, rows: int) -> Device:
        """Register a device by name, reusing it if it is already known"""
        for device in self.devices:
            if device.name == name:
                return device
        device = Device.create(name, rows)
        self.devices.append(device)
        return device

    def find_device(self, name: str) -> Optional[Device]:
        return next((d for d in self.devices if d.name == name), None)

    def record(self, device_index: int, time_index: int, value: float):
        self.count += 1
        self.max = max(self.max, value)
        self.sum += value
        self.devices[device_index].record(time_index, value)


class MetricClass(BaseModel):
    """A group of metrics sharing one record layout"""
    name: str
    kind: ClassKind
    start_row: int = 0   # 0-based; rows before it are read but not used
    metrics: List[Metric] = Field(default_factory=list)

    @property
    def is_vector(self) -> bool:
        return self.kind == ClassKind.VECTOR

    @property
    def num_metrics(self) -> int:
        return len(self.metrics)

    @property
    def stanza(self) -> str:
        return f"{self.name}:"

    def column_name(self, metric: Metric, device: Device, separator: str) -> str:
        if self.is_vector:
            return metric.name
        return f"{metric.name}{separator}{device.name}"


class SchemaCatalog(BaseModel):
    """Class -> Metric -> Device hierarchy plus the block geometry"""
    count: int = 0
    interval: int = 0
    first_timestamp: Optional[int] = None
    last_timestamp: Optional[int] = None
    classes: List[MetricClass] = Field(default_factory=list)

    @property
    def block_span(self) -> int:
        """Seconds covered by one block"""
        return self.count * self.interval

    def add_class(self, name: str, kind: ClassKind, start_row: int,
                  metric_names: List[str]) -> MetricClass:
        metric_class = MetricClass(
            name=name,
            kind=kind,
            start_row=start_row,
            metrics=[Metric(name=m) for m in metric_names],
        )
        self.classes.append(metric_class)
        return metric_class

    def iter_metrics(self) -> Iterator[Tuple[MetricClass, Metric]]:
        for metric_class in self.classes:
            for metric in metric_class.metrics:
                yield metric_class, metric

    def iter_devices(self) -> Iterator[Tuple[MetricClass, Metric, Device]]:
        for metric_class, metric in self.iter_metrics():
            for device in metric.devices:
                yield metric_class, metric, device

    def active_columns(self, separator: str) -> List[Tuple[str, MetricClass, Device]]:
        """(column name, owning class, device) for every nonzero-scale device, in catalog order"""
        return [
            (metric_class.column_name(metric, device, separator), metric_class, device)
            for metric_class, metric, device in self.iter_devices()
            if device.active
        ]

    def find_metric(self, name: str) -> Optional[Tuple[MetricClass, Metric]]:
        return next(((c, m) for c, m in self.iter_metrics() if m.name == name), None)

    def check_metric_names(self):
        """Metric names must be unique across all classes"""
        seen = set()
        for _, metric in self.iter_metrics():
            if metric.name in seen:
                raise FatalError(f"Duplicate metric '{metric.name}'")
            seen.add(metric.name)
