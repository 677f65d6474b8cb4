"""
model.py

Immutable data types shared by the parser, the view builders, the
summary aggregator and the differ. Times are microseconds.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


ANONYMOUS = "(anonymous)"
ROOT_NAMES = ("(root)", "(program)")


class Category(str, Enum):
    JAVASCRIPT = "javascript"
    NATIVE = "native"
    GC = "gc"
    IDLE = "idle"
    PROGRAM = "program"
    SYSTEM = "system"
    WASM = "wasm"
    REGEXP = "regexp"
    COMPILE = "compile"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    Category.JAVASCRIPT: "JavaScript",
    Category.NATIVE: "Native",
    Category.GC: "Garbage Collection",
    Category.IDLE: "Idle",
    Category.PROGRAM: "Program",
    Category.SYSTEM: "System",
    Category.WASM: "WebAssembly",
    Category.REGEXP: "RegExp",
    Category.COMPILE: "Compile",
    Category.OTHER: "Other",
}


class ViewMode(str, Enum):
    SUMMARY = "summary"
    FLAMEGRAPH = "flamegraph"
    CALLTREE = "calltree"
    BOTTOMUP = "bottomup"
    TIMELINE = "timeline"
    SOURCE = "source"


def percentage(value: float, denominator: float) -> float:
    """Return value as a percentage of denominator, 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return value / denominator * 100


@dataclass(frozen=True)
class CallFrame:
    function_name: str
    url: str
    line: int
    column: int
    script_id: str = ""

    @property
    def name(self) -> str:
        return self.function_name or ANONYMOUS


@dataclass(frozen=True)
class PositionTick:
    line: int
    ticks: int


@dataclass(frozen=True)
class RawNode:
    id: int
    call_frame: CallFrame
    hit_count: int = 0
    children: Tuple[int, ...] = ()
    position_ticks: Tuple[PositionTick, ...] = ()
    deopt_reason: str = ""


@dataclass(frozen=True)
class CPUProfile:
    nodes: Tuple[RawNode, ...]
    start_time: float
    end_time: float
    samples: Optional[Tuple[int, ...]] = None
    time_deltas: Optional[Tuple[float, ...]] = None
    title: str = ""

    @property
    def duration(self) -> float:
        return max(self.end_time - self.start_time, 0)

    @property
    def has_samples(self) -> bool:
        return bool(self.samples) and bool(self.time_deltas)


@dataclass(frozen=True)
class ProfileNode:
    id: int
    call_frame: CallFrame
    hit_count: int
    children: Tuple[int, ...]
    position_ticks: Tuple[PositionTick, ...]
    self_time: float
    total_time: float
    self_percentage: float
    total_percentage: float
    category: Category
    depth: int

    @property
    def name(self) -> str:
        return self.call_frame.name


@dataclass(frozen=True)
class FlameNode:
    id: int
    name: str
    value: float
    total_value: float
    depth: int
    x: float
    width: float
    percentage: float
    self_percentage: float
    call_frame: Optional[CallFrame] = None
    category: Category = Category.OTHER
    children: Tuple["FlameNode", ...] = ()


@dataclass(frozen=True)
class CallTreeNode:
    id: int
    name: str
    self_time: float
    total_time: float
    self_percentage: float
    total_percentage: float
    hit_count: int
    depth: int
    expanded: bool
    call_frame: Optional[CallFrame] = None
    category: Category = Category.OTHER
    children: Tuple["CallTreeNode", ...] = ()


@dataclass(frozen=True)
class BottomUpNode:
    id: str
    name: str
    self_time: float
    total_time: float
    self_percentage: float
    total_percentage: float
    hit_count: int
    call_frame: Optional[CallFrame] = None
    category: Category = Category.OTHER
    callers: Tuple["BottomUpNode", ...] = ()


@dataclass(frozen=True)
class CallerInfo:
    name: str
    self_time: float
    percentage: float
    call_frame: Optional[CallFrame] = None


# Same shape, seen from the other end of the edge.
CalleeInfo = CallerInfo


@dataclass(frozen=True)
class HotFunction:
    id: int
    name: str
    self_time: float
    total_time: float
    self_percentage: float
    total_percentage: float
    hit_count: int
    url: str
    line: int
    call_frame: CallFrame
    category: Category = Category.OTHER
    callers: Tuple[CallerInfo, ...] = ()
    callees: Tuple[CalleeInfo, ...] = ()

    @property
    def key(self) -> str:
        return f"{self.name}|{self.url}|{self.line}"


@dataclass(frozen=True)
class TimelineEvent:
    node_id: int
    start_time: float
    duration: float
    name: str
    depth: int
    category: Category = Category.OTHER

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration


@dataclass(frozen=True)
class TimelineData:
    events: Tuple[TimelineEvent, ...]
    duration: float
    max_depth: int


@dataclass(frozen=True)
class CategoryStats:
    category: Category
    time: float
    percentage: float
    count: int

    @property
    def label(self) -> str:
        return self.category.label


@dataclass(frozen=True)
class SourceLine:
    line_number: int
    self_time: float
    total_time: float
    self_percentage: float
    hit_count: int
    origins: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceFile:
    url: str
    file_name: str
    lines: Tuple[SourceLine, ...]
    total_time: float
    functions: Tuple[HotFunction, ...] = ()


@dataclass(frozen=True)
class ProfileStats:
    total_time: float
    total_samples: int
    total_nodes: int
    top_functions: Tuple[HotFunction, ...]
    gc_time: float
    idle_time: float
    categories: Tuple[CategoryStats, ...]
    samples_per_second: float


@dataclass(frozen=True)
class HistogramBucket:
    label: str
    value: float
    percentage: float


@dataclass(frozen=True)
class ChartDataPoint:
    name: str
    value: float
    percentage: float


@dataclass(frozen=True)
class SummaryData:
    category_breakdown: Tuple[CategoryStats, ...]
    timeline_histogram: Tuple[HistogramBucket, ...]
    top_functions_chart: Tuple[ChartDataPoint, ...]
    call_depth_distribution: Tuple[HistogramBucket, ...]


@dataclass(frozen=True)
class ParsedProfile:
    profile: CPUProfile
    nodes: Mapping[int, ProfileNode]
    flame_graph: FlameNode
    call_tree: CallTreeNode
    bottom_up: Tuple[BottomUpNode, ...]
    hot_functions: Tuple[HotFunction, ...]
    timeline: TimelineData
    stats: ProfileStats
    summary: SummaryData
    source_files: Mapping[str, SourceFile] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def view(self, mode):
        """Return the derived view selected by a ViewMode (or its string value)."""
        mode = ViewMode(mode)
        if mode is ViewMode.SUMMARY:
            return self.summary
        if mode is ViewMode.FLAMEGRAPH:
            return self.flame_graph
        if mode is ViewMode.CALLTREE:
            return self.call_tree
        if mode is ViewMode.BOTTOMUP:
            return self.bottom_up
        if mode is ViewMode.TIMELINE:
            return self.timeline
        return self.source_files


@dataclass(frozen=True)
class FunctionDiff:
    name: str
    url: str
    line: int
    baseline_self_time: float
    comparison_self_time: float
    self_time_diff: float
    self_time_diff_percentage: float
    call_frame: CallFrame


@dataclass(frozen=True)
class ProfileDiff:
    added_functions: Tuple[HotFunction, ...]
    removed_functions: Tuple[HotFunction, ...]
    changed_functions: Tuple[FunctionDiff, ...]
    total_time_diff: float
    total_time_diff_percentage: float


@dataclass(frozen=True)
class CategoryComparison:
    category: Category
    baseline_time: float
    baseline_percentage: float
    comparison_time: float
    comparison_percentage: float
    time_diff: float
    percentage_diff: float

    @property
    def label(self) -> str:
        return self.category.label


@dataclass(frozen=True)
class StatDelta:
    baseline: float
    comparison: float
    diff: float
    diff_percentage: float


@dataclass(frozen=True)
class StatsComparison:
    total_time: StatDelta
    total_samples: StatDelta
    total_nodes: StatDelta
    gc_time: StatDelta


@dataclass(frozen=True)
class ProfileComparison:
    baseline: ParsedProfile
    comparison: ParsedProfile
    diff: ProfileDiff
    categories: Tuple[CategoryComparison, ...]
    stats: StatsComparison
    top_regressions: Tuple[FunctionDiff, ...]
    top_improvements: Tuple[FunctionDiff, ...]
