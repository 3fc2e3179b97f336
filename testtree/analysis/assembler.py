"""Tree assembly: second phase of building the report tree.

Each record group is sorted chronologically and folded into a single
TestNode. The one node with an empty name is the root of the run; every
other node becomes its direct child, so the tree is always exactly two
levels deep.

Folding is last-write-wins: a repeated ``run`` overwrites the name,
package and start time, and a repeated terminal record overwrites the
status and elapsed time. Such anomalies are tolerated and reported
through the optional ``warnings`` list rather than rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import IO, Callable, Iterable

from testtree.analysis.collector import RecordGroups, collect_records
from testtree.analysis.records import OUTPUT, RUN, TERMINAL_ACTIONS, Record
from testtree.errors import RootCardinalityError, UnknownActionError

# Records without a timestamp sort before everything else
_UNSET_TIME = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class TestNode:
    """An assembled test: the run-level root or one of its tests."""

    __test__ = False

    name: str = ""
    package: str = ""
    time: datetime | None = None
    status: str | None = None  # pass, fail, skip; None until terminated
    output: str = ""
    elapsed: timedelta = field(default_factory=timedelta)
    children: list[TestNode] = field(default_factory=list)

    _stats: dict[str, int] | None = field(
        default=None, init=False, repr=False, compare=False,
    )

    @property
    def is_root(self) -> bool:
        return self.name == ""

    @property
    def elapsed_seconds(self) -> float:
        return self.elapsed.total_seconds()

    @property
    def stats(self) -> dict[str, int]:
        """Status counts over this subtree (computed on first access)."""
        return self.calc_stats()

    def calc_stats(self) -> dict[str, int]:
        """Compute and cache the fail/pass/skip counts of this subtree.

        The node's own status counts once; each child's cached counts are
        added on top. Once computed the mapping is returned as-is on every
        later call, so callers must not modify it.
        """
        if self._stats is not None:
            return self._stats

        stats = {status: 0 for status in TERMINAL_ACTIONS}
        if self.status in stats:
            stats[self.status] += 1
        for child in self.children:
            child_stats = child.calc_stats()
            for key in stats:
                stats[key] += child_stats[key]

        self._stats = stats
        return stats

    def count(self) -> int:
        """Number of nodes in this subtree, including this one."""
        return 1 + sum(child.count() for child in self.children)


class TestBuilder:
    """Folds the chronologically sorted records of one group into a TestNode."""

    __test__ = False

    def __init__(self, key: tuple[str, str]) -> None:
        self.key = key
        self.name = ""
        self.package = ""
        self.time: datetime | None = None
        self.status: str | None = None
        self.elapsed = timedelta()
        self._output: list[str] = []
        self._seen_run = False

    def fold(self, record: Record, warnings: list[str] | None = None) -> None:
        """Apply one record.

        Raises:
            UnknownActionError: If the record's action is not recognized.
        """
        if self.status is not None and warnings is not None:
            warnings.append(
                f"{self._describe()}: {record.action!r} record after "
                f"terminal {self.status!r} record"
            )

        if record.action == RUN:
            self.name = record.test
            self.package = record.package
            self.time = record.time
            self._seen_run = True
        elif record.action == OUTPUT:
            self._output.append(record.output)
        elif record.action in TERMINAL_ACTIONS:
            if not self._seen_run and record.test and warnings is not None:
                warnings.append(
                    f"{self._describe()}: terminal {record.action!r} record "
                    f"before any 'run' record"
                )
            self.status = record.action
            # Fractional milliseconds are truncated
            self.elapsed = timedelta(milliseconds=int(record.elapsed))
        else:
            package, test = self.key
            raise UnknownActionError(record.action, package, test)

    def build(self) -> TestNode:
        return TestNode(
            name=self.name,
            package=self.package,
            time=self.time,
            status=self.status,
            output="".join(self._output),
            elapsed=self.elapsed,
        )

    def _describe(self) -> str:
        package, test = self.key
        return f"{package} {test}" if test else f"{package} (run)"


def _sort_key(record: Record) -> datetime:
    return record.time if record.time is not None else _UNSET_TIME


def assemble(
    key: tuple[str, str],
    records: Iterable[Record],
    warnings: list[str] | None = None,
) -> TestNode:
    """Fold one record group into a TestNode.

    Records are sorted by timestamp; ties keep their arrival order.

    Args:
        key: The group's ``(package, test)`` key, used in diagnostics.
        records: The group's records in arrival order.
        warnings: Optional list that collects descriptions of anomalous
            but tolerated input.

    Returns:
        The folded TestNode, without children.

    Raises:
        UnknownActionError: If any record has an unrecognized action.
    """
    builder = TestBuilder(key)
    for record in sorted(records, key=_sort_key):
        builder.fold(record, warnings)
    return builder.build()


def assemble_tests(
    groups: RecordGroups,
    warnings: list[str] | None = None,
    trace: Callable[[TestNode], None] | None = None,
) -> TestNode:
    """Build the report tree from collected record groups.

    Args:
        groups: Output of :func:`collect_records`.
        warnings: Optional list that collects anomaly descriptions.
        trace: Optional hook called with every folded node, in group order.

    Returns:
        The root TestNode with every other test attached as a direct child
        and its start time set to the earliest child start time.

    Raises:
        UnknownActionError: If any group contains an unrecognized action.
        RootCardinalityError: If there is not exactly one root group.
    """
    nodes: list[TestNode] = []
    for key, records in groups.items():
        node = assemble(key, records, warnings)
        if trace is not None:
            trace(node)
        nodes.append(node)

    roots = [node for node in nodes if node.is_root]
    if not roots:
        raise RootCardinalityError("none", 0)
    if len(roots) > 1:
        raise RootCardinalityError("multiple", len(roots))

    root = roots[0]
    root.children = [node for node in nodes if node is not root]

    # The run starts when its earliest test starts
    start: datetime | None = None
    for child in root.children:
        if child.time is None:
            continue
        if start is None or child.time < start:
            start = child.time
    if start is not None:
        root.time = start

    return root


def parse(
    stream: IO[bytes] | IO[str],
    warnings: list[str] | None = None,
    trace: Callable[[TestNode], None] | None = None,
) -> TestNode:
    """Parse a whole event stream into a report tree.

    Raises:
        ParseError: Any of its subclasses; no partial tree is returned.
    """
    groups = collect_records(stream)
    return assemble_tests(groups, warnings=warnings, trace=trace)
