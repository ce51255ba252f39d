"""Path-indexed tree of aggregated result counters."""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Literal

from conformance_runner.models.result import SuiteStats, TestResult

type PassClass = Literal["neutral", "pass", "partial", "fail"]

ROOT_DIR_KEY = "."


def relative_parts(path: Path, root: Path) -> Sequence[str]:
    """Split ``path`` into segments relative to ``root``.

    Paths outside ``root`` are kept whole, relative to nothing.
    """
    try:
        rel = PurePath(path).relative_to(root)
    except ValueError:
        rel = PurePath(path)
    return rel.parts


def directory_key(parts: Sequence[str]) -> str:
    """Key of the directory holding a file, ``.`` for the root itself."""
    if len(parts) > 1:
        return "/".join(parts[:-1])
    return ROOT_DIR_KEY


def classify_pass_rate(stats: SuiteStats) -> PassClass:
    """Colour class of a node: neutral, full pass, partial or fail."""
    if stats.total == 0:
        return "neutral"
    if stats.passed == stats.total:
        return "pass"
    if stats.passed > 0:
        return "partial"
    return "fail"


@dataclass(kw_only=True)
class TreeNode:
    """A directory in the result tree."""

    name: str
    path: Path
    is_dir: bool = True
    children: dict[str, "TreeNode"] = field(default_factory=dict)
    stats: SuiteStats = field(default_factory=SuiteStats)
    # Results of files that live directly in this directory
    leaf_stats: SuiteStats = field(default_factory=SuiteStats)

    def child(self, name: str) -> "TreeNode":
        """Return the named child directory, creating it on first use."""
        if (node := self.children.get(name)) is None:
            node = TreeNode(name=name, path=self.path / name)
            self.children[name] = node
        return node

    def sorted_children(self) -> Iterator["TreeNode"]:
        for name in sorted(self.children):
            yield self.children[name]

    def walk(self) -> Iterator["TreeNode"]:
        """Yield this node and its descendants, depth first."""
        yield self
        for node in self.sorted_children():
            yield from node.walk()

    def recompute(self) -> SuiteStats:
        """Recompute stats bottom-up from leaf results alone."""
        total = SuiteStats()
        total.merge(self.leaf_stats)
        for node in self.children.values():
            total.merge(node.recompute())
        return total

    @property
    def pass_class(self) -> PassClass:
        return classify_pass_rate(self.stats)


@dataclass(kw_only=True)
class ResultTree:
    """Folds a stream of results into per-directory counters.

    Every directory from the root down to a file's parent accumulates that
    file's contribution.
    """

    root_dir: Path
    root: TreeNode = field(init=False)
    dir_file_counts: dict[str, int] = field(default_factory=dict)
    dir_done_counts: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.root = TreeNode(name="test", path=self.root_dir)

    def _walk(self, parts: Sequence[str]) -> list[TreeNode]:
        nodes = [self.root]
        for part in parts[:-1]:
            nodes.append(nodes[-1].child(part))
        return nodes

    def prebuild(self, paths: Iterable[Path]) -> None:
        """Create the directory skeleton and count the files per directory."""
        for path in paths:
            parts = relative_parts(path, self.root_dir)
            key = directory_key(parts)
            self.dir_file_counts[key] = self.dir_file_counts.get(key, 0) + 1
            self._walk(parts)

    def fold(self, result: TestResult) -> str:
        """Add one result to every directory on its path.

        Returns:
            The key of the directory directly holding the result's file

        """
        parts = relative_parts(result.path, self.root_dir)
        nodes = self._walk(parts)
        for node in nodes:
            node.stats.add(result)
        nodes[-1].leaf_stats.add(result)

        key = directory_key(parts)
        self.dir_done_counts[key] = self.dir_done_counts.get(key, 0) + 1
        return key

    def directory_complete(self, key: str) -> bool:
        """Whether every prebuilt file in a directory has been folded."""
        expected = self.dir_file_counts.get(key)
        return expected is not None and self.dir_done_counts.get(key, 0) >= expected

    @property
    def stats(self) -> SuiteStats:
        return self.root.stats
