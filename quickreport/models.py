"""Core data models shared across quickreport components."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class FileEntry:
    """An eligible code file inside a scanned directory."""

    name: str
    summary: Optional[str] = None


@dataclass
class DirectoryNode:
    """One filesystem directory; ``path`` is absolute and unique per node."""

    name: str
    path: str
    children: List["DirectoryNode"] = field(default_factory=list)
    files: List[FileEntry] = field(default_factory=list)


@dataclass
class ProgressRecord:
    """Counters and results for a summarization run."""

    total_files: int = 0
    completed_files: int = 0
    summaries: Dict[str, str] = field(default_factory=dict)
