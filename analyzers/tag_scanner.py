"""
Tag Scanner
Extracts TODO / FIXME / HACK comments from source files.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List

from core.scanner import FileEntry

logger = logging.getLogger(__name__)

SCAN_EXTENSIONS = frozenset({
    '.js', '.jsx', '.ts', '.tsx', '.py', '.java', '.cpp', '.c', '.cs',
    '.go', '.rs', '.php', '.rb', '.swift', '.kt', '.html', '.css', '.scss',
})


class TagKind(Enum):
    TODO = "TODO"
    FIXME = "FIXME"
    HACK = "HACK"


def _tag_pattern(keyword: str) -> "re.Pattern[str]":
    # line comment | single-line block comment | hash comment
    return re.compile(
        rf"//\s*{keyword}:?\s*(.+)"
        rf"|/\*\s*{keyword}:?\s*(.+?)\s*\*/"
        rf"|#\s*{keyword}:?\s*(.+)",
        re.IGNORECASE,
    )


TAG_PATTERNS: Dict[TagKind, "re.Pattern[str]"] = {kind: _tag_pattern(kind.value) for kind in TagKind}


@dataclass(frozen=True)
class TagMatch:
    file: str
    kind: TagKind
    comment: str


@dataclass
class FileTagReport:
    path: str
    name: str
    todos: List[str] = field(default_factory=list)
    fixmes: List[str] = field(default_factory=list)
    hacks: List[str] = field(default_factory=list)

    def comments(self, kind: TagKind) -> List[str]:
        return {TagKind.TODO: self.todos, TagKind.FIXME: self.fixmes, TagKind.HACK: self.hacks}[kind]

    @property
    def count(self) -> int:
        return len(self.todos) + len(self.fixmes) + len(self.hacks)

    @property
    def has_matches(self) -> bool:
        return self.count > 0


@dataclass
class TagScanResult:
    todos: List[TagMatch] = field(default_factory=list)
    fixmes: List[TagMatch] = field(default_factory=list)
    hacks: List[TagMatch] = field(default_factory=list)
    file_details: List[FileTagReport] = field(default_factory=list)

    def matches(self, kind: TagKind) -> List[TagMatch]:
        return {TagKind.TODO: self.todos, TagKind.FIXME: self.fixmes, TagKind.HACK: self.hacks}[kind]

    @property
    def total(self) -> int:
        return len(self.todos) + len(self.fixmes) + len(self.hacks)

    @property
    def file_count(self) -> int:
        return len(self.file_details)


@dataclass(frozen=True)
class FileTagCount:
    name: str
    path: str
    count: int
    todos: int
    fixmes: int
    hacks: int


@dataclass(frozen=True)
class TagSummary:
    total: int
    todos: int
    fixmes: int
    hacks: int
    file_count: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "todos": self.todos,
            "fixmes": self.fixmes,
            "hacks": self.hacks,
            "filesWithComments": self.file_count,
        }


def extract_comments(content: str, kind: TagKind) -> List[str]:
    """Return every comment text tagged with ``kind``, in file order."""
    comments = []
    for match in TAG_PATTERNS[kind].finditer(content):
        text = next((group for group in match.groups() if group), "")
        comments.append(text.strip())
    return comments


class TagScanner:
    """Scans source files for task markers and aggregates the results."""

    def __init__(self, extensions: Iterable[str] = SCAN_EXTENSIONS):
        self.extensions = frozenset(ext.lower() for ext in extensions)

    def is_scannable(self, file: FileEntry) -> bool:
        return os.path.splitext(file.name)[1].lower() in self.extensions

    def scan_file(self, file: FileEntry) -> FileTagReport:
        """
        Read one file and collect its tagged comments.

        Raises ``OSError`` or ``UnicodeDecodeError`` when the file cannot be
        read; callers decide whether to skip it.
        """
        with open(file.path, 'r', encoding='utf-8') as f:
            content = f.read()

        report = FileTagReport(path=file.path, name=file.name)
        for kind in TagKind:
            report.comments(kind).extend(extract_comments(content, kind))
        return report

    def scan_for_tags(self, files: Iterable[FileEntry]) -> TagScanResult:
        results = TagScanResult()

        for file in files:
            if not self.is_scannable(file):
                continue

            try:
                report = self.scan_file(file)
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping unreadable file %s: %s", file.path, e)
                continue

            if not report.has_matches:
                continue

            for kind in TagKind:
                results.matches(kind).extend(
                    TagMatch(file=file.name, kind=kind, comment=comment)
                    for comment in report.comments(kind)
                )
            results.file_details.append(report)

        return results


def scan_for_tags(files: Iterable[FileEntry]) -> TagScanResult:
    return TagScanner().scan_for_tags(files)


def top_files_by_tag_count(result: TagScanResult, limit: int = 5) -> List[FileTagCount]:
    """Files with the most tagged comments; ties keep their scan order."""
    counts = [
        FileTagCount(
            name=report.name,
            path=report.path,
            count=report.count,
            todos=len(report.todos),
            fixmes=len(report.fixmes),
            hacks=len(report.hacks),
        )
        for report in result.file_details
    ]
    counts.sort(key=lambda c: c.count, reverse=True)
    return counts[:max(limit, 0)]


def summarize(result: TagScanResult) -> TagSummary:
    return TagSummary(
        total=result.total,
        todos=len(result.todos),
        fixmes=len(result.fixmes),
        hacks=len(result.hacks),
        file_count=result.file_count,
    )
