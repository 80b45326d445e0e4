"""
Insights
Combines git history, file sizes and task markers into refactor hints.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from analyzers.tag_scanner import FileTagCount, TagScanResult
from core.scanner import LargeFile

VERY_LARGE_FILE = 500 * 1024
LARGE_FILE = 200 * 1024
REFACTOR_SIZE = 300 * 1024
HIGH_TAG_COUNT = 5


@dataclass(frozen=True)
class RefactorCandidate:
    file: str
    reason: str
    severity: str  # 'high' or 'medium'


def modification_insight(count: int) -> Tuple[str, str]:
    """(level, text) for how often a file was edited."""
    if count > 50:
        return "high", "Frequently edited - consider refactoring"
    if count > 20:
        return "medium", "Active development area"
    return "ok", "Normal activity"


def size_insight(size: int) -> Tuple[str, str]:
    if size > VERY_LARGE_FILE:
        return "high", "Very large - consider splitting"
    if size > LARGE_FILE:
        return "medium", "Large file - review if needed"
    return "ok", "Acceptable size"


def find_refactor_candidates(
    top_tag_files: Sequence[FileTagCount],
    largest_files: Sequence[LargeFile],
    most_modified: Sequence[Tuple[str, int]],
) -> List[RefactorCandidate]:
    candidates: List[RefactorCandidate] = []

    def already_added(name: str) -> bool:
        return any(c.file == name for c in candidates)

    for item in top_tag_files:
        if item.count >= HIGH_TAG_COUNT:
            candidates.append(RefactorCandidate(item.name, f"High TODO count ({item.count})", "high"))

    # git reports repository-relative paths; compare on base names
    modified_names = {path.split("/")[-1] for path, _ in most_modified}
    for large in largest_files:
        if large.name in modified_names and not already_added(large.name):
            candidates.append(RefactorCandidate(large.name, "Large and frequently edited", "high"))

    for large in largest_files:
        if large.size > REFACTOR_SIZE and not already_added(large.name):
            candidates.append(RefactorCandidate(large.name, f"Very large file ({large.size_formatted})", "medium"))

    return candidates


def build_suggestions(
    most_modified: Sequence[Tuple[str, int]],
    largest_files: Sequence[LargeFile],
    tag_result: TagScanResult,
    top_tag_files: Sequence[FileTagCount],
    candidates: Sequence[RefactorCandidate],
) -> List[str]:
    suggestions = []

    if most_modified and most_modified[0][1] > 50:
        path, count = most_modified[0]
        suggestions.append(f'Consider refactoring "{path}" - it has been modified {count} times')

    if largest_files and largest_files[0].size > VERY_LARGE_FILE:
        top = largest_files[0]
        suggestions.append(
            f'"{top.name}" is very large ({top.size_formatted}) - consider splitting into smaller modules')

    if tag_result.total > 20:
        suggestions.append(
            f"You have {tag_result.total} TODO comments - consider addressing them or creating issues")

    if top_tag_files and top_tag_files[0].count >= HIGH_TAG_COUNT:
        top = top_tag_files[0]
        suggestions.append(f'"{top.name}" has {top.count} TODO comments - this file may need attention')

    if len(candidates) >= 3:
        suggestions.append("Multiple files identified as refactor candidates - consider a code review session")

    return suggestions
