"""
File Scanner
Recursively discovers project files and directories.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS = frozenset({'node_modules', '.git', 'dist', 'build', '.next', 'coverage'})
LARGEST_DIRS_EXCLUDED = frozenset({'node_modules', '.git', 'dist', 'build'})

LANGUAGE_MAP = {
    '.js': 'JavaScript',
    '.jsx': 'JavaScript (React)',
    '.ts': 'TypeScript',
    '.tsx': 'TypeScript (React)',
    '.py': 'Python',
    '.java': 'Java',
    '.cpp': 'C++',
    '.c': 'C',
    '.cs': 'C#',
    '.go': 'Go',
    '.rs': 'Rust',
    '.php': 'PHP',
    '.rb': 'Ruby',
    '.swift': 'Swift',
    '.kt': 'Kotlin',
    '.html': 'HTML',
    '.css': 'CSS',
    '.scss': 'SCSS',
    '.json': 'JSON',
    '.md': 'Markdown',
    '.yml': 'YAML',
    '.yaml': 'YAML',
}

DIRECTORY_DESCRIPTIONS = {
    'src': 'Source code',
    'components': 'UI components',
    'routes': 'API routes',
    'utils': 'Helper functions',
    'test': 'Test files',
    'tests': 'Test files',
    '__tests__': 'Test files',
    'public': 'Public assets',
    'assets': 'Static assets',
    'styles': 'Stylesheets',
    'lib': 'Library code',
    'config': 'Configuration files',
    'scripts': 'Build/utility scripts',
    'docs': 'Documentation',
    'bin': 'Executable files',
    'api': 'API endpoints',
    'pages': 'Page components',
    'models': 'Data models',
    'controllers': 'Controllers',
    'views': 'View templates',
    'middleware': 'Middleware functions',
}


@dataclass(frozen=True)
class FileEntry:
    """One regular file found during a scan."""
    path: str
    name: str
    size: int
    extension: str

    @classmethod
    def from_path(cls, path: str, size: int) -> "FileEntry":
        name = os.path.basename(path)
        return cls(path=path, name=name, size=size, extension=os.path.splitext(name)[1].lower())


@dataclass
class ScanResult:
    files: List[FileEntry] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)
    total_size: int = 0

    def merge(self, other: "ScanResult"):
        """Append a finished subtree result."""
        self.files.extend(other.files)
        self.directories.extend(other.directories)
        self.total_size += other.total_size


@dataclass(frozen=True)
class ScanOptions:
    exclude_dirs: FrozenSet[str] = DEFAULT_EXCLUDE_DIRS
    max_depth: Optional[int] = None  # None means unlimited


@dataclass(frozen=True)
class LanguageCount:
    language: str
    count: int


@dataclass(frozen=True)
class DirectorySize:
    name: str
    file_count: int
    size: int


@dataclass(frozen=True)
class TopLevelDirectory:
    name: str
    description: str


@dataclass(frozen=True)
class LargeFile:
    path: str
    name: str
    size: int
    size_formatted: str


class FileScanner:
    """
    Walks a directory tree depth-first and collects files and directories.

    Excluded directory names are never recorded nor descended into. With
    ``max_depth`` set, directories at that depth are recorded but not
    listed. Permission errors on a directory drop that subtree; a
    subdirectory that vanishes mid-scan is dropped the same way, while a
    missing root is reported to the caller. Any other ``OSError`` aborts
    the scan.
    """

    def __init__(self, root_path, options: Optional[ScanOptions] = None):
        self.root_path = os.fspath(root_path)
        self.options = options or ScanOptions()

    def scan(self) -> ScanResult:
        """Scan the whole tree below the root."""
        return self._scan_directory(self.root_path, depth=0)

    def _scan_directory(self, dir_path: str, depth: int) -> ScanResult:
        results = ScanResult()

        try:
            with os.scandir(dir_path) as it:
                entries = list(it)
        except PermissionError as e:
            logger.debug("Skipping unreadable directory %s: %s", dir_path, e)
            return results
        except FileNotFoundError:
            if depth == 0:
                raise
            logger.debug("Directory disappeared during scan: %s", dir_path)
            return results

        for entry in entries:
            full_path = os.path.join(dir_path, entry.name)

            if entry.is_dir(follow_symlinks=False):
                if entry.name in self.options.exclude_dirs:
                    continue

                results.directories.append(full_path)

                if self.options.max_depth is None or depth < self.options.max_depth:
                    results.merge(self._scan_directory(full_path, depth + 1))

            elif entry.is_file(follow_symlinks=False):
                try:
                    size = entry.stat(follow_symlinks=False).st_size
                except OSError as e:
                    logger.debug("Skipping file %s: %s", full_path, e)
                    continue
                results.files.append(FileEntry.from_path(full_path, size))
                results.total_size += size

        return results


def scan_directory(root_path, options: Optional[ScanOptions] = None) -> ScanResult:
    """Convenience wrapper around ``FileScanner(root_path, options).scan()``."""
    return FileScanner(root_path, options).scan()


def detect_languages(files: List[FileEntry]) -> List[LanguageCount]:
    """Count files per known language, most common first."""
    counts: Dict[str, int] = {}
    for file in files:
        language = LANGUAGE_MAP.get(file.extension.lower())
        if language:
            counts[language] = counts.get(language, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [LanguageCount(language, count) for language, count in ranked]


def get_largest_directories(root_path, limit: int = 5, options: Optional[ScanOptions] = None) -> List[DirectorySize]:
    """
    Rank top-level directories by the number of files they contain.

    ``options`` applies the caller's exclusions and depth limit, with
    ``max_depth`` still counted from ``root_path``.
    """
    options = options or ScanOptions()
    excluded = LARGEST_DIRS_EXCLUDED | options.exclude_dirs
    if options.max_depth is None:
        sub_options = options
    else:
        sub_options = replace(options, max_depth=options.max_depth - 1)
    root_path = os.fspath(root_path)

    try:
        with os.scandir(root_path) as it:
            entries = list(it)
    except OSError as e:
        logger.debug("Cannot list %s: %s", root_path, e)
        return []

    sizes = []
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False) or entry.name in excluded:
            continue
        if options.max_depth == 0:
            # recorded at the root but never entered
            sizes.append(DirectorySize(entry.name, 0, 0))
            continue
        sub = scan_directory(os.path.join(root_path, entry.name), sub_options)
        sizes.append(DirectorySize(entry.name, len(sub.files), sub.total_size))

    sizes.sort(key=lambda d: d.file_count, reverse=True)
    return sizes[:limit]


def get_top_level_directories(root_path) -> List[TopLevelDirectory]:
    """List visible top-level directories with a conventional description."""
    try:
        with os.scandir(os.fspath(root_path)) as it:
            entries = list(it)
    except OSError:
        return []

    return [
        TopLevelDirectory(entry.name, DIRECTORY_DESCRIPTIONS.get(entry.name, 'Project directory'))
        for entry in entries
        if entry.is_dir(follow_symlinks=False)
        and not entry.name.startswith('.')
        and entry.name != 'node_modules'
    ]


def get_largest_files(files: List[FileEntry], limit: int = 10, min_size: int = 100 * 1024) -> List[LargeFile]:
    big = sorted((f for f in files if f.size >= min_size), key=lambda f: f.size, reverse=True)
    return [LargeFile(f.path, f.name, f.size, format_bytes(f.size)) for f in big[:limit]]


def format_bytes(num_bytes: int) -> str:
    """Human-readable size, e.g. ``1.5 KB``."""
    if num_bytes == 0:
        return '0 Bytes'

    units = ['Bytes', 'KB', 'MB', 'GB']
    i = 0
    while i < len(units) - 1 and num_bytes >= 1024 ** (i + 1):
        i += 1
    value = '%.2f' % (num_bytes / (1024 ** i))
    return f"{value.rstrip('0').rstrip('.')} {units[i]}"


def count_file_lines(file_path) -> int:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError):
        return 0
    return len(content.split('\n'))
