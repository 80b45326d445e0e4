"""
Git Activity
Read-only queries against a local git repository via the git CLI.
"""

import logging
import re
import subprocess
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

_STAT_LINE_RE = re.compile(r"^\s*(.+?)\s*\|\s*(\d+)\s*([+-]+)?$")
_STAT_SUMMARY_RE = re.compile(r"(\d+)\s+insertions?\(\+\)(?:,\s*(\d+)\s+deletions?\(-\))?")
_FIELD_SEP = "\x1f"


class GitCommandError(RuntimeError):
    pass


class NotAGitRepositoryError(RuntimeError):
    def __init__(self, message: str = "Not a Git repository. Please run this command in a Git repository."):
        super().__init__(message)


@dataclass(frozen=True)
class CommitInfo:
    hash: str
    message: str
    author: str
    date: datetime

    def to_dict(self):
        return {
            "hash": self.hash,
            "message": self.message,
            "author": self.author,
            "date": self.date.isoformat(),
        }


@dataclass
class DiffStat:
    files: List[str] = field(default_factory=list)
    additions: int = 0
    deletions: int = 0

    def to_dict(self):
        return {"files": list(self.files), "additions": self.additions, "deletions": self.deletions}


@dataclass
class GitSnapshot:
    """Git facts collected together for the dashboard and report."""
    current_branch: str
    commits_today: int
    commits_this_week: int
    last_commit: Optional[CommitInfo]
    last_commit_files: DiffStat = field(default_factory=DiffStat)
    most_modified: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self):
        return {
            "currentBranch": self.current_branch,
            "commitsToday": self.commits_today,
            "commitsThisWeek": self.commits_this_week,
            "lastCommit": self.last_commit.to_dict() if self.last_commit else None,
            "lastCommitFiles": self.last_commit_files.to_dict(),
        }


def parse_diff_stat(output: str) -> DiffStat:
    """
    Parse ``git show --stat`` output.

    Lines like ``src/app.py | 10 +++++-----`` contribute a file name and their
    +/- markers. A summary line (``3 insertions(+), 2 deletions(-)``) replaces
    the marker counts when present, since long stat bars are scaled.
    """
    stat = DiffStat()

    for line in output.split("\n"):
        match = _STAT_LINE_RE.match(line)
        if match:
            stat.files.append(match.group(1).strip())
            symbols = match.group(3) or ""
            stat.additions += symbols.count("+")
            stat.deletions += symbols.count("-")

    summary = _STAT_SUMMARY_RE.search(output)
    if summary:
        stat.additions = int(summary.group(1) or 0)
        stat.deletions = int(summary.group(2) or 0)

    return stat


class GitRepository:
    """Wraps ``git -C <root>`` invocations for one working tree."""

    def __init__(self, root: Path, timeout_seconds: float = 10.0):
        self.root = Path(root)
        self.timeout_seconds = timeout_seconds

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ["git", "-C", str(self.root), *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise GitCommandError(f"git {' '.join(args)} failed: {e}")

    def _output(self, args: List[str]) -> str:
        proc = self._run(args)
        if proc.returncode != 0:
            raise GitCommandError(f"git {' '.join(args)} failed: {proc.stderr.strip()}")
        return proc.stdout

    def _has_commits(self) -> bool:
        try:
            return self._run(["rev-parse", "--verify", "--quiet", "HEAD"]).returncode == 0
        except GitCommandError:
            return False

    def is_repository(self) -> bool:
        try:
            proc = self._run(["rev-parse", "--is-inside-work-tree"])
        except GitCommandError as e:
            logger.debug("git unavailable: %s", e)
            return False
        return proc.returncode == 0 and proc.stdout.strip() == "true"

    def require_repository(self):
        if not self.is_repository():
            raise NotAGitRepositoryError()

    def repo_root(self) -> Path:
        return Path(self._output(["rev-parse", "--show-toplevel"]).strip())

    def current_branch(self) -> str:
        branch = self._output(["branch", "--show-current"]).strip()
        if branch:
            return branch
        # detached HEAD
        return self._output(["rev-parse", "--short", "HEAD"]).strip()

    def commit_count(self, since: str) -> int:
        if not self._has_commits():
            return 0
        return int(self._output(["rev-list", "--count", f"--since={since}", "HEAD"]).strip() or 0)

    def commits_today(self) -> int:
        return self.commit_count("midnight")

    def commits_this_week(self) -> int:
        return self.commit_count("1 week ago")

    def last_commit(self) -> Optional[CommitInfo]:
        if not self._has_commits():
            return None
        fmt = _FIELD_SEP.join(["%H", "%s", "%an", "%aI"])
        out = self._output(["log", "-1", f"--pretty=format:{fmt}"]).strip("\n")
        commit_hash, message, author, date = out.split(_FIELD_SEP, 3)
        return CommitInfo(
            hash=commit_hash,
            message=message,
            author=author,
            date=datetime.fromisoformat(date),
        )

    def last_commit_files(self) -> DiffStat:
        commit = self.last_commit()
        if commit is None:
            return DiffStat()
        return parse_diff_stat(self._output(["show", "--stat", "--format=", commit.hash]))

    def most_modified_files(self, limit: int = 10) -> List[Tuple[str, int]]:
        """Files touched by the most commits, most active first."""
        try:
            out = self._output(["log", "--name-only", "--pretty=format:"])
        except GitCommandError as e:
            logger.debug("Cannot read history in %s: %s", self.root, e)
            return []

        counts = Counter(line for line in out.split("\n") if line.strip())
        return counts.most_common(limit)
