from datetime import datetime

import pytest

from analyzers.git_activity import (
    GitRepository,
    GitSnapshot,
    NotAGitRepositoryError,
    parse_diff_stat,
)
from conftest import commit_all, git, requires_git, write_files

STAT_OUTPUT = """\
 src/app.js   | 10 +++++++---
 README.md    |  2 +-
 2 files changed, 8 insertions(+), 4 deletions(-)
"""


def test_parse_diff_stat_prefers_summary_counts():
    stat = parse_diff_stat(STAT_OUTPUT)

    assert stat.files == ["src/app.js", "README.md"]
    assert (stat.additions, stat.deletions) == (8, 4)


def test_parse_diff_stat_counts_markers_without_summary():
    stat = parse_diff_stat(" a.py | 3 ++-\n b.py | 1 -\n")

    assert stat.files == ["a.py", "b.py"]
    assert (stat.additions, stat.deletions) == (2, 2)


def test_parse_diff_stat_insertions_only():
    stat = parse_diff_stat(" a.py | 2 ++\n 1 file changed, 2 insertions(+)\n")

    assert (stat.additions, stat.deletions) == (2, 0)


def test_parse_diff_stat_empty():
    stat = parse_diff_stat("")

    assert stat.files == [] and stat.additions == 0 and stat.deletions == 0


def test_snapshot_to_dict():
    snapshot = GitSnapshot("main", 1, 2, None)

    assert snapshot.to_dict() == {
        "currentBranch": "main",
        "commitsToday": 1,
        "commitsThisWeek": 2,
        "lastCommit": None,
        "lastCommitFiles": {"files": [], "additions": 0, "deletions": 0},
    }


@requires_git
def test_not_a_repository(tmp_path):
    repo = GitRepository(tmp_path)

    assert not repo.is_repository()
    with pytest.raises(NotAGitRepositoryError):
        repo.require_repository()


@requires_git
def test_empty_repository(git_repo):
    repo = GitRepository(git_repo)

    assert repo.is_repository()
    assert repo.current_branch() == "main"
    assert repo.commits_today() == 0
    assert repo.last_commit() is None
    assert repo.last_commit_files().files == []
    assert repo.most_modified_files() == []


@requires_git
def test_history_queries(git_repo):
    write_files(git_repo, {"a.py": "one\n", "b.py": "x\n"})
    commit_all(git_repo, "first commit")
    write_files(git_repo, {"a.py": "one\ntwo\nthree\n"})
    commit_all(git_repo, "second commit")

    repo = GitRepository(git_repo)

    assert repo.repo_root().resolve() == git_repo.resolve()
    assert repo.commits_this_week() == 2

    last = repo.last_commit()
    assert last.message == "second commit"
    assert last.author == "Dev Tester"
    assert isinstance(last.date, datetime)
    assert len(last.hash) == 40

    stat = repo.last_commit_files()
    assert stat.files == ["a.py"]
    assert (stat.additions, stat.deletions) == (2, 0)

    assert repo.most_modified_files(10) == [("a.py", 2), ("b.py", 1)]
    assert repo.most_modified_files(1) == [("a.py", 2)]


@requires_git
def test_detached_head_reports_short_hash(git_repo):
    write_files(git_repo, {"a.txt": "1"})
    commit_all(git_repo, "only")
    git(git_repo, "checkout", "-q", "--detach")

    branch = GitRepository(git_repo).current_branch()

    assert branch and branch != "main"
