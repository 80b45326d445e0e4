"""
Health Checker
Repository hygiene checks with an overall health score.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from analyzers.dependency_parser import get_dependencies_summary, has_package_json, has_scripts
from core.scanner import ScanResult

LARGE_FILE_BYTES = 1024 * 1024

README_FILES = ["README.md", "README.txt", "readme.md"]
TEST_DIRS = ["test", "tests", "__tests__", "spec"]
LICENSE_FILES = ["LICENSE", "LICENSE.md", "LICENSE.txt", "license.md"]
DOCS_DIRS = ["docs", "documentation", "doc"]
CI_PATHS = [".github/workflows", ".gitlab-ci.yml", ".travis.yml", "azure-pipelines.yml", "Jenkinsfile"]


@dataclass(frozen=True)
class HealthWarning:
    type: str  # 'error', 'warning' or 'info'
    message: str
    suggestion: str


@dataclass
class HealthReport:
    passed: List[str] = field(default_factory=list)
    warnings: List[HealthWarning] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def total_checks(self) -> int:
        return len(self.passed) + len(self.warnings)

    @property
    def score(self) -> int:
        """Percentage of passed checks, rounded half up."""
        if self.total_checks == 0:
            return 0
        return int(len(self.passed) * 100 / self.total_checks + 0.5)


def file_exists(root: Path, names: Iterable[str]) -> bool:
    return any((root / name).exists() for name in names)


def directory_exists(root: Path, names: Iterable[str]) -> bool:
    return any((root / name).is_dir() for name in names)


class HealthChecker:
    """Runs the repository checks against one project root."""

    def __init__(self, root: Path, is_git: bool, scan_result: Optional[ScanResult] = None):
        self.root = Path(root)
        self.is_git = is_git
        self.scan_result = scan_result

    def run(self) -> HealthReport:
        report = HealthReport()

        if self.is_git:
            report.passed.append("Git repository initialized")
        else:
            report.warnings.append(HealthWarning("error", "Not a Git repository", "Initialize Git with: git init"))

        if file_exists(self.root, README_FILES):
            report.passed.append("README file exists")
        else:
            report.warnings.append(HealthWarning(
                "warning", "Missing README file", "Add a README.md to document your project"))

        if directory_exists(self.root, TEST_DIRS):
            report.passed.append("Test directory exists")
        else:
            report.warnings.append(HealthWarning(
                "warning", "No test directory detected", "Consider adding tests to improve code quality"))

        self._check_manifest(report)
        self._check_large_files(report)

        has_gitignore = file_exists(self.root, [".gitignore"])
        if has_gitignore:
            report.passed.append(".gitignore file exists")
        elif self.is_git:
            report.warnings.append(HealthWarning(
                "warning", "Missing .gitignore file", "Add .gitignore to exclude unnecessary files from Git"))

        if file_exists(self.root, LICENSE_FILES):
            report.passed.append("License file exists")
        else:
            report.suggestions.append("Consider adding a LICENSE file to specify usage rights")

        if directory_exists(self.root, DOCS_DIRS):
            report.passed.append("Documentation directory exists")

        if file_exists(self.root, CI_PATHS):
            report.passed.append("CI/CD configuration detected")
        else:
            report.suggestions.append("Consider setting up CI/CD for automated testing and deployment")

        return report

    def _check_manifest(self, report: HealthReport):
        if not has_package_json(self.root):
            report.warnings.append(HealthWarning("warning", "No package.json found", "Initialize with: npm init"))
            return

        report.passed.append("package.json exists")

        if has_scripts(self.root):
            report.passed.append("package.json has scripts defined")
        else:
            report.warnings.append(HealthWarning(
                "info", "package.json missing scripts section",
                "Add npm scripts for common tasks (test, build, start)"))

        total = get_dependencies_summary(self.root).total_count
        if total > 100:
            report.warnings.append(HealthWarning(
                "warning", f"Large number of dependencies ({total})",
                "Review dependencies and remove unused packages"))
        elif total > 50:
            report.suggestions.append(f"You have {total} dependencies - consider periodic audits")
        else:
            report.passed.append("Dependency count is reasonable")

    def _check_large_files(self, report: HealthReport):
        if self.scan_result is None:
            return
        large = [f for f in self.scan_result.files if f.size > LARGE_FILE_BYTES]
        if large:
            report.warnings.append(HealthWarning(
                "warning", f"{len(large)} large file(s) detected (>1MB)",
                "Consider using Git LFS for large files or optimizing them"))
        else:
            report.passed.append("No excessively large files detected")

    def basic_checks(self) -> List[Tuple[str, bool]]:
        """Pass/fail rows used by the Markdown report."""
        return [
            ("README file", file_exists(self.root, ["README.md", "README.txt"])),
            ("Test directory", directory_exists(self.root, ["test", "tests", "__tests__"])),
            ("package.json", has_package_json(self.root)),
            (".gitignore", file_exists(self.root, [".gitignore"])),
            ("License file", file_exists(self.root, ["LICENSE", "LICENSE.md"])),
        ]
