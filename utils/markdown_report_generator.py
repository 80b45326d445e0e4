"""
Markdown Report Generator
Renders the collected repository analysis as a single Markdown document.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from analyzers.dependency_parser import Dependency, DependencySummary
from analyzers.git_activity import GitSnapshot
from analyzers.insights import LARGE_FILE, VERY_LARGE_FILE
from analyzers.tag_scanner import FileTagCount, TagScanResult, summarize
from core.scanner import (
    DirectorySize,
    LanguageCount,
    LargeFile,
    ScanResult,
    TopLevelDirectory,
    format_bytes,
)


@dataclass
class ReportData:
    project_name: str
    scan: ScanResult
    tags: TagScanResult
    languages: List[LanguageCount] = field(default_factory=list)
    largest_directories: List[DirectorySize] = field(default_factory=list)
    top_level_directories: List[TopLevelDirectory] = field(default_factory=list)
    dependencies: Optional[DependencySummary] = None
    largest_files: List[LargeFile] = field(default_factory=list)
    top_tag_files: List[FileTagCount] = field(default_factory=list)
    git: Optional[GitSnapshot] = None
    health_checks: List[Tuple[str, bool]] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)
    todo_list_limit: int = 10


class MarkdownReportGenerator:
    """
    Generates the DevInsight Markdown report.
    """

    def generate(self, data: ReportData, output_path: Path):
        """
        Generate the report and write it to ``output_path``.
        """
        markdown = self.build_markdown(data)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(markdown)

    def build_markdown(self, data: ReportData) -> str:
        sections = [
            self._render_header(data),
            self._render_toc(data),
            self._render_overview(data),
            self._render_structure(data),
            self._render_git(data),
            self._render_insights(data),
            self._render_tasks(data),
            self._render_health(data),
            "---\n\n*Report generated by DevInsight CLI*\n",
        ]
        return "".join(sections)

    def _render_header(self, data: ReportData) -> str:
        return (
            "# DevInsight Report\n\n"
            f"**Project:** {data.project_name}\n\n"
            f"**Generated:** {data.generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n\n"
            "---\n\n"
        )

    def _render_toc(self, data: ReportData) -> str:
        entries = ["[Project Overview](#project-overview)", "[Repository Structure](#repository-structure)"]
        if data.git:
            entries += [
                "[Git Activity](#git-activity)",
                "[Developer Dashboard](#developer-dashboard)",
                "[Smart Insights](#smart-insights)",
            ]
        entries += ["[Task Detection](#task-detection)", "[Health Check](#health-check)"]

        md = "## Table of Contents\n\n"
        for i, entry in enumerate(entries, 1):
            md += f"{i}. {entry}\n"
        return md + "\n---\n\n"

    def _render_overview(self, data: ReportData) -> str:
        md = "## Project Overview\n\n### Statistics\n\n"
        md += "| Metric | Value |\n|--------|-------|\n"
        md += f"| Total Files | {len(data.scan.files)} |\n"
        md += f"| Total Directories | {len(data.scan.directories)} |\n"
        md += f"| Total Size | {format_bytes(data.scan.total_size)} |\n"
        if data.dependencies:
            md += f"| Total Dependencies | {data.dependencies.total_count} |\n"
        md += "\n"

        if data.languages:
            md += "### Programming Languages\n\n| Language | Files |\n|----------|-------|\n"
            for lang in data.languages:
                md += f"| {lang.language} | {lang.count} |\n"
            md += "\n"

        if data.largest_directories:
            md += "### Largest Directories\n\n| Directory | Files | Size |\n|-----------|-------|------|\n"
            for d in data.largest_directories:
                md += f"| {d.name} | {d.file_count} | {format_bytes(d.size)} |\n"
            md += "\n"

        return md

    def _render_dependency_table(self, title: str, deps: List[Dependency], limit: int = 15) -> str:
        if not deps:
            return ""
        md = f"#### {title} ({len(deps)})\n\n| Package | Version |\n|---------|----------|\n"
        for dep in deps[:limit]:
            md += f"| {dep.name} | {dep.version} |\n"
        if len(deps) > limit:
            md += f"\n*... and {len(deps) - limit} more*\n"
        return md + "\n"

    def _render_structure(self, data: ReportData) -> str:
        md = "## Repository Structure\n\n"

        if data.top_level_directories:
            md += "### Top-Level Directories\n\n| Directory | Description |\n|-----------|-------------|\n"
            for d in data.top_level_directories:
                md += f"| `{d.name}` | {d.description} |\n"
            md += "\n"

        deps = data.dependencies
        if deps and deps.total_count > 0:
            md += f"### Dependencies\n\n**Total:** {deps.total_count}\n\n"
            md += self._render_dependency_table("Main Dependencies", deps.dependencies)
            md += self._render_dependency_table("Dev Dependencies", deps.dev_dependencies)

        return md

    def _render_git(self, data: ReportData) -> str:
        git = data.git
        if not git:
            return ""

        md = "## Git Activity\n\n| Metric | Value |\n|--------|-------|\n"
        md += f"| Current Branch | {git.current_branch} |\n"
        md += f"| Commits Today | {git.commits_today} |\n"
        md += f"| Commits This Week | {git.commits_this_week} |\n"
        if git.last_commit:
            md += f"| Last Commit | {git.last_commit.message} |\n"
            md += f"| Last Commit Author | {git.last_commit.author} |\n"
            md += f"| Last Commit Date | {git.last_commit.date.strftime('%Y-%m-%d %H:%M:%S')} |\n"
        md += "\n"

        md += "## Developer Dashboard\n\n### Activity Summary\n\n"
        md += f"- **Current Branch:** {git.current_branch}\n"
        md += f"- **Commits Today:** {git.commits_today}\n"
        md += f"- **Commits This Week:** {git.commits_this_week}\n\n"
        return md

    def _render_insights(self, data: ReportData) -> str:
        md = ""

        if data.git and data.git.most_modified:
            md += "## Smart Insights\n\n### Most Frequently Modified Files\n\n"
            md += "| File | Edit Count | Status |\n|------|------------|--------|\n"
            for path, count in data.git.most_modified:
                status = "✓ Normal"
                if count > 50:
                    status = "Very Active"
                elif count > 20:
                    status = "Active"
                md += f"| {path} | {count} | {status} |\n"
            md += "\n"

        if data.largest_files:
            md += "### Largest Files\n\n| File | Size | Status |\n|------|------|--------|\n"
            for f in data.largest_files:
                status = "✓ OK"
                if f.size > VERY_LARGE_FILE:
                    status = "Very Large"
                elif f.size > LARGE_FILE:
                    status = "Large"
                md += f"| {f.name} | {f.size_formatted} | {status} |\n"
            md += "\n"

        return md

    def _render_tasks(self, data: ReportData) -> str:
        summary = summarize(data.tags)

        md = "## Task Detection\n\n### Summary\n\n| Type | Count |\n|------|-------|\n"
        md += f"| TODO | {summary.todos} |\n"
        md += f"| FIXME | {summary.fixmes} |\n"
        md += f"| HACK | {summary.hacks} |\n"
        md += f"| **Total** | **{summary.total}** |\n\n"
        md += f"**Files with Tasks:** {summary.file_count}\n\n"

        if data.top_tag_files:
            md += "### Files with Most Tasks\n\n"
            md += "| File | TODO | FIXME | HACK | Total |\n|------|------|-------|------|-------|\n"
            for f in data.top_tag_files:
                md += f"| {f.name} | {f.todos} | {f.fixmes} | {f.hacks} | {f.count} |\n"
            md += "\n"

        if data.tags.todos:
            md += "### Recent TODOs\n\n"
            for todo in data.tags.todos[:data.todo_list_limit]:
                md += f"- **[{todo.file}]** {todo.comment}\n"
            md += "\n"

        return md

    def _recommendations(self, data: ReportData) -> List[str]:
        checks = dict(data.health_checks)
        recs = []

        if not checks.get("README file", True):
            recs.append("Add a README.md file to document your project")
        if not checks.get("Test directory", True):
            recs.append("Add tests to improve code quality")
        if not checks.get(".gitignore", True) and data.git:
            recs.append("Add .gitignore to exclude unnecessary files")
        if not checks.get("License file", True):
            recs.append("Add a LICENSE file to specify usage rights")
        if data.dependencies and data.dependencies.total_count > 50:
            recs.append("Review and audit dependencies")
        if data.tags.total > 20:
            recs.append("Address TODO comments or convert them to issues")
        if data.largest_files and data.largest_files[0].size > VERY_LARGE_FILE:
            recs.append(f"Consider splitting large files like {data.largest_files[0].name}")

        return recs

    def _render_health(self, data: ReportData) -> str:
        md = "## Health Check\n\n| Check | Status |\n|-------|--------|\n"
        for name, passed in data.health_checks:
            md += f"| {name} | {'✓ Pass' if passed else '✗ Fail'} |\n"
        md += "\n### Recommendations\n\n"

        recs = self._recommendations(data)
        if recs:
            for i, rec in enumerate(recs, 1):
                md += f"{i}. {rec}\n"
        else:
            md += "✓ Your repository is in good shape!\n"

        return md + "\n"
