"""
Dependency Parser
Reads package.json manifests and summarizes declared dependencies.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"


class ManifestNotFoundError(FileNotFoundError):
    pass


class ManifestParseError(ValueError):
    pass


@dataclass(frozen=True)
class Dependency:
    name: str
    version: str


@dataclass
class PackageManifest:
    name: Optional[str]
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    peer_dependencies: Dict[str, str] = field(default_factory=dict)
    scripts: Dict[str, str] = field(default_factory=dict)


@dataclass
class DependencySummary:
    dependencies: List[Dependency] = field(default_factory=list)
    dev_dependencies: List[Dependency] = field(default_factory=list)
    peer_dependencies: List[Dependency] = field(default_factory=list)

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)

    @property
    def dev_dependency_count(self) -> int:
        return len(self.dev_dependencies)

    @property
    def peer_dependency_count(self) -> int:
        return len(self.peer_dependencies)

    @property
    def total_count(self) -> int:
        return self.dependency_count + self.dev_dependency_count + self.peer_dependency_count


@dataclass(frozen=True)
class DependencyIssue:
    type: str  # 'warning' or 'info'
    message: str


def read_package_json(root_path: Path) -> Dict[str, Any]:
    """Parse ``package.json`` in ``root_path``."""
    manifest_path = Path(root_path) / MANIFEST_FILENAME
    try:
        content = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestNotFoundError(f"{MANIFEST_FILENAME} not found in {root_path}")

    try:
        data = json.loads(content)
    except ValueError as e:
        raise ManifestParseError(f"Failed to parse {MANIFEST_FILENAME}: {e}")

    if not isinstance(data, dict):
        raise ManifestParseError(f"Failed to parse {MANIFEST_FILENAME}: top level is not an object")
    return data


def has_package_json(root_path: Path) -> bool:
    return (Path(root_path) / MANIFEST_FILENAME).is_file()


def _string_map(value) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


def load_manifest(root_path: Path) -> Optional[PackageManifest]:
    """Return the parsed manifest, or ``None`` when it is missing or invalid."""
    try:
        data = read_package_json(root_path)
    except (OSError, ValueError) as e:
        logger.debug("No usable manifest in %s: %s", root_path, e)
        return None

    name = data.get("name")
    return PackageManifest(
        name=name if isinstance(name, str) and name else None,
        dependencies=_string_map(data.get("dependencies")),
        dev_dependencies=_string_map(data.get("devDependencies")),
        peer_dependencies=_string_map(data.get("peerDependencies")),
        scripts=_string_map(data.get("scripts")),
    )


def get_project_name(root_path: Path) -> str:
    manifest = load_manifest(root_path)
    if manifest and manifest.name:
        return manifest.name
    return Path(root_path).resolve().name


def get_dependencies_summary(root_path: Path) -> DependencySummary:
    manifest = load_manifest(root_path)
    if manifest is None:
        return DependencySummary()

    def as_list(deps: Dict[str, str]) -> List[Dependency]:
        return [Dependency(name, version) for name, version in deps.items()]

    return DependencySummary(
        dependencies=as_list(manifest.dependencies),
        dev_dependencies=as_list(manifest.dev_dependencies),
        peer_dependencies=as_list(manifest.peer_dependencies),
    )


def get_scripts(root_path: Path) -> Dict[str, str]:
    manifest = load_manifest(root_path)
    return manifest.scripts if manifest else {}


def has_scripts(root_path: Path) -> bool:
    return bool(get_scripts(root_path))


def analyze_dependency_health(root_path: Path) -> List[DependencyIssue]:
    summary = get_dependencies_summary(root_path)
    issues = []

    if summary.total_count > 50:
        issues.append(DependencyIssue(
            type="warning",
            message=f"Large number of dependencies detected ({summary.total_count}). "
                    "Consider reviewing if all are necessary.",
        ))

    if summary.total_count == 0:
        issues.append(DependencyIssue(
            type="info",
            message="No dependencies found. This might be a minimal project or dependencies are not tracked.",
        ))

    return issues
