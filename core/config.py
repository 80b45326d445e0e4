"""
Analyzer Configuration
Defaults in code, optionally overridden by a project-local JSON file.
"""

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, FrozenSet, Optional

from core.scanner import DEFAULT_EXCLUDE_DIRS, ScanOptions

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".devinsight.json"


@dataclass(frozen=True)
class AnalyzerConfig:
    exclude_dirs: FrozenSet[str] = DEFAULT_EXCLUDE_DIRS
    max_depth: Optional[int] = None
    report_filename: str = "devinsight-report.md"
    git_timeout_seconds: float = 10.0
    largest_files_min_size: int = 50 * 1024
    todo_list_limit: int = 10

    def scan_options(self) -> ScanOptions:
        return ScanOptions(exclude_dirs=self.exclude_dirs, max_depth=self.max_depth)

    def with_overrides(self, **overrides) -> "AnalyzerConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "exclude_dirs" in changes:
            changes["exclude_dirs"] = frozenset(changes["exclude_dirs"])
        return replace(self, **changes)


def _coerce(name: str, value):
    """Validate one raw JSON value, returning None when it is unusable."""
    if name == "exclude_dirs":
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return frozenset(value)
        return None
    if name == "max_depth":
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
        return None
    if name == "report_filename":
        return value if isinstance(value, str) and value else None
    if name == "git_timeout_seconds":
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            return float(value)
        return None
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


def load_config(root: Path) -> AnalyzerConfig:
    """
    Load ``.devinsight.json`` from the project root.

    Missing, unreadable or malformed files give the defaults. Unknown keys are
    ignored and badly typed values are skipped with a warning.
    """
    config_path = Path(root) / CONFIG_FILENAME
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return AnalyzerConfig()
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return AnalyzerConfig()

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level must be an object", config_path)
        return AnalyzerConfig()

    known = {f.name for f in fields(AnalyzerConfig)}
    values: Dict[str, object] = {}
    for key, raw in data.items():
        if key not in known:
            continue
        value = _coerce(key, raw)
        if value is None:
            logger.warning("Ignoring invalid value for %r in %s", key, config_path)
            continue
        values[key] = value

    return AnalyzerConfig(**values)
