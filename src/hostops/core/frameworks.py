"""Framework detection for a local source tree.

Detection is a pure function of a FileSystem. Runtimes are identified by
marker files, and frameworks by required files and declared dependencies.
Every file check goes through the filesystem abstraction, so a RepositoryFileSystem
answers repeated questions about the same file from memory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable

from hostops.core.discovery import FileSystem, read_or_none

logger = logging.getLogger(__name__)

NODEJS = "nodejs"
PYTHON = "python"

_RUNTIME_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (NODEJS, ("package.json",)),
    (PYTHON, ("requirements.txt", "pyproject.toml")),
)


@dataclass(frozen=True)
class FrameworkSpec:
    """
    Describes how to recognize a framework.

    Attributes:
        id: Framework identifier.
        runtime: Runtime the framework runs on.
        required_files: Paths that must all exist.
        required_dependencies: Packages that must all be declared.
        embeds_frameworks: Framework ids this one builds upon; they are
            dropped from the results when this framework matches.
    """

    id: str
    runtime: str
    required_files: tuple[str, ...] = ()
    required_dependencies: tuple[str, ...] = ()
    embeds_frameworks: tuple[str, ...] = ()

    def matches(self, fs: FileSystem, dependencies: set[str]) -> bool:
        """Return True if all required files and dependencies are present."""
        if not all(dep in dependencies for dep in self.required_dependencies):
            return False
        return all(fs.exists(path) for path in self.required_files)


@dataclass(frozen=True)
class FrameworkMatch:
    """A framework detected in the tree."""

    id: str
    runtime: str


FRAMEWORK_SPECS: tuple[FrameworkSpec, ...] = (
    FrameworkSpec(id="express", runtime=NODEJS, required_dependencies=("express",)),
    FrameworkSpec(id="react", runtime=NODEJS, required_dependencies=("react",)),
    FrameworkSpec(
        id="nextjs",
        runtime=NODEJS,
        required_dependencies=("next",),
        embeds_frameworks=("react",),
    ),
    FrameworkSpec(
        id="angular",
        runtime=NODEJS,
        required_files=("angular.json",),
        required_dependencies=("@angular/core",),
    ),
    FrameworkSpec(
        id="astro",
        runtime=NODEJS,
        required_dependencies=("astro",),
        embeds_frameworks=("react",),
    ),
    FrameworkSpec(id="flask", runtime=PYTHON, required_dependencies=("flask",)),
    FrameworkSpec(id="django", runtime=PYTHON, required_files=("manage.py",)),
)


def detect_runtime(fs: FileSystem) -> str | None:
    """Return the first runtime whose marker file exists, or None."""
    for runtime, markers in _RUNTIME_MARKERS:
        if any(fs.exists(marker) for marker in markers):
            return runtime
    return None


def _node_dependencies(fs: FileSystem) -> set[str]:
    raw = read_or_none(fs, "package.json")
    if raw is None:
        return set()
    try:
        manifest = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring unparseable package.json: %s", exc)
        return set()
    if not isinstance(manifest, dict):
        return set()
    deps: set[str] = set()
    for section in ("dependencies", "devDependencies"):
        section_deps = manifest.get(section)
        if isinstance(section_deps, dict):
            deps.update(section_deps.keys())
    return deps


def _python_dependencies(fs: FileSystem) -> set[str]:
    raw = read_or_none(fs, "requirements.txt")
    if raw is None:
        return set()
    deps: set[str] = set()
    for line in raw.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        name = line
        for sep in ("[", "=", "<", ">", "~", "!", ";", " "):
            name = name.split(sep, 1)[0]
        if name:
            deps.add(name.lower())
    return deps


def discover(
    fs: FileSystem, specs: Iterable[FrameworkSpec] = FRAMEWORK_SPECS
) -> list[FrameworkMatch]:
    """
    Detect the frameworks used in a source tree.

    Args:
        fs: Filesystem rooted at the source tree.
        specs: Framework specs to try.

    Returns:
        The matching frameworks for the detected runtime, minus any framework
        embedded by another match. Empty if no runtime is detected.
    """
    runtime = detect_runtime(fs)
    if runtime is None:
        return []

    if runtime == NODEJS:
        dependencies = _node_dependencies(fs)
    else:
        dependencies = _python_dependencies(fs)

    matched = [
        spec
        for spec in specs
        if spec.runtime == runtime and spec.matches(fs, dependencies)
    ]
    embedded = {fid for spec in matched for fid in spec.embeds_frameworks}
    return [
        FrameworkMatch(id=spec.id, runtime=spec.runtime)
        for spec in matched
        if spec.id not in embedded
    ]
