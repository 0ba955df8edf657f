import json
from pathlib import Path

from hostops.core.discovery import RepositoryFileSystem
from hostops.core.frameworks import FrameworkMatch, detect_runtime, discover


def _write_package_json(root: Path, deps: dict, dev_deps: dict | None = None) -> None:
    manifest = {"name": "web", "dependencies": deps}
    if dev_deps:
        manifest["devDependencies"] = dev_deps
    (root / "package.json").write_text(json.dumps(manifest))


def test_discover_nextjs_hides_embedded_react(tmp_path):
    _write_package_json(tmp_path, {"next": "14.0.0", "react": "18.2.0"})

    assert discover(RepositoryFileSystem(tmp_path)) == [
        FrameworkMatch(id="nextjs", runtime="nodejs")
    ]


def test_discover_reads_dev_dependencies(tmp_path):
    _write_package_json(tmp_path, {}, {"express": "4.18.0"})

    assert [m.id for m in discover(RepositoryFileSystem(tmp_path))] == ["express"]


def test_discover_requires_framework_files(tmp_path):
    _write_package_json(tmp_path, {"@angular/core": "17.0.0"})
    fs = RepositoryFileSystem(tmp_path)

    assert discover(fs) == []

    (tmp_path / "angular.json").write_text("{}")
    assert [m.id for m in discover(RepositoryFileSystem(tmp_path))] == ["angular"]


def test_discover_python_requirements(tmp_path):
    (tmp_path / "requirements.txt").write_text("# web\nFlask[async]>=3.0\ngunicorn==21.2\n")

    fs = RepositoryFileSystem(tmp_path)

    assert detect_runtime(fs) == "python"
    assert discover(fs) == [FrameworkMatch(id="flask", runtime="python")]


def test_discover_without_runtime_returns_nothing(tmp_path):
    (tmp_path / "README.md").write_text("hello")

    assert discover(RepositoryFileSystem(tmp_path)) == []


def test_discover_ignores_broken_package_json(tmp_path):
    (tmp_path / "package.json").write_text("{not json")

    assert discover(RepositoryFileSystem(tmp_path)) == []


def test_discover_skips_non_object_dependency_sections(tmp_path):
    (tmp_path / "package.json").write_text(
        json.dumps({"dependencies": ["express"], "devDependencies": "next"})
    )

    assert discover(RepositoryFileSystem(tmp_path)) == []


def test_discover_tolerates_non_utf8_manifest(tmp_path):
    (tmp_path / "package.json").write_bytes(
        b'{"description": "caf\xe9", "dependencies": {"express": "4.18.0"}}'
    )

    assert [m.id for m in discover(RepositoryFileSystem(tmp_path))] == ["express"]


def test_repeated_discovery_reads_manifest_once(tmp_path, monkeypatch):
    _write_package_json(tmp_path, {"express": "4.18.0"})
    reads: list[str] = []
    real_read_text = Path.read_text

    def _read_text(self, *args, **kwargs):
        reads.append(self.name)
        return real_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", _read_text)
    fs = RepositoryFileSystem(tmp_path)

    assert discover(fs) == discover(fs)
    assert reads == ["package.json"]
