from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]


def _line_count(path: Path) -> int:
    return len(path.read_text(encoding="utf-8", errors="ignore").splitlines())


def _python_files(root: Path):
    for path in root.rglob("*.py"):
        # Keep architecture checks focused on source/test code, not packaged artifacts.
        if "dist" in path.parts or "build" in path.parts:
            continue
        yield path


def _imported_modules(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8", errors="ignore"))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom):
            yield node.module or ""


def _layer_violations(layer: str, forbidden: tuple[str, ...]) -> list[tuple[str, str]]:
    violations: list[tuple[str, str]] = []
    for path in _python_files(ROOT / layer):
        for name in _imported_modules(path):
            if any(name == f or name.startswith(f + ".") for f in forbidden):
                violations.append((str(path.relative_to(ROOT)), name))
    return violations


def test_no_python_module_exceeds_hard_line_limit():
    offenders = []
    for path in _python_files(ROOT):
        lines = _line_count(path)
        if lines > 600:
            offenders.append((str(path.relative_to(ROOT)), lines))
    assert not offenders, f"Modules exceed hard 600-line limit: {offenders}"


def test_core_layer_does_not_import_infra_layer():
    violations = _layer_violations("core", ("infra", "migration"))
    assert not violations, f"Core layer imports infra layer: {violations}"


def test_leveling_analysis_does_not_touch_the_database():
    # Detection, scoring and recommendation are pure over a snapshot.
    pure_modules = ("detection.py", "scoring.py", "recommender.py", "load.py", "analysis.py", "models.py", "policy.py")
    violations = []
    for name in pure_modules:
        path = ROOT / "core" / "services" / "leveling" / name
        for module in _imported_modules(path):
            if module == "sqlalchemy" or module.startswith("sqlalchemy."):
                violations.append((name, module))
    assert not violations, f"Pure leveling modules import SQLAlchemy: {violations}"


def test_infra_repositories_module_is_facade_only():
    repo_path = ROOT / "infra" / "db" / "repositories.py"
    text = repo_path.read_text(encoding="utf-8", errors="ignore")

    assert "from infra.db.task.repository import" in text
    assert "from infra.db.project.repository import" in text
    assert "class SqlAlchemy" not in text


def test_known_large_modules_have_growth_budgets():
    # Guardrail budgets: these files carry the leveling logic and must not keep growing.
    budgets = {
        "core/services/leveling/recommender.py": 280,
        "core/services/leveling/detection.py": 160,
        "core/services/leveling/service.py": 160,
        "core/services/leveling/applier.py": 160,
        "infra/db/task/repository.py": 200,
        "infra/operational_support.py": 260,
    }

    breaches = []
    for rel_path, max_lines in budgets.items():
        path = ROOT / rel_path
        lines = _line_count(path)
        if lines > max_lines:
            breaches.append((rel_path, lines, max_lines))

    assert not breaches, f"Large-module budgets exceeded: {breaches}"
