from __future__ import annotations

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[4]


def _iter_python_files(base: Path) -> list[Path]:
    return [path for path in base.rglob("*.py") if "__pycache__" not in path.parts]


def _collect_import_targets(path: Path, *, top_level_only: bool) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    nodes = tree.body if top_level_only else list(ast.walk(tree))
    targets: list[str] = []
    for node in nodes:
        if isinstance(node, ast.Import):
            for alias in node.names:
                targets.append(alias.name)
        elif isinstance(node, ast.ImportFrom) and node.module is not None:
            targets.append(node.module)
    return targets


def test_sequencer_package_does_not_import_gauntlet() -> None:
    violations: list[str] = []
    for path in _iter_python_files(REPO_ROOT / "sequencer"):
        for target in _collect_import_targets(path, top_level_only=False):
            if target == "gauntlet" or target.startswith("gauntlet."):
                violations.append(f"{path.relative_to(REPO_ROOT)} -> {target}")
    assert not violations, "Sequencer must not import the stage flow:\n" + "\n".join(violations)


def test_sequencer_api_defers_runtime_imports() -> None:
    violations: list[str] = []
    for path in _iter_python_files(REPO_ROOT / "sequencer" / "api"):
        for target in _collect_import_targets(path, top_level_only=True):
            if target.startswith("sequencer.runtime"):
                violations.append(f"{path.relative_to(REPO_ROOT)} -> {target}")
    assert not violations, "sequencer.api must import runtime lazily:\n" + "\n".join(violations)


def test_gauntlet_app_does_not_import_entry_point() -> None:
    violations: list[str] = []
    for path in _iter_python_files(REPO_ROOT / "gauntlet" / "app"):
        for target in _collect_import_targets(path, top_level_only=False):
            if target == "gauntlet.main":
                violations.append(f"{path.relative_to(REPO_ROOT)} -> {target}")
    assert not violations, "App layer must not import the entry point:\n" + "\n".join(violations)


def test_stage_controllers_depend_on_orchestrator_protocol() -> None:
    # Only the session wires the concrete orchestrator.
    violations: list[str] = []
    for path in _iter_python_files(REPO_ROOT / "gauntlet" / "app"):
        if path.name == "session.py":
            continue
        for target in _collect_import_targets(path, top_level_only=False):
            if target == "sequencer.runtime.transitions":
                violations.append(f"{path.relative_to(REPO_ROOT)} -> {target}")
    assert not violations, "Stages must use the TransitionOrchestrator protocol:\n" + "\n".join(violations)


def test_variadic_parameters_are_annotated() -> None:
    violations: list[str] = []
    for package in ("gauntlet", "sequencer"):
        for path in _iter_python_files(REPO_ROOT / package):
            tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
            for node in ast.walk(tree):
                if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    continue
                for arg in (node.args.vararg, node.args.kwarg):
                    if arg is not None and arg.annotation is None:
                        violations.append(f"{path.relative_to(REPO_ROOT)}:{node.lineno} {node.name}")
    assert not violations, "Unannotated *args/**kwargs:\n" + "\n".join(violations)
