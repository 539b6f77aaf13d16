"""Shared pytest fixtures and test helpers for taskdn tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from taskdn.infrastructure.vault import Vault

WriteFile = Callable[..., Path]


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """CLI invocations reconfigure the root logger; undo that after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    tdn = logging.getLogger("taskdn")
    tdn_level = tdn.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    tdn.setLevel(tdn_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def vault_root(tmp_path: Path) -> Path:
    """Temporary vault directory with the default layout.

    This is the single source of truth for the vault directory layout.
    All vault-related fixtures (vault, _isolated_vault) build on this.
    """
    (tmp_path / "tasks").mkdir()
    (tmp_path / "projects").mkdir()
    (tmp_path / "areas").mkdir()
    return tmp_path


@pytest.fixture
def vault(vault_root: Path) -> Vault:
    return Vault(
        tasks_dir=vault_root / "tasks",
        projects_dir=vault_root / "projects",
        areas_dir=vault_root / "areas",
        scan_workers=2,
    )


@pytest.fixture
def _isolated_vault(vault_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp vault root so the CLI works on an isolated vault.

    Use via ``@pytest.mark.usefixtures("_isolated_vault")`` on command test
    classes. Tests that need the path can also request ``vault_root``.
    """
    monkeypatch.delenv("TASKDN_CONFIG", raising=False)
    monkeypatch.chdir(vault_root)


# ---------------------------------------------------------------------------
# File writers
# ---------------------------------------------------------------------------


def _document(fields: dict[str, str], body: str) -> str:
    lines = [f"{key}: {value}" for key, value in fields.items()]
    return "---\n" + "\n".join(lines) + "\n---\n" + body


@pytest.fixture
def write_task(vault: Vault) -> WriteFile:
    """Write a task file from raw field text.

    Keyword names use underscores (``created_at``); they are written with
    hyphens. Values are copied verbatim into the YAML block.
    """

    def _write(
        filename: str,
        title: str,
        status: str = "ready",
        *,
        body: str = "",
        archived: bool = False,
        **fields: str,
    ) -> Path:
        directory = vault.archive_dir if archived else vault.tasks_dir
        directory.mkdir(parents=True, exist_ok=True)
        values = {
            "title": title,
            "status": status,
            "created-at": "2025-01-10",
            "updated-at": "2025-01-10",
        }
        values.update({key.replace("_", "-"): value for key, value in fields.items()})
        path = directory / filename
        path.write_text(_document(values, body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_project(vault: Vault) -> WriteFile:
    def _write(filename: str, title: str, *, body: str = "", **fields: str) -> Path:
        values = {"title": title}
        values.update({key.replace("_", "-"): value for key, value in fields.items()})
        path = vault.projects_dir / filename
        path.write_text(_document(values, body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_area(vault: Vault) -> WriteFile:
    def _write(filename: str, title: str, *, body: str = "", **fields: str) -> Path:
        values = {"title": title}
        values.update({key.replace("_", "-"): value for key, value in fields.items()})
        path = vault.areas_dir / filename
        path.write_text(_document(values, body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_vault(
    vault: Vault,
    write_task: WriteFile,
    write_project: WriteFile,
    write_area: WriteFile,
) -> Vault:
    """A small vault with one area, two projects and a handful of tasks.

    - area ``Work`` (work.md) and ``Home`` (home.md)
    - project ``Launch`` (launch.md) in Work; project ``Garden`` (garden.md) in Home
    - ``ship.md`` in Launch, ``standup.md`` directly in Work,
      ``ghost.md`` pointing at a missing project but directly in Work,
      ``weeds.md`` in Garden, ``loose.md`` with no containers,
      ``old.md`` archived in Launch
    """
    write_area("work.md", "Work", status="active")
    write_area("home.md", "Home")
    write_project("launch.md", "Launch", status="in-progress", area='"[[Work]]"')
    write_project("garden.md", "Garden", status="planning", area='"[[Home]]"')
    write_task("ship.md", "Ship it", projects='\n  - "[[Launch]]"', due="2025-01-20")
    write_task("standup.md", "Standup notes", "in-progress", area='"[[Work]]"')
    write_task("ghost.md", "Ghost task", "inbox", project='"[[Ghost]]"', area='"[[Work]]"')
    write_task("weeds.md", "Pull weeds", "blocked", project="garden.md")
    write_task("loose.md", "Loose end", "icebox")
    write_task(
        "old.md",
        "Old launch prep",
        "done",
        archived=True,
        completed_at="2025-01-05T12:00:00",
        project='"[[Launch]]"',
    )
    return vault
