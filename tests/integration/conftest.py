"""Shared helpers for integration tests that run real git."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git_env(ceiling: Path) -> dict[str, str]:
    """Environment that stops git from discovering repositories above ceiling."""
    env = dict(os.environ)
    env["GIT_CEILING_DIRECTORIES"] = str(ceiling)
    return env


def run_git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
        env=git_env(repo.parent),
    )
    return result.stdout


def init_git_repo(repo: Path) -> None:
    """Initialize a repository with a committer identity configured."""
    repo.mkdir(parents=True, exist_ok=True)
    run_git(repo, "init", "--quiet")
    run_git(repo, "config", "user.email", "test@example.com")
    run_git(repo, "config", "user.name", "Test User")
    run_git(repo, "config", "commit.gpgsign", "false")


def commit_all(repo: Path, message: str) -> None:
    run_git(repo, "add", "-A")
    run_git(repo, "commit", "--quiet", "-m", message)
