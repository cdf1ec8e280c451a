"""Linting."""

from __future__ import annotations

from pipelines import config
from pipelines import nox


@nox.session()
def ruff(session: nox.Session) -> None:
    """Run ruff over the package, tests, and pipelines."""
    nox.sync(session, self=True, groups=["ruff"])

    session.run("ruff", "check", *config.PYTHON_REFORMATTING_PATHS, *session.posargs)
