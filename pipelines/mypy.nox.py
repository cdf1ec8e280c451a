"""Static type analysis."""

from __future__ import annotations

from pipelines import config
from pipelines import nox


@nox.session()
def mypy(session: nox.Session) -> None:
    """Type-check the main package with mypy in strict mode."""
    nox.sync(session, self=True, groups=["mypy"])

    session.run("mypy", "-p", config.MAIN_PACKAGE, "--config-file", config.PYPROJECT_TOML)
