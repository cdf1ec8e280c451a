"""Pytest integration."""

from __future__ import annotations

from pipelines import config
from pipelines import nox

RUN_FLAGS = ("-c", config.PYPROJECT_TOML, "--showlocals")
COVERAGE_FLAGS = (
    "--cov",
    config.MAIN_PACKAGE,
    "--cov-config",
    config.PYPROJECT_TOML,
    "--cov-report",
    "term",
    "--cov-report",
    f"html:{config.COVERAGE_HTML_PATH}",
)


@nox.session()
def pytest(session: nox.Session) -> None:
    """Run unit tests, optionally measuring code coverage.

    Coverage is enabled with the `--coverage` flag.
    """
    nox.sync(session, self=True, groups=["pytest"])

    posargs = [arg for arg in session.posargs if arg != "--coverage"]
    flags = [*RUN_FLAGS, *(COVERAGE_FLAGS if len(posargs) != len(session.posargs) else ())]

    session.run("python", "-m", "pytest", *flags, *posargs, config.TEST_PACKAGE)
