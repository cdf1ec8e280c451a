from __future__ import annotations

import pathlib

# Packaging
MAIN_PACKAGE = "mapmatch"
TEST_PACKAGE = "tests"

# Directories
ARTIFACT_DIRECTORY = "public"

# Linting and test configs
PYPROJECT_TOML = "pyproject.toml"
COVERAGE_HTML_PATH = pathlib.Path(ARTIFACT_DIRECTORY, "coverage", "html")

# Reformatting paths
REFORMATTING_FILE_EXTS = (".py", ".pyi", ".toml", ".md", ".txt", ".cfg", ".ini", ".yml", ".yaml")
PYTHON_REFORMATTING_PATHS = (MAIN_PACKAGE, TEST_PACKAGE, "pipelines", "noxfile.py")
FULL_REFORMATTING_PATHS = (
    *PYTHON_REFORMATTING_PATHS,
    *(f for f in pathlib.Path.cwd().glob("*") if f.is_file() and f.suffix.endswith(REFORMATTING_FILE_EXTS)),
)
