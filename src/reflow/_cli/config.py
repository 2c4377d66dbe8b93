"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from reflow._errors import ConfigError


@dataclass(slots=True, frozen=True)
class ReflowConfig:
    """Configuration loaded from the ``[tool.reflow]`` section of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    graph: Path | None = None
    output: Path | None = None
    locale: str | None = None
    trace: bool = False
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_path(section: dict[str, object], key: str, project_root: Path) -> Path | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.reflow].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    if not path.is_absolute():
        path = project_root / path
    return path


def load_config(pyproject_path: Path) -> ReflowConfig:
    """Load and validate [tool.reflow] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed ReflowConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    reflow_section = data.get("tool", {}).get("reflow", {})

    if not reflow_section:
        # No [tool.reflow] section - return empty config
        return ReflowConfig(project_root=project_root)

    locale = reflow_section.get("locale")
    if locale is not None and not isinstance(locale, str):
        msg = "Invalid [tool.reflow].locale: expected string locale tag"
        raise ConfigError(msg)

    trace = reflow_section.get("trace", False)
    if not isinstance(trace, bool):
        msg = "Invalid [tool.reflow].trace: expected boolean"
        raise ConfigError(msg)

    return ReflowConfig(
        graph=_parse_path(reflow_section, "graph", project_root),
        output=_parse_path(reflow_section, "output", project_root),
        locale=locale,
        trace=trace,
        project_root=project_root,
    )


def get_config() -> ReflowConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        ReflowConfig (may be empty if no pyproject.toml or no [tool.reflow] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return ReflowConfig()
    return load_config(pyproject_path)
