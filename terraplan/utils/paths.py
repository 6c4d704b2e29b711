"""Configuration file discovery.

A configuration is either a single file or a directory whose configuration
files are read in name order, the way Terraform reads every *.tf file in a
module directory.
"""

from pathlib import Path


CONFIG_SUFFIXES = (".yaml", ".yml", ".tf.json")


def is_configuration_file(path: Path) -> bool:
    """Check if a file looks like a terraplan configuration file.

    The path must be an existing file whose name ends in one of
    CONFIG_SUFFIXES.

    Example:
        >>> Path("network.tf.json").name.endswith(CONFIG_SUFFIXES)
        True
        >>> is_configuration_file(Path("variables.tf"))
        False
        >>> is_configuration_file(Path("missing.yaml"))
        False
    """
    return path.is_file() and path.name.endswith(CONFIG_SUFFIXES)


def discover_configuration_files(path: str | Path) -> list[Path]:
    """
    List the configuration files a path refers to.

    Args:
        path: A configuration file, or a directory of configuration files

    Returns:
        [path] for a file; the directory's configuration files sorted by name
        for a directory (not recursive)

    Raises:
        FileNotFoundError: If the path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No such file or directory: {path}")
    if path.is_file():
        return [path]
    return sorted(
        (p for p in path.iterdir() if is_configuration_file(p)), key=lambda p: p.name
    )
