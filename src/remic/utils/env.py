"""Environment file loading for the CLI."""

from pathlib import Path

from dotenv import load_dotenv


def load_environment(env_file: str | Path | None = None) -> bool:
    """Load environment variables from a .env file if it exists.

    Args:
        env_file: Path to .env file. If None, looks for .env in current directory.

    Returns:
        True if any variables were loaded from the file
    """
    if env_file is None:
        env_file = Path.cwd() / ".env"

    if isinstance(env_file, str):
        env_file = Path(env_file)

    if env_file.exists():
        return load_dotenv(env_file, override=False)
    return False
