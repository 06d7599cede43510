from pathlib import Path

from dotenv import load_dotenv


def load_env(root: Path | None = None) -> bool:
    """Load .env from the project root if present.

    Variables already set in the process environment win.
    """
    env_path = (root or Path.cwd()) / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)
