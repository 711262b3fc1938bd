"""
Main entry point for the Newsroom backend.
"""

import os
import subprocess
from typing import Any
from dotenv import load_dotenv

load_dotenv()

DEV_TRUTHY_VALUES = {"1", "true", "yes", "on"}
DEV_FALSEY_VALUES = {"0", "false", "no", "off"}


def required_env(name: str) -> Any:
    """Get required environment variable or raise error."""
    value = os.getenv(name)
    if value is None:
        raise RuntimeError(f"Environment variable '{name}' is required but not set.")
    return value


def parse_bool_env(name: str, default: str = "false") -> bool:
    """Parse an environment variable into a strict boolean."""
    normalized = os.getenv(name, default).strip().lower()
    if normalized in DEV_TRUTHY_VALUES:
        return True
    if normalized in DEV_FALSEY_VALUES:
        return False
    raise RuntimeError(
        f"Environment variable '{name}' must be one of: true/false, 1/0, yes/no, on/off"
    )


def build_command(port: int, dev: bool) -> list[str]:
    """Return the uvicorn command line for the given port and mode."""
    return [
        "uvicorn",
        "newsroom.server:app",
        *(["--reload"] if dev else []),
        "--host",
        os.getenv("HOST", "0.0.0.0"),
        "--port",
        str(port),
    ]


def main() -> None:
    required_env("ADMINS")
    required_env("GOOGLE_CLIENT_ID")
    port = int(os.getenv("PORT", "8000"))
    dev = parse_bool_env("DEV")
    # Normalize DEV for child processes that read the environment directly.
    os.environ["DEV"] = "true" if dev else "false"

    try:
        subprocess.run(build_command(port, dev), cwd=os.getcwd(), check=True)
    except KeyboardInterrupt:
        print("Server stopped by user.")


if __name__ == "__main__":
    main()
