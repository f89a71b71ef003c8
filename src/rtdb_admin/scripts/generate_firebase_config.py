#!/usr/bin/env python3
"""
Generate firebase-config.js for the web client from environment variables.

Usage:
    python -m rtdb_admin.scripts.generate_firebase_config [ENV_FILE] [--output PATH]

ENV_FILE defaults to $ENV_PATH, then .env. A missing custom env file falls
back to .env when one exists.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from loguru import logger

from rtdb_admin.domain.schemas import FirebaseWebConfig
from rtdb_admin.observability import configure_logging, mask_secret

DEFAULT_ENV_FILE = ".env"
DEFAULT_OUTPUT = "firebase-config.js"

app = typer.Typer()


def load_environment(requested: str, cwd: Optional[Path] = None) -> Optional[Path]:
    """
    Load variables from the requested dotenv file, falling back to .env.

    Existing environment variables are never overridden.

    Returns:
        The file that was loaded, or None if neither was found.
    """
    cwd = cwd or Path.cwd()
    env_path = (cwd / requested).resolve()
    default_path = (cwd / DEFAULT_ENV_FILE).resolve()

    if env_path.is_file():
        load_dotenv(env_path)
        logger.info(f"Loaded env from {env_path}")
        return env_path

    if requested != DEFAULT_ENV_FILE and default_path.is_file():
        load_dotenv(default_path)
        logger.warning(f"Env file '{requested}' not found, fell back to .env")
        return default_path

    logger.warning(f"Env file '{requested}' not found (no fallback .env)")
    return None


def render_config_js(config: FirebaseWebConfig) -> str:
    payload = json.dumps(config.model_dump(by_alias=True), indent=2, ensure_ascii=False)
    return f"window.FIREBASE_CONFIG = {payload};"


@app.command()
def generate_firebase_config(
    env_file: Optional[str] = typer.Argument(
        None, envvar="ENV_PATH", help="dotenv file to load (default: .env)"
    ),
    output: Path = typer.Option(
        Path(DEFAULT_OUTPUT), "--output", "-o", help="Where to write the config script"
    ),
):
    """Write window.FIREBASE_CONFIG from GOOGLE_API_KEY and FIREBASE_* variables."""
    configure_logging()
    load_environment(env_file or DEFAULT_ENV_FILE)

    config = FirebaseWebConfig.from_env()
    out_file = output if output.is_absolute() else Path.cwd() / output
    out_file.write_text(render_config_js(config), encoding="utf-8")

    logger.info(f"Wrote {out_file}")
    logger.info(f"GOOGLE_API_KEY= {mask_secret(config.api_key)}")


if __name__ == "__main__":
    app()
