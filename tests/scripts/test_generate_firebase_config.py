import json
import os
from unittest.mock import patch

import pytest
from rtdb_admin.domain.schemas import WEB_CONFIG_ENV_VARS, FirebaseWebConfig
from rtdb_admin.scripts.generate_firebase_config import app, render_config_js
from typer.testing import CliRunner

runner = CliRunner()

PREFIX = "window.FIREBASE_CONFIG = "


@pytest.fixture
def workdir(monkeypatch, tmp_path):
    """Empty working directory with none of the web config variables set."""
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ):
        for var in WEB_CONFIG_ENV_VARS.values():
            os.environ.pop(var, None)
        yield tmp_path


def read_config(path):
    content = path.read_text(encoding="utf-8")
    assert content.startswith(PREFIX)
    assert content.endswith(";")
    return json.loads(content[len(PREFIX) : -1])


def test_render_config_js_format():
    rendered = render_config_js(FirebaseWebConfig(api_key="k", project_id="p"))

    assert rendered.startswith('window.FIREBASE_CONFIG = {\n  "apiKey": "k",\n')
    assert rendered.endswith('  "measurementId": ""\n};')


def test_writes_config_from_dotenv(workdir):
    (workdir / ".env").write_text(
        "GOOGLE_API_KEY=AIzaTestKey9876\n"
        "FIREBASE_PROJECT_ID=demo\n"
        "FIREBASE_DATABASE_URL=https://demo-default-rtdb.firebaseio.com\n",
        encoding="utf-8",
    )

    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    config = read_config(workdir / "firebase-config.js")
    assert config["apiKey"] == "AIzaTestKey9876"
    assert config["projectId"] == "demo"
    assert config["databaseURL"] == "https://demo-default-rtdb.firebaseio.com"
    assert config["storageBucket"] == ""
    assert "Loaded env from" in result.output
    assert "AIzaTestKey9876" not in result.output
    assert "9876" in result.output


def test_custom_env_file_argument(workdir):
    (workdir / "ggapi.env").write_text("FIREBASE_APP_ID=1:2:web:3\n", encoding="utf-8")

    result = runner.invoke(app, ["ggapi.env"])

    assert result.exit_code == 0, result.output
    assert read_config(workdir / "firebase-config.js")["appId"] == "1:2:web:3"


def test_env_path_variable(workdir):
    (workdir / "prod.env").write_text("FIREBASE_AUTH_DOMAIN=demo.firebaseapp.com\n")

    result = runner.invoke(app, [], env={"ENV_PATH": "prod.env"})

    assert result.exit_code == 0, result.output
    config = read_config(workdir / "firebase-config.js")
    assert config["authDomain"] == "demo.firebaseapp.com"


def test_missing_custom_file_falls_back_to_dotenv(workdir):
    (workdir / ".env").write_text("FIREBASE_STORAGE_BUCKET=demo.appspot.com\n")

    result = runner.invoke(app, ["missing.env"])

    assert result.exit_code == 0, result.output
    assert "Env file 'missing.env' not found, fell back to .env" in result.output
    assert read_config(workdir / "firebase-config.js")["storageBucket"] == "demo.appspot.com"


def test_no_env_file_writes_empty_config(workdir):
    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert "(no fallback .env)" in result.output
    assert "GOOGLE_API_KEY= (empty)" in result.output
    config = read_config(workdir / "firebase-config.js")
    assert set(config.values()) == {""}


def test_environment_wins_over_dotenv(workdir):
    (workdir / ".env").write_text("FIREBASE_PROJECT_ID=from-file\n")
    os.environ["FIREBASE_PROJECT_ID"] = "from-env"

    runner.invoke(app, [])

    assert read_config(workdir / "firebase-config.js")["projectId"] == "from-env"


def test_output_option(workdir):
    (workdir / "public").mkdir()

    result = runner.invoke(app, ["--output", "public/firebase-config.js"])

    assert result.exit_code == 0, result.output
    assert (workdir / "public" / "firebase-config.js").is_file()
    assert not (workdir / "firebase-config.js").exists()
