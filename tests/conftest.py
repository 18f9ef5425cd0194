"""Shared test fixtures."""

import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def template_text():
    return (
        "# Application config\n"
        "APP_NAME=MyApp\n"
        "APP_ENV=production\n"
        "DEBUG=false\n"
        "\n"
        "# Database\n"
        "DATABASE_URL=postgres://prod-server/myapp\n"
        "\n"
        "# New feature\n"
        "FEATURE_FLAG=enabled\n"
    )


@pytest.fixture
def destination_text():
    return (
        "# Application config\n"
        "APP_NAME=MyApp\n"
        "APP_ENV=development\n"
        "DEBUG=true\n"
        "\n"
        "# Database\n"
        "# dotenv-merge:freeze local database\n"
        "DATABASE_URL=postgres://localhost/myapp_dev\n"
        "# dotenv-merge:unfreeze\n"
        "\n"
        "# Custom local settings\n"
        "CUSTOM_PATH=/usr/local/custom\n"
    )


@pytest.fixture
def sample_files(temp_dir, template_text, destination_text):
    """Create a template/destination file pair."""
    template = temp_dir / ".env.example"
    destination = temp_dir / ".env"
    template.write_text(template_text)
    destination.write_text(destination_text)
    return template, destination


@pytest.fixture
def sample_trees(temp_dir):
    """Create template and destination trees for tree merges."""
    template = temp_dir / "template"
    destination = temp_dir / "destination"
    output = temp_dir / "output"

    template.mkdir()
    destination.mkdir()

    # Present in both, different content
    (template / "app.env").write_text("API_KEY=template\nNEW_VAR=new\n")
    (destination / "app.env").write_text("API_KEY=dest\nCUSTOM=custom\n")

    # Present in both, same content
    (template / "same.env").write_text("SAME=1\n")
    (destination / "same.env").write_text("SAME=1\n")

    # Only in destination
    (destination / "services").mkdir()
    (destination / "services" / "worker.env").write_text("WORKERS=4\n")

    # Only in template
    (template / "extra.env").write_text("# extra\nEXTRA=1\n")

    # Not matched by the default pattern
    (template / "README.md").write_text("docs")

    return template, destination, output
