"""Tests for database migration helpers that do not need a database."""

from pathlib import Path

from vote_finder.migrations import get_alembic_config, show_history


class TestAlembicConfig:
    """Tests for get_alembic_config()."""

    def test_script_location_is_project_alembic_dir(self):
        config = get_alembic_config()
        script_location = Path(config.get_main_option("script_location"))

        assert script_location.name == "alembic"
        assert (script_location / "env.py").exists()


class TestShowHistory:
    """Tests for show_history()."""

    def test_initial_revision_listed(self):
        history = show_history()

        revisions = [revision for revision, _ in history]
        assert "3f1c2a7d9b10" in revisions

    def test_every_revision_described(self):
        assert all(doc for _, doc in show_history())
