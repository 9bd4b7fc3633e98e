"""Unit tests for the clean command.

Permanent deletions run against tmp_path; the trash is patched out.
"""

import errno
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from declutter.cli.main import app
from declutter.core.paths import get_config_dir
from declutter.core.state import StateManager
from declutter.models.deletion import DeletionMode
from typer.testing import CliRunner

runner = CliRunner()

_real_unlink = Path.unlink


@pytest.fixture
def junk(tmp_path: Path) -> Path:
    """A single 1000-byte file."""
    path = tmp_path / "junk.bin"
    path.write_bytes(b"j" * 1000)
    return path


class TestCleanCommand:
    """Tests for declutter clean."""

    def test_dry_run_keeps_files(self, junk: Path) -> None:
        """--dry-run lists the plan and deletes nothing."""
        result = runner.invoke(app, ["clean", str(junk), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Planned Deletions (Dry Run)" in result.stdout
        assert "Dry-run: 1 item(s) would be deleted" in result.stdout
        assert junk.exists()
        assert StateManager().count() == 0

    def test_permanent_with_yes(self, junk: Path) -> None:
        """--permanent --yes removes the file and records it."""
        result = runner.invoke(app, ["clean", str(junk), "--permanent", "--yes"])

        assert result.exit_code == 0, result.output
        assert not junk.exists()
        assert "All 1 item(s) deleted" in result.output
        entries = StateManager().list_entries()
        assert len(entries) == 1
        assert entries[0].path == str(junk)
        assert entries[0].size_bytes == 1000
        assert entries[0].deletion_type is DeletionMode.PERMANENT

    def test_trash_is_default(self, junk: Path) -> None:
        """Without --permanent items go to the trash."""
        with patch("declutter.deletion.engine.send2trash") as mock_trash:
            result = runner.invoke(app, ["clean", str(junk), "--yes"])

        assert result.exit_code == 0, result.output
        mock_trash.assert_called_once_with(str(junk))
        assert StateManager().list_entries()[0].deletion_type is DeletionMode.RECOVERABLE

    def test_confirmation_declined(self, junk: Path) -> None:
        """Answering no aborts without deleting."""
        result = runner.invoke(app, ["clean", str(junk), "--permanent"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.stdout
        assert junk.exists()

    def test_confirmation_accepted(self, junk: Path) -> None:
        """Answering yes proceeds."""
        result = runner.invoke(app, ["clean", str(junk), "--permanent"], input="y\n")

        assert result.exit_code == 0, result.output
        assert not junk.exists()

    def test_nested_paths_deleted_once(self, sample_tree: Path) -> None:
        """A directory and a file inside it count as one item."""
        big = sample_tree / "big"
        result = runner.invoke(
            app, ["clean", str(big / "a.bin"), str(big), "--permanent", "--yes"]
        )

        assert result.exit_code == 0, result.output
        assert "All 1 item(s) deleted" in result.output
        assert not big.exists()

    def test_symlink_removes_link_only(self, tmp_path: Path) -> None:
        """Cleaning a symlink to a directory removes the link, not the target."""
        target = tmp_path / "precious"
        target.mkdir()
        (target / "keep.txt").write_text("keep")
        link = tmp_path / "link"
        link.symlink_to(target, target_is_directory=True)

        result = runner.invoke(app, ["clean", str(link), "--permanent", "--yes"])

        assert result.exit_code == 0, result.output
        assert not os.path.lexists(link)
        assert (target / "keep.txt").read_text() == "keep"
        assert StateManager().list_entries()[0].path == str(link)

    def test_relative_path_made_absolute(
        self, junk: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Relative arguments are recorded with their absolute path."""
        monkeypatch.chdir(junk.parent)

        result = runner.invoke(app, ["clean", junk.name, "--permanent", "--yes"])

        assert result.exit_code == 0, result.output
        assert not junk.exists()
        assert StateManager().list_entries()[0].path == os.path.join(os.getcwd(), junk.name)

    def test_missing_path(self, tmp_path: Path) -> None:
        """A missing path aborts before anything is deleted."""
        result = runner.invoke(app, ["clean", str(tmp_path / "missing"), "--yes"])

        assert result.exit_code == 1
        assert "Path not found" in result.output

    def test_protected_path_fails(self) -> None:
        """Protected paths are refused and the command exits with 1."""
        config_dir = get_config_dir()
        config_dir.mkdir(parents=True)
        protected = config_dir / "config.toml"
        protected.write_text("")

        result = runner.invoke(app, ["clean", str(protected), "--permanent", "--yes"])

        assert result.exit_code == 1
        assert "0 deleted, 1 failed" in result.output
        assert protected.exists()
        assert StateManager().count() == 0

    def test_partial_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """One failing item does not stop the others, but the exit code is 1."""
        keep = tmp_path / "locked.bin"
        keep.write_bytes(b"k")
        gone = tmp_path / "gone.bin"
        gone.write_bytes(b"g")

        def unlink(self: Path, missing_ok: bool = False) -> None:
            if self.name == "locked.bin":
                raise PermissionError(errno.EACCES, "Permission denied", str(self))
            _real_unlink(self, missing_ok=missing_ok)

        monkeypatch.setattr(Path, "unlink", unlink)

        result = runner.invoke(app, ["clean", str(keep), str(gone), "--permanent", "--yes"])

        assert result.exit_code == 1
        assert "1 deleted, 1 failed" in result.output
        assert keep.exists()
        assert not gone.exists()
