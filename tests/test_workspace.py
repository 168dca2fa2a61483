"""Tests for throwaway workspaces."""

import pytest

from gitdungeon.git import DirectoryMissingError, WorkspaceManager


@pytest.fixture
def workspaces(tmp_path):
    return WorkspaceManager(tmp_path)


class TestWorkspaceManager:
    """Test directory and file lifecycle."""

    def test_create_directory(self, workspaces, tmp_path):
        path = workspaces.create_directory("game")
        assert path.is_dir()
        assert path.parent == tmp_path / "gitdungeon" / "game"
        assert workspaces.created == [path]

    def test_directories_are_unique(self, workspaces):
        assert workspaces.create_directory() != workspaces.create_directory()

    def test_blank_prefix_defaults(self, workspaces):
        assert workspaces.create_directory("  ").parent.name == "challenge"

    def test_create_file(self, workspaces):
        path = workspaces.create_directory()
        target = workspaces.create_file(path, "docs/notes.md", "hello")
        assert target.read_text() == "hello"
        assert workspaces.file_exists(path, "docs/notes.md")
        assert not workspaces.file_exists(path, "missing.md")

    def test_create_file_in_missing_directory(self, workspaces, tmp_path):
        with pytest.raises(DirectoryMissingError):
            workspaces.create_file(tmp_path / "nowhere", "a.txt")

    def test_cleanup_directory(self, workspaces):
        path = workspaces.create_directory()
        assert workspaces.cleanup_directory(path)
        assert not path.exists()
        assert workspaces.created == []

    def test_cleanup_twice_is_harmless(self, workspaces):
        path = workspaces.create_directory()
        workspaces.cleanup_directory(path)
        assert workspaces.cleanup_directory(path)

    def test_context_manager_cleans_up(self, tmp_path):
        with WorkspaceManager(tmp_path) as workspaces:
            first = workspaces.create_directory()
            second = workspaces.create_directory("game")
            (first / "file.txt").write_text("x")
        assert not first.exists()
        assert not second.exists()

    def test_default_root_is_temp_dir(self):
        assert WorkspaceManager().root.name == "gitdungeon"
