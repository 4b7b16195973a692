"""Tests for system prompt installation and removal."""

import pytest

from a11y_bundle.editor.prompt import PromptError, SystemPromptInstaller


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "bundle" / "prompts" / "a11y-axe-testing.prompt.md"
    path.parent.mkdir(parents=True)
    path.write_text("# Accessibility testing\n")
    return path


class TestSystemPromptInstaller:
    def test_install_creates_directory_and_copies(self, tmp_path, source):
        prompts_dir = tmp_path / "User" / "prompts"
        installer = SystemPromptInstaller(source, prompts_dir, "a11y-axe-testing.prompt.md")

        target = installer.install()

        assert target == prompts_dir / "a11y-axe-testing.prompt.md"
        assert target.read_text() == "# Accessibility testing\n"
        assert installer.is_installed()

    def test_install_overwrites(self, tmp_path, source):
        prompts_dir = tmp_path / "prompts"
        prompts_dir.mkdir()
        (prompts_dir / "p.md").write_text("old")
        SystemPromptInstaller(source, prompts_dir, "p.md").install()
        assert (prompts_dir / "p.md").read_text() == "# Accessibility testing\n"

    def test_missing_source(self, tmp_path):
        installer = SystemPromptInstaller(tmp_path / "nope.md", tmp_path / "prompts", "p.md")
        with pytest.raises(PromptError, match="complete bundle"):
            installer.install()
        assert not (tmp_path / "prompts").exists()

    def test_remove(self, tmp_path, source):
        installer = SystemPromptInstaller(source, tmp_path / "prompts", "p.md")
        installer.install()
        assert installer.remove() is True
        assert not installer.is_installed()

    def test_remove_when_absent(self, tmp_path, source):
        installer = SystemPromptInstaller(source, tmp_path / "prompts", "p.md")
        assert installer.remove() is False
