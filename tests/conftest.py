from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from a11y_bundle.config.bundle import BUNDLE_SERVERS
from a11y_bundle.config.models import BundleSettings, EditorSection
from a11y_bundle.installers.runner import CommandResult, CommandRunner

Handler = Callable[[List[str], Optional[Path]], Optional[CommandResult]]


class FakeRunner(CommandRunner):
    """Records commands; a handler may simulate side effects or failures."""

    def __init__(self, handler: Optional[Handler] = None):
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[Path]] = []
        self.handler = handler

    async def run(
        self,
        cmd: List[str],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> CommandResult:
        self.calls.append(list(cmd))
        self.cwds.append(cwd)
        if self.handler is not None:
            result = self.handler(list(cmd), cwd)
            if result is not None:
                return result
        return CommandResult(args=list(cmd), returncode=0)


def simulate_toolchain(cmd: List[str], cwd: Optional[Path]) -> Optional[CommandResult]:
    """Pretend git and npm worked: clones get a package.json, builds get outputs."""
    if cmd[:2] == ["git", "clone"]:
        target = Path(cmd[3])
        (target / ".git").mkdir(parents=True)
        (target / "package.json").write_text("{}")
        (target / "main.js").write_text("// entry")
    elif cmd[:3] == ["npm", "run", "build"] and cwd is not None:
        for server in BUNDLE_SERVERS:
            if server.id == Path(cwd).name:
                for name in server.check_files:
                    output = Path(cwd) / name
                    output.parent.mkdir(parents=True, exist_ok=True)
                    output.write_text("// built")
    return None


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def toolchain_runner():
    return FakeRunner(simulate_toolchain)


@pytest.fixture
def settings(tmp_path):
    user_dir = tmp_path / "Code" / "User"
    prompt = tmp_path / "prompts" / "a11y-axe-testing.prompt.md"
    prompt.parent.mkdir(parents=True)
    prompt.write_text("# prompt\n")
    return BundleSettings(
        base_dir=tmp_path,
        editor=EditorSection(
            mcp_config_path=str(user_dir / "mcp.json"),
            prompts_dir=str(user_dir / "prompts"),
        ),
    )
