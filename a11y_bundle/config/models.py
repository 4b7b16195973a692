"""Configuration data models."""

from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ServerDefinition(BaseModel):
    """Static description of one server shipped by the bundle."""

    id: str  # directory name under servers/
    display_name: str  # key in the editor's mcp.json
    git_url: str
    branch: str = "main"
    install_command: Optional[str] = "npm install"
    build_command: Optional[str] = None
    entry_point: str
    check_files: List[str] = Field(default_factory=list)
    port: int
    start_command: Optional[str] = None

    def command_line(self) -> str:
        return self.start_command or f"node {self.entry_point}"


class BundleSection(BaseModel):
    root: str = "."
    servers_dir: str = "servers"
    log_level: Literal["debug", "info", "warning", "error"] = "info"


class EditorSection(BaseModel):
    mcp_config_path: Optional[str] = None
    prompts_dir: Optional[str] = None


class PromptSection(BaseModel):
    source: str = "prompts/a11y-axe-testing.prompt.md"
    filename: str = "a11y-axe-testing.prompt.md"


class RuntimeSection(BaseModel):
    health_check_timeout: float = 5.0  # seconds
    start_grace_period: float = 2.0
    stop_timeout: float = 5.0


class RepositoryOverride(BaseModel):
    git_url: Optional[str] = None
    branch: Optional[str] = None
    port: Optional[int] = None


class BundleSettings(BaseModel):
    bundle: BundleSection = Field(default_factory=BundleSection)
    editor: EditorSection = Field(default_factory=EditorSection)
    prompt: PromptSection = Field(default_factory=PromptSection)
    runtime: RuntimeSection = Field(default_factory=RuntimeSection)
    repositories: Dict[str, RepositoryOverride] = Field(default_factory=dict)

    # Directory the relative paths above are resolved against.
    base_dir: Path = Field(default_factory=Path.cwd, exclude=True)

    @property
    def bundle_root(self) -> Path:
        return (self.base_dir / self.bundle.root).resolve()

    @property
    def servers_dir(self) -> Path:
        return self.bundle_root / self.bundle.servers_dir

    @property
    def prompt_source(self) -> Path:
        return self.bundle_root / self.prompt.source
