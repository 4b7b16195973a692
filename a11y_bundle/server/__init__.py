"""MCP server management."""

from .health import HealthResult, HealthStatus, check_all, check_http, check_stdio
from .manager import ProcessRegistry, start_all, start_server, stop_all, stop_ports, stop_server
from .process import MCPProcess, ProcessStatus

__all__ = [
    "HealthResult",
    "HealthStatus",
    "MCPProcess",
    "ProcessRegistry",
    "ProcessStatus",
    "check_all",
    "check_http",
    "check_stdio",
    "start_all",
    "start_server",
    "stop_all",
    "stop_ports",
    "stop_server",
]
