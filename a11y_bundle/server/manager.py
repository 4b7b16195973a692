"""Start and stop the bundle's servers.

Running processes are tracked in a ``ProcessRegistry`` that callers own and
pass in; each operation returns the updated registry.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..config.models import ServerDefinition
from ..installers.runner import CommandRunner
from .process import MCPProcess

logger = logging.getLogger(__name__)

ProcessRegistry = Dict[str, MCPProcess]


async def start_server(
    server: ServerDefinition,
    registry: ProcessRegistry,
    servers_dir: Path,
    grace_period: float = 2.0,
) -> ProcessRegistry:
    """Start one server and return the registry including it."""
    if server.id in registry:
        logger.warning(f"Server {server.id} already running")
        return registry

    process = MCPProcess(server, Path(servers_dir) / server.id)
    try:
        await process.start(grace_period=grace_period)
    except Exception:
        await process.stop()
        raise

    return {**registry, server.id: process}


async def stop_server(
    server_id: str, registry: ProcessRegistry, timeout: float = 5.0
) -> ProcessRegistry:
    """Stop one server and return the registry without it."""
    process = registry.get(server_id)
    if not process:
        logger.warning(f"Server {server_id} not running")
        return registry

    await process.stop(timeout=timeout)
    return {key: value for key, value in registry.items() if key != server_id}


async def start_all(
    servers: List[ServerDefinition],
    registry: ProcessRegistry,
    servers_dir: Path,
    grace_period: float = 2.0,
) -> ProcessRegistry:
    """Start servers one by one; on failure stop the ones already started."""
    logger.info("Starting all MCP servers")
    for server in servers:
        try:
            registry = await start_server(
                server, registry, servers_dir, grace_period=grace_period
            )
        except Exception as e:
            logger.error(f"Failed to start {server.display_name}: {e}")
            await stop_all(registry)
            raise
    return registry


async def stop_all(registry: ProcessRegistry, timeout: float = 5.0) -> ProcessRegistry:
    """Stop every server in the registry and return an empty registry."""
    logger.info("Stopping all servers...")
    for server_id in list(registry):
        try:
            registry = await stop_server(server_id, registry, timeout=timeout)
        except Exception as e:
            logger.error(f"Error stopping {server_id}: {e}")
    logger.info("All servers stopped")
    return {}


async def stop_ports(ports: List[int], runner: CommandRunner) -> Dict[int, Optional[str]]:
    """Terminate whatever listens on each port (``lsof`` + ``kill``).

    Returns the PIDs that were signalled per port, ``None`` when nothing was
    listening.
    """
    stopped: Dict[int, Optional[str]] = {}
    for port in ports:
        logger.info(f"Stopping server on port {port}...")
        found = await runner.run(["lsof", f"-ti:{port}"])
        pids = found.stdout.split() if found.ok else []

        if not pids:
            logger.info(f"No server running on port {port}")
            stopped[port] = None
            continue

        result = await runner.run(["kill", "-TERM", *pids])
        if result.ok:
            logger.info(f"Stopped server on port {port} (PID: {' '.join(pids)})")
            stopped[port] = " ".join(pids)
        else:
            logger.error(f"Failed to stop server on port {port}: {result.stderr.strip()}")
            stopped[port] = None
    return stopped
