"""Health checks for the bundle's servers."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import httpx
from mcp.client.session import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client

from ..config.models import ServerDefinition
from ..editor.document import ManagedEntry

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass
class HealthResult:
    name: str
    status: HealthStatus
    detail: str = ""

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY


async def check_http(
    server: ServerDefinition, client: httpx.AsyncClient, timeout: float = 5.0
) -> HealthResult:
    """Probe ``http://localhost:<port>/``; any HTTP answer counts as up."""
    url = f"http://localhost:{server.port}/"
    logger.info(f"Checking {server.display_name}...")

    try:
        response = await client.get(url, timeout=timeout)
    except httpx.TimeoutException:
        logger.error(f"{server.display_name} timed out (port {server.port})")
        return HealthResult(server.display_name, HealthStatus.TIMEOUT, "timed out")
    except httpx.ConnectError:
        logger.error(f"{server.display_name} is not running (port {server.port})")
        return HealthResult(server.display_name, HealthStatus.UNHEALTHY, "not running")
    except httpx.HTTPError as e:
        logger.error(f"{server.display_name} health check failed: {e}")
        return HealthResult(server.display_name, HealthStatus.UNHEALTHY, str(e))

    logger.info(f"{server.display_name} is running (port {server.port})")
    return HealthResult(
        server.display_name, HealthStatus.HEALTHY, f"HTTP {response.status_code}"
    )


async def check_stdio(
    name: str, entry: ManagedEntry, timeout: float = 10.0
) -> HealthResult:
    """Launch the registered stdio command and list its tools."""
    logger.info(f"Checking {name} over stdio...")
    server_params = StdioServerParameters(command=entry.command, args=list(entry.args))

    async def _probe() -> int:
        async with stdio_client(server_params) as (read_stream, write_stream):
            async with ClientSession(read_stream, write_stream) as session:
                await session.initialize()
                result = await session.list_tools()
                return len(result.tools)

    try:
        tool_count = await asyncio.wait_for(_probe(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"{name} did not answer within {timeout}s")
        return HealthResult(name, HealthStatus.TIMEOUT, "timed out")
    except Exception as e:
        logger.error(f"{name} health check failed: {e}")
        return HealthResult(name, HealthStatus.UNHEALTHY, str(e))

    logger.info(f"{name} answered with {tool_count} tools")
    return HealthResult(name, HealthStatus.HEALTHY, f"{tool_count} tools")


async def check_all(
    servers: List[ServerDefinition],
    timeout: float = 5.0,
    client: Optional[httpx.AsyncClient] = None,
) -> List[HealthResult]:
    """HTTP-probe each server in turn."""
    if client is not None:
        return [await check_http(server, client, timeout) for server in servers]

    async with httpx.AsyncClient() as own_client:
        return [await check_http(server, own_client, timeout) for server in servers]
