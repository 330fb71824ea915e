# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

from functools import lru_cache

from mcp.server.fastmcp import FastMCP
from mcp.types import ImageContent, TextContent

from coreason_runbox.artifacts import ArtifactManager
from coreason_runbox.orchestrator import RunOrchestrator

# Initialize MCP Server
mcp = FastMCP("coreason-runbox")


@lru_cache(maxsize=1)
def get_orchestrator() -> RunOrchestrator:
    """Lazily build the process-wide orchestrator (connects to Docker on first use)."""
    return RunOrchestrator()


@mcp.tool()  # type: ignore[misc]
async def execute_code(code: str) -> list[TextContent | ImageContent]:
    """
    Execute Python code in a fresh sandbox.
    Returns the captured output, the rendered plot (if any) and the data export (if any).
    """
    orchestrator = get_orchestrator()
    result = await orchestrator.execute(code)

    output: list[TextContent | ImageContent] = []

    if result.output:
        label = "OUTPUT" if result.success else "ERROR"
        output.append(TextContent(type="text", text=f"{label}:\n{result.output}"))

    output.append(TextContent(type="text", text=f"Success: {result.success}"))

    manager = ArtifactManager(orchestrator.config.temp_dir)
    try:
        artifacts = await manager.collect(result)
    except FileNotFoundError as e:
        output.append(TextContent(type="text", text=f"Failed to read artifact: {e!s}"))
        return output

    for artifact in artifacts:
        url = artifact.url
        if url and url.startswith("data:image/"):
            _, base64_data = url.split(",", 1)
            mime = artifact.content_type or "image/png"
            output.append(ImageContent(type="image", data=base64_data, mimeType=mime))
        else:
            output.append(TextContent(type="text", text=f"Artifact: {artifact.filename} ({artifact.path})"))

    return output


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
