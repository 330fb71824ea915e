from typing import Any
from unittest.mock import call

import pytest

from coreason_runbox.exceptions import ArtifactCopyError
from coreason_runbox.extractor import ArtifactExtractor
from coreason_runbox.models import ArtifactKind, RunContext


@pytest.mark.asyncio
async def test_extract_nothing_present(mock_runtime: Any, run_context: RunContext) -> None:
    found = await ArtifactExtractor(mock_runtime).extract(run_context)

    assert found == {}
    assert mock_runtime.exists.await_count == 2
    mock_runtime.copy_out.assert_not_awaited()


@pytest.mark.asyncio
async def test_extract_probes_before_copy(mock_runtime: Any, run_context: RunContext) -> None:
    mock_runtime.exists.return_value = True

    found = await ArtifactExtractor(mock_runtime).extract(run_context)

    assert found == {
        ArtifactKind.PLOT: f"{run_context.run_id}_plot.png",
        ArtifactKind.DATA: f"{run_context.run_id}_data.csv",
    }
    mock_runtime.exists.assert_has_awaits(
        [
            call(run_context, f"/app/output/{run_context.run_id}_plot.png"),
            call(run_context, f"/app/output/{run_context.run_id}_data.csv"),
        ]
    )
    mock_runtime.copy_out.assert_has_awaits(
        [
            call(
                run_context,
                f"/app/output/{run_context.run_id}_plot.png",
                run_context.host_artifact_path(ArtifactKind.PLOT),
            ),
            call(
                run_context,
                f"/app/output/{run_context.run_id}_data.csv",
                run_context.host_artifact_path(ArtifactKind.DATA),
            ),
        ]
    )


@pytest.mark.asyncio
async def test_extract_only_copies_confirmed_files(mock_runtime: Any, run_context: RunContext) -> None:
    mock_runtime.exists.side_effect = lambda ctx, path: path.endswith("_data.csv")

    found = await ArtifactExtractor(mock_runtime).extract(run_context)

    assert found == {ArtifactKind.DATA: f"{run_context.run_id}_data.csv"}
    mock_runtime.copy_out.assert_awaited_once()


@pytest.mark.asyncio
async def test_copy_failure_is_isolated(mock_runtime: Any, run_context: RunContext) -> None:
    mock_runtime.exists.return_value = True
    mock_runtime.copy_out.side_effect = [ArtifactCopyError("disk full"), None]

    found = await ArtifactExtractor(mock_runtime).extract(run_context)

    assert found == {ArtifactKind.DATA: f"{run_context.run_id}_data.csv"}
    assert mock_runtime.copy_out.await_count == 2


@pytest.mark.asyncio
async def test_unexpected_copy_error_propagates(mock_runtime: Any, run_context: RunContext) -> None:
    mock_runtime.exists.return_value = True
    mock_runtime.copy_out.side_effect = RuntimeError("bug")

    with pytest.raises(RuntimeError, match="bug"):
        await ArtifactExtractor(mock_runtime).extract(run_context)
