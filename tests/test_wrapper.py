import ast
import subprocess
import sys
from pathlib import Path

import pytest

from coreason_runbox.models import ArtifactKind, RunContext
from coreason_runbox.wrapper import render_wrapper


def test_wrapper_is_valid_python(run_context: RunContext) -> None:
    ast.parse(render_wrapper(run_context))


def test_wrapper_embeds_run_id_and_mount(run_context: RunContext) -> None:
    source = render_wrapper(run_context, data_glob="*.tsv")

    assert f"RUN_ID = {run_context.run_id!r}" in source
    assert "OUTPUT_DIR = '/app/output'" in source
    assert "DATA_GLOB = '*.tsv'" in source
    assert "import user_code" in source
    assert 'print(f"Error: {str(e)}")' in source


def test_wrapper_embeds_values_as_literals(tmp_path: Path) -> None:
    ctx = RunContext(run_id="id'with\"quotes", temp_dir=tmp_path, output_mount="/out")
    tree = ast.parse(render_wrapper(ctx))

    assigned = {
        node.targets[0].id: ast.literal_eval(node.value)
        for node in tree.body
        if isinstance(node, ast.Assign)
        and isinstance(node.targets[0], ast.Name)
        and node.targets[0].id in {"RUN_ID", "OUTPUT_DIR", "PLOT_SUFFIX", "DATA_SUFFIX"}
    }
    assert assigned == {
        "RUN_ID": "id'with\"quotes",
        "OUTPUT_DIR": "/out",
        "PLOT_SUFFIX": ArtifactKind.PLOT.suffix,
        "DATA_SUFFIX": ArtifactKind.DATA.suffix,
    }


class Harness:
    """Runs the rendered wrapper with the host interpreter, standing in for the sandbox."""

    def __init__(self, tmp_path: Path):
        self.code_dir = tmp_path / "code"
        self.output_dir = tmp_path / "output"
        self.work_dir = tmp_path / "work"
        for d in (self.code_dir, self.output_dir, self.work_dir):
            d.mkdir()
        self.ctx = RunContext(
            run_id="run-1",
            temp_dir=self.output_dir,
            code_mount=str(self.code_dir),
            output_mount=str(self.output_dir),
        )

    def run(self, code: str) -> subprocess.CompletedProcess[str]:
        (self.code_dir / "user_code.py").write_text(code)
        (self.code_dir / "wrapper.py").write_text(render_wrapper(self.ctx))
        return subprocess.run(
            [sys.executable, str(self.code_dir / "wrapper.py")],
            cwd=self.work_dir,
            capture_output=True,
            text=True,
            timeout=120,
        )


@pytest.fixture
def harness(tmp_path: Path) -> Harness:
    pytest.importorskip("matplotlib")
    return Harness(tmp_path)


def test_harness_captures_stdout(harness: Harness) -> None:
    proc = harness.run("print('hello')")

    assert proc.returncode == 0
    assert "hello" in proc.stdout
    assert list(harness.output_dir.iterdir()) == []


def test_harness_swallows_user_exceptions(harness: Harness) -> None:
    proc = harness.run("print('before')\nraise ValueError('bad input')")

    assert proc.returncode == 0
    assert "before" in proc.stdout
    assert "Error: bad input" in proc.stdout.splitlines()


def test_harness_saves_open_figure(harness: Harness) -> None:
    proc = harness.run("import matplotlib.pyplot as plt\nplt.plot([1, 2, 3])\n")

    assert proc.returncode == 0
    assert (harness.output_dir / "run-1_plot.png").is_file()
    assert "Saved plot as run-1_plot.png" in proc.stdout


def test_harness_without_figure_writes_no_plot(harness: Harness) -> None:
    harness.run("import matplotlib.pyplot as plt\nx = 1\n")
    assert not (harness.output_dir / "run-1_plot.png").exists()


def test_harness_keeps_exactly_one_data_file(harness: Harness) -> None:
    code = "open('a.csv', 'w').write('a\\n1\\n')\nopen('b.csv', 'w').write('b\\n2\\n')\n"
    proc = harness.run(code)

    assert proc.returncode == 0
    assert [p.name for p in harness.output_dir.iterdir()] == ["run-1_data.csv"]
    assert (harness.output_dir / "run-1_data.csv").read_text() in {"a\n1\n", "b\n2\n"}
    assert list(harness.work_dir.glob("*.csv")) == []
