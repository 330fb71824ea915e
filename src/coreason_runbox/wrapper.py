# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runbox

"""Wrapper harness executed as the sandbox entry command.

The harness buffers stdout, imports ``user_code`` from the code mount, and on
completion relocates artifacts into the shared output mount under names
prefixed by the run id:

* an open matplotlib figure is saved to ``{run_id}_plot.png``;
* every file matching the data glob in the working directory is moved to
  ``{run_id}_data.csv``. Each move overwrites the previous one, so only the
  last match in ``glob`` order survives.

Exceptions raised by user code are printed as ``Error: <message>`` into the
captured output and the harness still exits 0. Callers detect user-code
failures from the output text only.
"""

from string import Template

from coreason_runbox.models import ArtifactKind, RunContext

WRAPPER_TEMPLATE = Template(
    """\
import glob
import shutil
import sys
from io import StringIO

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

RUN_ID = $run_id
OUTPUT_DIR = $output_dir
PLOT_SUFFIX = $plot_suffix
DATA_SUFFIX = $data_suffix
DATA_GLOB = $data_glob

# Capture print output
output_buffer = StringIO()
sys.stdout = output_buffer

try:
    import user_code

    if plt.get_fignums():
        print("Found plot, saving...")
        plt.savefig(f"{OUTPUT_DIR}/{RUN_ID}{PLOT_SUFFIX}")
        print(f"Saved plot as {RUN_ID}{PLOT_SUFFIX}")

    data_files = glob.glob(DATA_GLOB)
    if data_files:
        print(f"Found CSV files: {data_files}")
        for data_file in data_files:
            output_path = f"{OUTPUT_DIR}/{RUN_ID}{DATA_SUFFIX}"
            shutil.move(data_file, output_path)
            print(f"Moved {data_file} to {output_path}")

except Exception as e:
    print(f"Error: {str(e)}")

# Restore stdout and emit the captured output
sys.stdout = sys.__stdout__
print(output_buffer.getvalue())
"""
)


def render_wrapper(ctx: RunContext, data_glob: str = "*.csv") -> str:
    """Render the wrapper harness for a run.

    Args:
        ctx: The run the harness belongs to.
        data_glob: Pattern of tabular export files collected from the working directory.

    Returns:
        str: Python source of the harness.
    """
    return WRAPPER_TEMPLATE.substitute(
        run_id=repr(ctx.run_id),
        output_dir=repr(ctx.output_mount),
        plot_suffix=repr(ArtifactKind.PLOT.suffix),
        data_suffix=repr(ArtifactKind.DATA.suffix),
        data_glob=repr(data_glob),
    )
