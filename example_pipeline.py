"""Example framedelta pipeline config.

Use with `framedelta run --input FRAMES --output OUT --config example_pipeline.py:PIPELINE`.
The input and output folders given on the command line replace the roots below.
"""

from framedelta.config.schema import (
    IngestConfig,
    MaskConfig,
    OutputConfig,
    PipelineConfig,
)


FRAMES_DIR = "./frames"
DELTAS_DIR = "./deltas"

PIPELINE = PipelineConfig(
    ingest=IngestConfig(
        root=FRAMES_DIR,
        extensions=(".jpg",),
    ),
    output=OutputConfig(
        root=DELTAS_DIR,
        clear_existing=True,
    ),
    mask=MaskConfig(
        threshold=40.0,
        blur_iterations=4,
    ),
    chunk_size=96,
)
