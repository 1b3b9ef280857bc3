from pathlib import Path
from typing import List, Optional

import pytest

from pdf_compress_api.config import RuntimeConfig
from pdf_compress_api.engine.ghostscript import EngineResult
from pdf_compress_api.engine.presets import Recipe

MB = 1024 * 1024


def make_file(path: Path, size: int) -> Path:
    """Create a sparse file of exactly ``size`` bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as handle:
        handle.truncate(size)
    return path


class FakeInvoker:
    """Stands in for Ghostscript: records recipes and optionally writes output."""

    def __init__(self, result: Optional[EngineResult] = None, output_size: Optional[int] = None):
        self.result = result or EngineResult(exit_succeeded=True)
        self.output_size = output_size
        self.recipes: List[Recipe] = []

    def __call__(self, recipe: Recipe) -> EngineResult:
        self.recipes.append(recipe)
        if self.output_size is not None:
            make_file(recipe.output_path, self.output_size)
        return self.result


@pytest.fixture
def runtime_config(tmp_path) -> RuntimeConfig:
    return RuntimeConfig(
        upload_folder=tmp_path / "uploads",
        output_folder=tmp_path / "outputs",
        rate_limit_max_requests=100,
        pdf_precheck_enabled=False,
    )
