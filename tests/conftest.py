from __future__ import annotations

import sys
from pathlib import Path

import pytest

_START = Path(__file__).resolve().parent
_repo_root = _START
while _repo_root != _repo_root.parent and not (_repo_root / "curve_canvas" / "__init__.py").exists():
    _repo_root = _repo_root.parent

sys.path.insert(0, str(_repo_root))


@pytest.fixture
def canvas():
    from curve_canvas import GraphCanvas

    return GraphCanvas(width=400, height=300)
