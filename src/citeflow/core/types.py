"""Type aliases used across citeflow."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
