from __future__ import annotations

from .graphconfig import StackGraphConfig
from .stackgraph import StackGraph

__all__ = [
    "StackGraph",
    "StackGraphConfig",
]
