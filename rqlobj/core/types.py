"""Shared core type aliases used across contracts, queries, and ports."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

Scalar = Any
Values = List[Scalar]
KeyMap = Mapping[str, Scalar]

RowMapping = Dict[str, Any]
Row = List[Any]
MaybeRow = Optional[Row]

Decoder = Callable[[Any], Any]
