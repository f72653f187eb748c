from __future__ import annotations

from typing import Any

import orjson


def dumps(obj: Any, *, indent: int = 2) -> bytes:
    option = orjson.OPT_INDENT_2 if indent == 2 else 0
    return orjson.dumps(obj, option=option)


def loads(data: bytes | bytearray | str) -> Any:
    return orjson.loads(data)


__all__ = ["dumps", "loads"]
