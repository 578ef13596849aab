import re
from typing import Any, Literal

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def convert_keys(
    obj: Any, direction: Literal["snake_to_camel", "camel_to_snake"]
) -> Any:
    """
    Recursively converts dict keys between snake_case and camelCase.

    Documents are stored camelCase; dataclasses in this codebase are
    snake_case. Lists are walked, every other value is returned as is.
    """
    convert = snake_to_camel if direction == "snake_to_camel" else camel_to_snake
    if isinstance(obj, dict):
        return {
            convert(key) if isinstance(key, str) else key: convert_keys(value, direction)
            for key, value in obj.items()
        }
    if isinstance(obj, list):
        return [convert_keys(item, direction) for item in obj]
    return obj
