"""Parse options and their YAML loader.

Options file format (all keys optional):

    number: decimal   # decimal | float | fraction
"""

from collections.abc import Callable
from decimal import Decimal
from fractions import Fraction
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

NUMBER_TYPES: dict[str, Callable[[str], Any]] = {
    "decimal": Decimal,
    "float": float,
    "fraction": Fraction,
}


class ConfigError(Exception):
    pass


class ParseOptions(BaseModel):
    """How numeric text becomes values.

    ``number`` is either one of the names in ``NUMBER_TYPES`` or any callable
    taking the literal text (thousands separators removed), such as a
    custom fixed-point type.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    number: Literal["decimal", "float", "fraction"] | Callable[[str], Any] = "decimal"

    @property
    def number_type(self) -> Callable[[str], Any]:
        if isinstance(self.number, str):
            return NUMBER_TYPES[self.number]
        return self.number


def load_options(path: str | Path) -> ParseOptions:
    """Load ``ParseOptions`` from a YAML file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping, got {type(data).__name__}")

    try:
        return ParseOptions.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e
