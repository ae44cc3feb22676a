"""
Mini-program code (wxacode) arguments and result.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .errors import ArgumentError

MAX_PATH_LENGTH = 1024
MIN_WIDTH = 280
MAX_WIDTH = 1280


class EnvVersion(str, Enum):
    RELEASE = "release"
    TRIAL = "trial"
    DEVELOP = "develop"


@dataclass(frozen=True)
class Rgb:
    r: int
    g: int
    b: int

    def to_dict(self) -> dict[str, int]:
        return {"r": self.r, "g": self.g, "b": self.b}


@dataclass(frozen=True)
class QrCodeArgs:
    path: Optional[str] = None
    width: Optional[int] = None
    auto_color: Optional[bool] = None
    line_color: Optional[Rgb] = None
    is_hyaline: Optional[bool] = None
    env_version: Optional[EnvVersion] = None

    def __post_init__(self):
        if not self.path:
            raise ArgumentError("path")
        if len(self.path) > MAX_PATH_LENGTH:
            raise ArgumentError(
                "path", f"must be at most {MAX_PATH_LENGTH} characters"
            )
        if self.width is not None and not MIN_WIDTH <= self.width <= MAX_WIDTH:
            raise ArgumentError(
                "width", f"must be between {MIN_WIDTH} and {MAX_WIDTH}"
            )
        if self.env_version is not None:
            # accept plain strings too
            try:
                version = EnvVersion(self.env_version)
            except ValueError:
                raise ArgumentError(
                    "env_version", f"must be one of {[v.value for v in EnvVersion]}"
                )
            object.__setattr__(self, "env_version", version)

    def to_body(self) -> dict[str, object]:
        body: dict[str, object] = {"path": self.path}
        if self.width is not None:
            body["width"] = self.width
        if self.auto_color is not None:
            body["auto_color"] = self.auto_color
        if self.line_color is not None:
            body["line_color"] = self.line_color.to_dict()
        if self.is_hyaline is not None:
            body["is_hyaline"] = self.is_hyaline
        if self.env_version is not None:
            body["env_version"] = self.env_version.value
        return body


@dataclass(frozen=True)
class QrCode:
    buffer: bytes

    def save(self, path: Union[str, Path]) -> Path:
        target = Path(path)
        target.write_bytes(self.buffer)
        return target
