"""
Text content moderation (msg_sec_check) arguments and verdicts.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional

from .errors import ArgumentError

MAX_CONTENT_LENGTH = 2500


class Scene(IntEnum):
    PROFILE = 1
    COMMENT = 2
    FORUM = 3
    SOCIAL_LOG = 4

    @property
    def description(self) -> str:
        return _SCENE_DESCRIPTIONS[self]


_SCENE_DESCRIPTIONS = {
    Scene.PROFILE: "profile",
    Scene.COMMENT: "comment",
    Scene.FORUM: "forum",
    Scene.SOCIAL_LOG: "social log",
}


class Suggest(str, Enum):
    RISKY = "risky"
    PASS = "pass"
    REVIEW = "review"

    @classmethod
    def parse(cls, value) -> "Suggest":
        """Case-insensitive; anything unknown needs review."""
        try:
            return cls(value.lower())
        except (ValueError, AttributeError):
            return cls.REVIEW

    @property
    def priority(self) -> int:
        return {Suggest.RISKY: 1, Suggest.REVIEW: 2, Suggest.PASS: 3}[self]


class Label(IntEnum):
    NORMAL = 100
    AD = 10001
    POLITICS = 20001
    PORN = 20002
    ABUSE = 20003
    ILLEGAL = 20006
    FRAUD = 20008
    VULGAR = 20012
    COPYRIGHT = 20013
    OTHER = 21000

    @classmethod
    def from_value(cls, value: int) -> Optional["Label"]:
        try:
            return cls(value)
        except ValueError:
            return None

    def is_normal(self) -> bool:
        return self is Label.NORMAL

    def is_violation(self) -> bool:
        return not self.is_normal()


@dataclass(frozen=True)
class MsgSecCheckArgs:
    content: Optional[str] = None
    scene: Optional[Scene] = None
    openid: Optional[str] = None
    version: int = 2
    title: Optional[str] = None
    nickname: Optional[str] = None
    signature: Optional[str] = None

    def __post_init__(self):
        for name in ("content", "scene", "openid"):
            if getattr(self, name) in (None, ""):
                raise ArgumentError(name)
        try:
            object.__setattr__(self, "scene", Scene(self.scene))
        except ValueError:
            raise ArgumentError("scene", f"must be one of {[int(s) for s in Scene]}")

        if len(self.content) > MAX_CONTENT_LENGTH:
            raise ArgumentError(
                "content", f"must be at most {MAX_CONTENT_LENGTH} characters"
            )
        if self.signature is not None and self.scene is not Scene.PROFILE:
            raise ArgumentError("signature", "is only valid in the profile scene")

    def to_body(self) -> dict[str, object]:
        body: dict[str, object] = {
            "content": self.content,
            "version": self.version,
            "scene": int(self.scene),
            "openid": self.openid,
        }
        for name in ("title", "nickname", "signature"):
            value = getattr(self, name)
            if value is not None:
                body[name] = value
        return body


@dataclass(frozen=True)
class DetailResult:
    strategy: str
    errcode: int
    suggest: Optional[Suggest] = None
    label: Optional[Label] = None
    keyword: Optional[str] = None
    prob: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DetailResult":
        suggest = data.get("suggest")
        label = data.get("label")
        return cls(
            strategy=data.get("strategy", ""),
            errcode=data.get("errcode", 0),
            suggest=Suggest.parse(suggest) if suggest is not None else None,
            label=Label.from_value(label) if label is not None else None,
            keyword=data.get("keyword"),
            prob=data.get("prob"),
        )


@dataclass(frozen=True)
class MsgSecCheckResult:
    errcode: int
    errmsg: str
    suggest: Optional[Suggest] = None
    label: Optional[Label] = None
    detail: list[DetailResult] = field(default_factory=list)
    trace_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "MsgSecCheckResult":
        result = data.get("result") or {}
        suggest = result.get("suggest")
        label = result.get("label")
        return cls(
            errcode=data.get("errcode", 0),
            errmsg=data.get("errmsg", ""),
            suggest=Suggest.parse(suggest) if suggest is not None else None,
            label=Label.from_value(label) if label is not None else None,
            detail=[DetailResult.from_dict(d) for d in data.get("detail") or []],
            trace_id=data.get("trace_id"),
        )

    def is_success(self) -> bool:
        return self.errcode == 0

    def is_pass(self) -> bool:
        return self.suggest is Suggest.PASS

    def is_risky(self) -> bool:
        return self.suggest is Suggest.RISKY

    def needs_review(self) -> bool:
        return self.suggest is Suggest.REVIEW

    def valid_details(self) -> list[DetailResult]:
        return [d for d in self.detail if d.errcode == 0]

    def to_dict(self) -> dict:
        return {
            "errcode": self.errcode,
            "errmsg": self.errmsg,
            "suggest": self.suggest.value if self.suggest else None,
            "label": int(self.label) if self.label is not None else None,
            "trace_id": self.trace_id,
        }
