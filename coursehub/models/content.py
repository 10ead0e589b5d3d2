"""Module content variants.

Stored content is an open JSON object; only ``type`` drives behaviour.
Writes are backfilled with per-type defaults (``with_defaults``); reads go
through ``parse_content``, which maps unknown or legacy types to a lesson
instead of failing. Keys a variant does not model are carried through
untouched by ``content_view``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union
from urllib.parse import parse_qs, urlparse

ModuleType = Literal["lesson", "quiz", "video", "feedback"]
MODULE_TYPES: tuple[str, ...] = ("lesson", "quiz", "video", "feedback")


def normalize_type(raw: object) -> str:
    return raw if isinstance(raw, str) and raw in MODULE_TYPES else "lesson"


def embed_video_url(url: str) -> str:
    """Rewrite YouTube and Vimeo links to their embeddable form.

    Other hosts, and links whose id cannot be found, are returned unchanged.
    """
    if not url:
        return url
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    path_parts = [p for p in parsed.path.split("/") if p]

    video_id: str | None = None
    if host == "youtu.be":
        video_id = path_parts[0] if path_parts else None
    elif host.endswith("youtube.com"):
        if path_parts[:1] in (["embed"], ["shorts"]) and len(path_parts) > 1:
            video_id = path_parts[1]
        else:
            video_id = (parse_qs(parsed.query).get("v") or [None])[0]
    elif host.endswith("vimeo.com"):
        if path_parts[:1] == ["video"]:
            path_parts = path_parts[1:]
        video_id = path_parts[0] if path_parts else None
        if video_id:
            return f"https://player.vimeo.com/video/{video_id}"
        return url
    else:
        return url

    return f"https://www.youtube.com/embed/{video_id}" if video_id else url


def _str(value: object, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _opt_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True, slots=True)
class LessonPart:
    title: str
    type: Literal["text", "video"] = "text"
    body: str | None = None
    video_url: str | None = None

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> LessonPart:
        return LessonPart(
            title=_str(raw.get("title")),
            type="video" if raw.get("type") == "video" else "text",
            body=_opt_str(raw.get("body")),
            video_url=_opt_str(raw.get("videoUrl")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"title": self.title, "type": self.type}
        if self.body is not None:
            out["body"] = self.body
        if self.video_url is not None:
            out["videoUrl"] = self.video_url
        return out


@dataclass(frozen=True, slots=True)
class LessonContent:
    text: str = ""
    video_url: str | None = None
    parts: tuple[LessonPart, ...] = ()
    type: Literal["lesson"] = field(default="lesson", init=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type,
            "text": self.text,
            "parts": [p.to_dict() for p in self.parts],
        }
        if self.video_url is not None:
            out["videoUrl"] = self.video_url
        return out


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    question: str
    options: tuple[str, ...]
    correct_index: int

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> QuizQuestion:
        options = raw.get("options")
        index = raw.get("correctIndex")
        return QuizQuestion(
            question=_str(raw.get("question")),
            options=tuple(o for o in options if isinstance(o, str))
            if isinstance(options, list)
            else (),
            correct_index=index if isinstance(index, int) and index >= 0 else 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "correctIndex": self.correct_index,
        }


@dataclass(frozen=True, slots=True)
class QuizContent:
    questions: tuple[QuizQuestion, ...] = ()
    passing_score: int | None = None
    type: Literal["quiz"] = field(default="quiz", init=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type,
            "questions": [q.to_dict() for q in self.questions],
        }
        if self.passing_score is not None:
            out["passingScore"] = self.passing_score
        return out


@dataclass(frozen=True, slots=True)
class VideoContent:
    video_url: str = ""
    caption: str | None = None
    type: Literal["video"] = field(default="video", init=False)

    @property
    def embed_url(self) -> str:
        return embed_video_url(self.video_url)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type, "videoUrl": self.video_url}
        if self.caption is not None:
            out["caption"] = self.caption
        return out


@dataclass(frozen=True, slots=True)
class FeedbackContent:
    prompt: str = ""
    description: str | None = None
    type: Literal["feedback"] = field(default="feedback", init=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type, "prompt": self.prompt}
        if self.description is not None:
            out["description"] = self.description
        return out


ModuleContent = Union[LessonContent, QuizContent, VideoContent, FeedbackContent]


def _dicts(value: object) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def parse_content(raw: dict[str, Any] | None) -> ModuleContent:
    """Read-side parse. Never raises: bad shapes degrade to defaults."""
    raw = raw or {}
    kind = normalize_type(raw.get("type"))

    if kind == "quiz":
        score = raw.get("passingScore")
        return QuizContent(
            questions=tuple(QuizQuestion.from_dict(q) for q in _dicts(raw.get("questions"))),
            passing_score=score if isinstance(score, int) and 0 <= score <= 100 else None,
        )
    if kind == "video":
        return VideoContent(
            video_url=_str(raw.get("videoUrl")), caption=_opt_str(raw.get("caption"))
        )
    if kind == "feedback":
        return FeedbackContent(
            prompt=_str(raw.get("prompt")),
            description=_opt_str(raw.get("description")),
        )
    return LessonContent(
        text=_str(raw.get("text")),
        video_url=_opt_str(raw.get("videoUrl")),
        parts=tuple(LessonPart.from_dict(p) for p in _dicts(raw.get("parts"))),
    )


_DEFAULTS: dict[str, dict[str, Any]] = {
    "lesson": {"text": "", "parts": []},
    "quiz": {"questions": []},
    "video": {"videoUrl": ""},
    "feedback": {"prompt": ""},
}


def with_defaults(module_type: str, content: dict[str, Any] | None) -> dict[str, Any]:
    """Backfill a newly created module's content with its type's defaults.

    Existing keys win; ``type`` is only filled in when absent.
    """
    out = dict(content or {})
    if not out.get("type"):
        out["type"] = module_type
    for key, default in _DEFAULTS.get(module_type, {}).items():
        if key not in out:
            out[key] = list(default) if isinstance(default, list) else default
    return out


def content_view(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Normalized content for API output, preserving unmodelled keys."""
    variant = parse_content(raw)
    view = {**(raw or {}), **variant.to_dict()}
    if isinstance(variant, VideoContent) and variant.video_url:
        view["embedUrl"] = variant.embed_url
    return view
