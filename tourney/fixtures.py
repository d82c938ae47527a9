"""Static tournament data shipped as JSON: the course card and the Stableford draw."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

DATA_DIR = Path(__file__).resolve().parent / "DATA"
COURSE_PATH = DATA_DIR / "course.json"
DRAW_PATH = DATA_DIR / "draw.json"


@dataclass(frozen=True)
class CourseHole:
    hole_number: int
    par: int
    stroke_index: int


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def parse_course(payload: dict[str, Any]) -> tuple[CourseHole, ...]:
    holes = [
        CourseHole(
            hole_number=int(entry["hole_number"]),
            par=int(entry["par"]),
            stroke_index=int(entry["stroke_index"]),
        )
        for entry in payload.get("holes") or []
    ]
    return tuple(sorted(holes, key=lambda hole: hole.hole_number))


@lru_cache(maxsize=None)
def load_course(path: Path = COURSE_PATH) -> tuple[CourseHole, ...]:
    return parse_course(_read_json(path))


@lru_cache(maxsize=None)
def load_draw(path: Path = DRAW_PATH) -> dict[str, Any]:
    return _read_json(path)


def course_par(course: tuple[CourseHole, ...]) -> int:
    return sum(hole.par for hole in course)
