"""
Type definitions for the detection module.

This module defines the data structures shared by detection and IC identification:
raw model detections, classified components and the per-IC identification record.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum

import numpy as np


# Normalized (x, y) or (width, height) pair, each value in [0, 1]
NormalizedPair = tuple[float, float]


class ComponentType(str, Enum):
    """Semantic component categories the detectors can report."""

    IC = "IC"
    CAPACITOR = "Capacitor"
    RESISTOR = "Resistor"
    OTHER = "Other"

    @property
    def short_code(self) -> str:
        """Prefix used for internal names, e.g. "CAP" in "CAP 3"."""
        return _SHORT_CODES[self]


_SHORT_CODES = {
    ComponentType.IC: "IC",
    ComponentType.CAPACITOR: "CAP",
    ComponentType.RESISTOR: "RES",
    ComponentType.OTHER: "OTHER",
}


class ICInfoState(str, Enum):
    """Identification progress of a single IC."""

    UNLOADED = "unloaded"
    LOADED = "loaded"
    NOT_AVAILABLE = "notAvailable"
    WEB_LOADED = "webLoaded"
    NO_TEXT = "noText"


class InvalidStateTransition(ValueError):
    """Raised when an ICInfo state change is not allowed."""


# States reachable from UNLOADED once identification has produced a result
_RESULT_STATES = frozenset({ICInfoState.LOADED, ICInfoState.NOT_AVAILABLE, ICInfoState.NO_TEXT})


@dataclass(frozen=True)
class RawDetection:
    """A single decoded detector prediction.

    Attributes:
        x: Left edge, normalized to the model input width
        y: Top edge, normalized to the model input height
        width: Box width, normalized
        height: Box height, normalized
        class_index: Index of the highest scoring class channel
        confidence: Score of that class
    """

    x: float
    y: float
    width: float
    height: float
    class_index: int
    confidence: float

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_xywh(self) -> tuple[float, float, float, float]:
        """Return (x, y, w, h) tuple."""
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class ComponentImageInfo:
    """Where a component sits in the board image.

    Attributes:
        location: Normalized top-left corner (x, y)
        size: Normalized (width, height)
        sub_image: Cropped pixels of the component, only populated for ICs
    """

    location: NormalizedPair
    size: NormalizedPair
    sub_image: np.ndarray | None = field(default=None, repr=False, compare=False)

    def with_sub_image(self, sub_image: np.ndarray | None) -> ComponentImageInfo:
        return replace(self, sub_image=sub_image)

    def to_dict(self) -> dict:
        return {
            "location": list(self.location),
            "size": list(self.size),
        }

    @classmethod
    def from_dict(cls, d: dict) -> ComponentImageInfo:
        return cls(location=tuple(d["location"]), size=tuple(d["size"]))


@dataclass(frozen=True)
class ComponentInfo:
    """A classified component on the board.

    The id is generated once and is the join key between the detection
    and identification records of an IC.
    """

    component_type: ComponentType
    image_info: ComponentImageInfo
    internal_name: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def renamed(self, internal_name: str) -> ComponentInfo:
        return replace(self, internal_name=internal_name)

    def with_image_info(self, image_info: ComponentImageInfo) -> ComponentInfo:
        return replace(self, image_info=image_info)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.component_type.value,
            "internal_name": self.internal_name,
            **self.image_info.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> ComponentInfo:
        return cls(
            component_type=ComponentType(d["type"]),
            image_info=ComponentImageInfo.from_dict(d),
            internal_name=d.get("internal_name", ""),
            id=d["id"],
        )


@dataclass
class ICInfo:
    """Identification record for one IC.

    State transitions:
        unloaded -> loaded | notAvailable | noText   (identification result)
        notAvailable -> webLoaded -> notAvailable    (manual web search)

    Attributes:
        base_info: The detected component this record belongs to
        information_description: Ordered display key/value pairs
        raw_identified_text: OCR lines the description was derived from
        info_state: Current identification state
        note: Free-form user note
        information_url: Page found through a manual web search
    """

    base_info: ComponentInfo
    information_description: dict[str, str] = field(default_factory=dict)
    raw_identified_text: list[str] | None = None
    info_state: ICInfoState = ICInfoState.UNLOADED
    note: str | None = None
    information_url: str | None = None

    @property
    def id(self) -> str:
        return self.base_info.id

    @property
    def sub_image(self) -> np.ndarray | None:
        return self.base_info.image_info.sub_image

    def set_sub_image(self, sub_image: np.ndarray | None) -> None:
        self.base_info = self.base_info.with_image_info(
            self.base_info.image_info.with_sub_image(sub_image)
        )

    def record_result(
        self,
        state: ICInfoState,
        description: dict[str, str] | None = None,
        raw_text: list[str] | None = None,
    ) -> None:
        """Store the outcome of an identification run.

        Raises:
            InvalidStateTransition: If the IC is not unloaded or the target
                state is not an identification result.
        """
        if self.info_state != ICInfoState.UNLOADED or state not in _RESULT_STATES:
            raise InvalidStateTransition(
                f"{self.base_info.internal_name or self.id}: "
                f"cannot move from {self.info_state.value} to {state.value}"
            )
        self.info_state = state
        if description is not None:
            self.information_description = dict(description)
        if raw_text is not None:
            self.raw_identified_text = list(raw_text)

    def mark_web_loaded(self, url: str) -> None:
        if self.info_state != ICInfoState.NOT_AVAILABLE:
            raise InvalidStateTransition(
                f"web result needs state notAvailable, got {self.info_state.value}"
            )
        self.info_state = ICInfoState.WEB_LOADED
        self.information_url = url

    def clear_web_loaded(self) -> None:
        if self.info_state != ICInfoState.WEB_LOADED:
            raise InvalidStateTransition(
                f"no web result to clear in state {self.info_state.value}"
            )
        self.info_state = ICInfoState.NOT_AVAILABLE
        self.information_url = None

    def set_note(self, note: str | None) -> None:
        note = (note or "").strip()
        self.note = note or None

    def clear_note(self) -> None:
        self.note = None

    def to_dict(self) -> dict:
        return {
            "component": self.base_info.to_dict(),
            "state": self.info_state.value,
            "information": dict(self.information_description),
            "raw_text": self.raw_identified_text,
            "note": self.note,
            "information_url": self.information_url,
        }

    @classmethod
    def from_dict(cls, d: dict) -> ICInfo:
        return cls(
            base_info=ComponentInfo.from_dict(d["component"]),
            information_description=dict(d.get("information") or {}),
            raw_identified_text=d.get("raw_text"),
            info_state=ICInfoState(d.get("state", ICInfoState.UNLOADED.value)),
            note=d.get("note"),
            information_url=d.get("information_url"),
        )


@dataclass
class DetectionSet:
    """Classified components of one detection run plus the ICs among them."""

    components: list[ComponentInfo] = field(default_factory=list)
    ics: list[ICInfo] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.components)

    def merged(self, other: DetectionSet) -> DetectionSet:
        """Return a new set holding this set's items followed by ``other``'s."""
        return DetectionSet(
            components=[*self.components, *other.components],
            ics=[*self.ics, *other.ics],
        )

    def of_type(self, component_type: ComponentType) -> list[ComponentInfo]:
        return [c for c in self.components if c.component_type == component_type]

    def to_dict(self) -> dict:
        return {
            "components": [c.to_dict() for c in self.components],
            "ics": [ic.to_dict() for ic in self.ics],
        }
