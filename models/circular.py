# models/circular.py

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Iterator, Optional, Any


class CircularType(str, Enum):
    Y2023 = "2023"
    Y2024 = "2024"

    @property
    def storage_key(self) -> str:
        return f"master_circular_{self.value}"


class CircularMode(str, Enum):
    MASTER = "master"
    NORMAL = "normal"


class AnnexureType(str, Enum):
    FORM = "form"
    NON_FORM = "non-form"


@dataclass
class Clause:
    clause_number: str
    clause_title: str = ""
    clause_content: str = ""
    clauses: List["Clause"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clause_number": self.clause_number,
            "clause_title": self.clause_title,
            "clause_content": self.clause_content,
            "clauses": [child.to_dict() for child in self.clauses],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Clause":
        return cls(
            clause_number=str(data["clause_number"]),
            clause_title=data.get("clause_title") or "",
            clause_content=data.get("clause_content") or "",
            clauses=[cls.from_dict(child) for child in data.get("clauses") or []],
        )


@dataclass
class Chapter:
    chapter_number: str
    chapter_title: str
    chapter_content: str = ""
    clauses: List[Clause] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chapter_number": self.chapter_number,
            "chapter_title": self.chapter_title,
            "chapter_content": self.chapter_content,
            "clauses": [clause.to_dict() for clause in self.clauses],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chapter":
        return cls(
            chapter_number=str(data["chapter_number"]),
            chapter_title=data.get("chapter_title") or "",
            chapter_content=data.get("chapter_content") or "",
            clauses=[Clause.from_dict(c) for c in data.get("clauses") or []],
        )


@dataclass
class Annexure:
    annexure_title: str
    annexure_content: str = ""
    annexure_type: AnnexureType = AnnexureType.NON_FORM
    clauses: List[Clause] = field(default_factory=list)

    @property
    def accepts_clauses(self) -> bool:
        """Only non-form annexures carry a clause list"""
        return self.annexure_type == AnnexureType.NON_FORM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "annexure_title": self.annexure_title,
            "annexure_content": self.annexure_content,
            "annexure_type": self.annexure_type.value,
            "clauses": [clause.to_dict() for clause in self.clauses],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Annexure":
        return cls(
            annexure_title=data.get("annexure_title") or "",
            annexure_content=data.get("annexure_content") or "",
            annexure_type=AnnexureType(data.get("annexure_type") or "non-form"),
            clauses=[Clause.from_dict(c) for c in data.get("clauses") or []],
        )


@dataclass
class CircularContent:
    """A master circular: chapters plus annexures"""

    content: List[Chapter] = field(default_factory=list)
    annexures: List[Annexure] = field(default_factory=list)

    def find_chapter_index(self, chapter_number: str) -> int:
        for idx, chapter in enumerate(self.content):
            if chapter.chapter_number == chapter_number:
                return idx
        return -1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": [chapter.to_dict() for chapter in self.content],
            "annexures": [annexure.to_dict() for annexure in self.annexures],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CircularContent":
        data = data or {}
        return cls(
            content=[Chapter.from_dict(c) for c in data.get("content") or []],
            annexures=[Annexure.from_dict(a) for a in data.get("annexures") or []],
        )


@dataclass
class NormalCircularContent:
    """A normal circular: clauses directly at the root, no chapters"""

    clauses: List[Clause] = field(default_factory=list)
    annexures: List[Annexure] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clauses": [clause.to_dict() for clause in self.clauses],
            "annexures": [annexure.to_dict() for annexure in self.annexures],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NormalCircularContent":
        data = data or {}
        return cls(
            clauses=[Clause.from_dict(c) for c in data.get("clauses") or []],
            annexures=[Annexure.from_dict(a) for a in data.get("annexures") or []],
        )


@dataclass
class AllCircularsData:
    master_circulars: Dict[CircularType, CircularContent] = field(
        default_factory=lambda: {ct: CircularContent() for ct in CircularType}
    )
    normal_circulars: Dict[str, NormalCircularContent] = field(default_factory=dict)

    def master(self, circular_type: CircularType) -> CircularContent:
        return self.master_circulars[CircularType(circular_type)]

    def iter_annexures(self) -> Iterator[Annexure]:
        for circular in self.master_circulars.values():
            yield from circular.annexures
        for circular in self.normal_circulars.values():
            yield from circular.annexures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "master_circulars": {
                ct.storage_key: self.master_circulars[ct].to_dict()
                for ct in CircularType
            },
            "normal_circulars": {
                name: circular.to_dict()
                for name, circular in self.normal_circulars.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AllCircularsData":
        masters = data.get("master_circulars") or {}
        normals = data.get("normal_circulars") or {}
        return cls(
            master_circulars={
                ct: CircularContent.from_dict(masters.get(ct.storage_key))
                for ct in CircularType
            },
            normal_circulars={
                name: NormalCircularContent.from_dict(content)
                for name, content in normals.items()
            },
        )


@dataclass
class CircularStats:
    chapters_count: int = 0
    clauses_count: int = 0
    annexures_count: int = 0
