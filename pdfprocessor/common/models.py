from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

AccountKey = str


@dataclass(frozen=True)
class TextFragment:
    """
    One positioned text run as reported by the PDF text extraction.
    Coordinates use a bottom-left origin in PDF user-space units.
    """
    text: str
    x: float
    y: float
    page: int


@dataclass(frozen=True)
class Line:
    """Fragments sharing a printed baseline, ordered left to right."""
    page: int
    y: float
    fragments: Tuple[TextFragment, ...]

    @property
    def text(self) -> str:
        return " ".join(f.text.strip() for f in self.fragments if f.text.strip())


@dataclass(frozen=True)
class Record:
    """
    Finalized transaction. ``fields`` is a read-only mapping column -> text,
    in the column order of the layout profile.
    """
    fields: Mapping[str, str]
    page: int
    confidence: Optional[str] = None  # set only when an amount heuristic ran
    notes: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'fields', MappingProxyType(dict(self.fields)))

    def get(self, name: str, default: str = "") -> str:
        return self.fields.get(name, default)

    def to_dict(self) -> Dict[str, str]:
        return dict(self.fields)


@dataclass(frozen=True)
class PendingRecord:
    """
    A record still accepting continuation lines. Immutable: every merge
    returns a new instance, so a state snapshot never changes under the caller.
    """
    values: Tuple[Tuple[str, str], ...]
    page: int
    line_count: int = 1
    confidence: Optional[str] = None
    notes: Tuple[str, ...] = ()

    @classmethod
    def open(cls, values: Mapping[str, str], page: int,
             confidence: Optional[str] = None, notes: Sequence[str] = ()) -> "PendingRecord":
        return cls(
            values=tuple((k, v or "") for k, v in values.items()),
            page=page,
            confidence=confidence,
            notes=tuple(notes),
        )

    def get(self, name: str, default: str = "") -> str:
        for key, value in self.values:
            if key == name:
                return value
        return default

    def extend(self, extraction: Mapping[str, str],
               columns: Optional[Sequence[str]] = None) -> "PendingRecord":
        """
        Append each non-empty column text of a continuation line to the
        accumulated value, separated by one space.
        """
        allowed = set(columns) if columns is not None else None
        merged = []
        seen = set()
        for key, acc in self.values:
            seen.add(key)
            text = (extraction.get(key) or "").strip()
            if text and (allowed is None or key in allowed):
                acc = f"{acc} {text}" if acc else text
            merged.append((key, acc))
        for key, text in extraction.items():
            if key in seen or not text or (allowed is not None and key not in allowed):
                continue
            merged.append((key, text.strip()))
        return PendingRecord(
            values=tuple(merged),
            page=self.page,
            line_count=self.line_count + 1,
            confidence=self.confidence,
            notes=self.notes,
        )

    def finalize(self) -> Record:
        return Record(fields=dict(self.values), page=self.page,
                      confidence=self.confidence, notes=self.notes)


@dataclass
class DocumentResult:
    """Records of one document, bucketed per account key in insertion order."""
    source_file: str
    profile: str
    accounts: Dict[AccountKey, List[Record]] = field(default_factory=dict)
    pages_skipped: List[int] = field(default_factory=list)

    def add(self, account_key: AccountKey, record: Record) -> None:
        self.accounts.setdefault(account_key, []).append(record)

    def open_account(self, account_key: AccountKey) -> None:
        self.accounts.setdefault(account_key, [])

    @property
    def record_count(self) -> int:
        return sum(len(r) for r in self.accounts.values())

    @property
    def is_empty(self) -> bool:
        return self.record_count == 0


@dataclass(frozen=True)
class FailedDocument:
    """A document of a batch that could not be parsed."""
    source_file: str
    error: str
    error_type: str

    def to_dict(self):
        return {
            'source_file': self.source_file,
            'error': self.error,
            'error_type': self.error_type,
        }


@dataclass
class ConsolidatedResult:
    """
    Records of a whole batch per account key. ``counts`` maps
    (account_key, source_file) to the number of records that file contributed.
    """
    accounts: Dict[AccountKey, List[Record]] = field(default_factory=dict)
    counts: Dict[Tuple[AccountKey, str], int] = field(default_factory=dict)
    failed: List[FailedDocument] = field(default_factory=list)
    origins: Dict[AccountKey, List[str]] = field(default_factory=dict)

    @property
    def record_count(self) -> int:
        return sum(len(r) for r in self.accounts.values())
