from __future__ import annotations

import codecs
import typing as t
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class UsageError(ValueError):
    """Invalid invocation: bad arguments, missing input directory, bad config."""


class ConfigError(UsageError):
    """Raised when a configuration file cannot be read or fails validation."""


class FileProcessingError(Exception):
    """An I/O failure while deduplicating one file.

    Carries the offending path so batch callers can report it and move on.
    """

    def __init__(self, path: Path, cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"{self.path}: {cause}")


@dataclass(frozen=True)
class ProcessingRequest:
    input_path: Path
    output_path: t.Optional[Path] = None


@dataclass(frozen=True)
class EncodingDecision:
    label: t.Optional[str]
    encoding: str
    confidence: float = 0.0
    fallback: bool = False


@dataclass
class Stats:
    total_lines: int = 0
    duplicate_lines: int = 0
    lines_written: int = 0
    duration: float = 0.0

    def merge(self, other: "Stats") -> None:
        # duration is measured separately for the whole run
        self.total_lines += other.total_lines
        self.duplicate_lines += other.duplicate_lines
        self.lines_written += other.lines_written


@dataclass
class RunStats:
    totals: Stats = field(default_factory=Stats)
    files_processed: int = 0
    files_failed: int = 0
    duration: float = 0.0

    def add(self, stats: Stats) -> None:
        self.totals.merge(stats)
        self.files_processed += 1

    def fail(self) -> None:
        self.files_failed += 1


class DetectionSettings(BaseModel):
    sample_size: t.Optional[int] = Field(
        default=1024 * 1024,
        ge=1,
        description="Bytes sampled for encoding detection (None = whole file)",
    )
    default_encoding: str = Field(default="utf-8", description="Used when detection is inconclusive")
    min_confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @field_validator("default_encoding")
    @classmethod
    def validate_default_encoding(cls, v):
        try:
            return codecs.lookup(v).name
        except LookupError:
            raise ValueError(f"unknown encoding: {v}")


class ReadingSettings(BaseModel):
    chunk_size: int = Field(default=65536, ge=1, description="Raw bytes decoded per read")


class WalkSettings(BaseModel):
    ignore: t.List[str] = Field(default_factory=list)
    include_hidden: bool = True
    use_ignore_files: bool = Field(default=True, description="Honor .ignore and, inside git work trees, .gitignore files")


class OutputSettings(BaseModel):
    layout: t.Literal["flat", "mirror"] = "flat"


class ProgressSettings(BaseModel):
    enabled: bool = True


class Settings(BaseModel):
    """Resolved runtime settings (config file merged with CLI overrides)."""

    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    reading: ReadingSettings = Field(default_factory=ReadingSettings)
    walk: WalkSettings = Field(default_factory=WalkSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    progress: ProgressSettings = Field(default_factory=ProgressSettings)
