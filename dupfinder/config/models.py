"""Configuration schema models using Pydantic."""

import codecs
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from dupfinder.utils.hashing import DEFAULT_HASH_ALGORITHM, HASH_ALGORITHMS, digest_bits_for


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ReportFormat(str, Enum):
    """Report output formats."""

    TEXT = "text"
    JSON = "json"


class ReportSort(str, Enum):
    """Ordering applied to report entries before output."""

    NONE = "none"
    COUNT = "count"
    KEY = "key"


class DetectionConfig(BaseModel):
    """Settings for the detection runs themselves."""

    threshold: int = Field(
        1, ge=0, description="Report lines occurring strictly more than this many times"
    )
    stdin_sentinel: str = Field(
        "-", min_length=1, description="Source identifier that means standard input"
    )
    queue_size: int = Field(
        1,
        ge=0,
        description="Capacity of the reader-to-aggregator handoff queue (0 = unbounded)",
    )
    encoding: str = Field("utf-8", description="Text encoding used to decode sources")

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Reject encodings Python does not know about."""
        try:
            return codecs.lookup(v).name
        except LookupError:
            raise ValueError(f"Unknown text encoding: '{v}'")


class KeyConfig(BaseModel):
    """How raw lines are turned into comparison keys.

    Lines whose encoded length reaches ``long_line_threshold`` bytes are
    replaced by a digest. Two distinct long lines may then share a key; the
    probability of that is governed by the digest width.
    """

    long_line_threshold: int = Field(
        32, ge=1, description="Lines of at least this many bytes are hashed"
    )
    hash_algorithm: str = Field(
        DEFAULT_HASH_ALGORITHM, description="Digest used for long lines"
    )
    digest_bits: Optional[int] = Field(
        None, description="Digest width in bits (blake2b/blake2s only)"
    )

    @field_validator("hash_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        normalized = v.strip().lower().replace("-", "_")
        if normalized not in HASH_ALGORITHMS:
            raise ValueError(
                f"Unsupported hash algorithm '{v}'. "
                f"Choose one of: {', '.join(sorted(HASH_ALGORITHMS))}"
            )
        return normalized

    @model_validator(mode="after")
    def validate_digest_bits(self):
        """Only the blake2 family accepts a custom digest width."""
        digest_bits_for(self.hash_algorithm, self.digest_bits)
        return self

    @property
    def effective_digest_bits(self) -> int:
        """Digest width actually used for hashing."""
        return digest_bits_for(self.hash_algorithm, self.digest_bits)


class OutputConfig(BaseModel):
    """Report rendering settings."""

    format: ReportFormat = Field(ReportFormat.TEXT, description="Report format")
    sort: ReportSort = Field(ReportSort.NONE, description="Entry ordering in reports")

    model_config = {"use_enum_values": True, "validate_default": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Logging level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="Log output format")

    model_config = {"use_enum_values": True, "validate_default": True}


class AppConfig(BaseModel):
    """Root configuration model."""

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    keys: KeyConfig = Field(default_factory=KeyConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "forbid"}
