"""
Record model shared by every storage backend.

The wire names follow the file layout (`uuid`, `short_url`, `original_url`,
`correlation_id`, `user_id`); attribute names are accepted too, so backends
can build records either from decoded JSON lines or from keyword arguments.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class URLRecord(BaseModel):
    """One URL mapping.

    Attributes:
        id: Positive, strictly increasing per backend. Assigned at write time.
        short_url: The short code (base64 of the original URL).
        original_url: The long URL.
        correlation_id: Batch-import correlation key; never an identity.
        user_id: Owner of the record, used for per-user listings.

    Example:
        >>> rec = URLRecord(id=1, short_url="aHR0cHM6Ly9hLmNv", original_url="https://a.co")
        >>> rec.to_json()
        '{"uuid":1,"short_url":"aHR0cHM6Ly9hLmNv","original_url":"https://a.co"}'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[int] = Field(default=None, alias="uuid")
    correlation_id: Optional[str] = None
    short_url: Optional[str] = None
    original_url: Optional[str] = None
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire-format dict with empty optional fields omitted."""
        return {k: v for k, v in self.model_dump(by_alias=True).items() if v not in (None, "")}

    def to_json(self) -> str:
        """Compact single-line JSON, as stored by the file backend."""
        # Built from to_dict() so empty strings are dropped along with None.
        return URLRecord.model_validate(self.to_dict()).model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, raw: str) -> "URLRecord":
        return cls.model_validate_json(raw)
