"""Domain models shared by the storage facade."""

from pydantic import BaseModel, Field


class AdmissionPolicy(BaseModel, frozen=True):
    """Size and content-type limits applied to every write."""

    max_size: int = Field(gt=0)
    allowed_content_types: tuple[str, ...] = ()

    @property
    def max_size_mb(self) -> float:
        return self.max_size / 1024 / 1024
