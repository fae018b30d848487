from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class DryRunFlag(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dryRun: bool = False


class UploadRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fileName: str | None = None
    mimeType: str | None = None
    fileData: str | None = None
    category: str = ""
    dryRun: bool = False


@dataclass(frozen=True, slots=True)
class DryRunAck:
    message: str = "Dry run acknowledged"


@dataclass(frozen=True, slots=True)
class DecodedPayload:
    file_name: str
    mime_type: str
    category: str
    content: bytes


@dataclass(frozen=True, slots=True)
class IngestedAsset:
    asset_id: int
    public_url: str | None
    category: str
