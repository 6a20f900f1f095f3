"""Upload Schemas — response of the file upload endpoint."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str
