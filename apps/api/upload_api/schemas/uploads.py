from pydantic import BaseModel, ConfigDict, Field


class UploadUrlRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    fileName: str = Field(min_length=1)
    fileType: str = Field(min_length=1)
    fileSize: int = Field(ge=0, strict=True)
    folderName: str = Field(min_length=1)


class UploadUrlResponse(BaseModel):
    uploadUrl: str
    key: str
    expiresIn: int
    uploadMethod: str = "PUT"
    uploadHeaders: dict[str, str]
