from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Base64File(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mime_type: str = Field(..., alias="mimeType")
    data: str


class GarmentSideSpec(BaseModel):
    image: Optional[Base64File] = None
    text: str = ""


class BlouseSpec(BaseModel):
    type: Literal["running", "custom"] = "running"
    description: str = ""


class SareeSpecification(BaseModel):
    body: GarmentSideSpec
    pallu: GarmentSideSpec
    blouse: BlouseSpec = Field(default_factory=BlouseSpec)


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_image: Base64File = Field(..., alias="modelImage")
    spec: SareeSpecification
    tweak_prompt: Optional[str] = Field(None, alias="tweakPrompt")


class EditRequest(BaseModel):
    image: Base64File
    prompt: str = Field(..., min_length=1)


class ImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_data: str = Field(..., alias="imageData")


class MessageResponse(BaseModel):
    message: str
