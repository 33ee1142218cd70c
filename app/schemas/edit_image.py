from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.services.image_generation import GenerationInputs, ImageVariation


class EditImageRequest(BaseModel):
    """Body of POST /api/edit-image and /api/variations (field names match the editor UI)."""

    model_config = ConfigDict(populate_by_name=True)

    mode: str | None = None
    image: str | None = None
    prompt: str | None = None
    text_prompt: str | None = Field(default=None, alias="textPrompt")
    image_count: int | None = Field(default=None, alias="imageCount")

    def to_inputs(self) -> GenerationInputs:
        return GenerationInputs(
            source_image=self.image,
            instruction=self.prompt,
            description=self.text_prompt,
            variation_count=self.image_count,
        )


class EditImageSuccess(BaseModel):
    success: bool = True
    response: Any


class VariationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: str
    mime_type: str = Field(alias="mimeType")
    index: int
    kind: str | None = None
    filename: str

    @classmethod
    def from_variation(cls, variation: ImageVariation) -> "VariationOut":
        return cls(
            data=variation.data,
            mime_type=variation.mime_type,
            index=variation.index,
            kind=variation.kind,
            filename=variation.filename,
        )


class VariationsOut(BaseModel):
    variations: list[VariationOut]


class ApiStatusOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    model: str
    provider: str
    has_api_key: bool = Field(alias="hasApiKey")
