"""
Request composer: one GenerationRequest per mode.
Each mode is a small composer object; compose() validates inputs before building anything.
Pure functions of their inputs, no I/O.
"""
import re

from app.services.image_generation import templates
from app.services.image_generation.base import (
    DEFAULT_SOURCE_MIME_TYPE,
    DEFAULT_VARIATION_COUNT,
    MAX_VARIATION_COUNT,
    MIN_VARIATION_COUNT,
    GenerationInputs,
    GenerationMode,
    GenerationRequest,
    InvalidInputError,
)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*);base64,")


def _clean(value: str | None) -> str:
    return (value or "").strip()


def split_data_url(value: str) -> tuple[str, str]:
    """Return (mime, base64). Accepts bare base64 or a full data URL from FileReader."""
    value = value.strip()
    match = _DATA_URL_RE.match(value)
    if not match:
        return DEFAULT_SOURCE_MIME_TYPE, value
    mime = match.group("mime") or DEFAULT_SOURCE_MIME_TYPE
    return mime, value[match.end():]


def _image_payload(value: str | None) -> str:
    """Base64 part of the source image; a data URL with nothing after the comma is empty."""
    if not _clean(value):
        return ""
    return split_data_url(value)[1].strip()


def resolve_variation_count(value: int | None) -> int:
    if value is None:
        return DEFAULT_VARIATION_COUNT
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError("生成枚数は1〜3の範囲で指定してください", details=f"imageCount={value!r}")
    if not MIN_VARIATION_COUNT <= value <= MAX_VARIATION_COUNT:
        raise InvalidInputError("生成枚数は1〜3の範囲で指定してください", details=f"imageCount={value}")
    return value


class ModeComposer:
    """Shared compose capability; subclasses provide validation and text synthesis."""

    mode: GenerationMode
    kind: str
    requires_image = True

    def validate(self, inputs: GenerationInputs) -> None:
        if self.requires_image and not _image_payload(inputs.source_image):
            raise InvalidInputError("画像が必要です", details=f"mode={self.mode.value}: image missing")

    def variation_count(self, inputs: GenerationInputs) -> int:
        return resolve_variation_count(inputs.variation_count)

    def instruction_text(self, inputs: GenerationInputs, count: int) -> str:
        raise NotImplementedError

    def compose(self, inputs: GenerationInputs) -> GenerationRequest:
        self.validate(inputs)
        count = self.variation_count(inputs)
        request = GenerationRequest(
            mode=self.mode,
            instruction_text=self.instruction_text(inputs, count),
            variation_count=count,
            kind=self.kind,
        )
        if self.requires_image:
            request.source_mime_type, request.source_image = split_data_url(inputs.source_image)
        return request


class EditComposer(ModeComposer):
    mode = GenerationMode.EDIT
    kind = "edit"

    def validate(self, inputs: GenerationInputs) -> None:
        if not _image_payload(inputs.source_image) or not _clean(inputs.instruction):
            raise InvalidInputError("画像と編集指示が必要です", details="mode=edit: image or prompt missing")

    def instruction_text(self, inputs: GenerationInputs, count: int) -> str:
        instruction = _clean(inputs.instruction)
        if templates.is_text_removal_instruction(instruction):
            return templates.TEXT_REMOVAL.format(instruction=instruction, count=count)
        return templates.EDIT.format(instruction=instruction, count=count)


class TextOnlyComposer(ModeComposer):
    mode = GenerationMode.TEXT_ONLY
    kind = "text-only"

    def variation_count(self, inputs: GenerationInputs) -> int:
        # not part of the text-only template, so out-of-range values are not an error
        value = inputs.variation_count
        if isinstance(value, int) and MIN_VARIATION_COUNT <= value <= MAX_VARIATION_COUNT:
            return value
        return DEFAULT_VARIATION_COUNT

    def instruction_text(self, inputs: GenerationInputs, count: int) -> str:
        return templates.TEXT_ONLY


class GenerateComposer(ModeComposer):
    mode = GenerationMode.GENERATE
    kind = "generate"
    requires_image = False

    def validate(self, inputs: GenerationInputs) -> None:
        if not _clean(inputs.description):
            raise InvalidInputError("画像生成の説明が必要です", details="mode=generate: textPrompt missing")

    def instruction_text(self, inputs: GenerationInputs, count: int) -> str:
        return templates.GENERATE.format(description=_clean(inputs.description), count=count)


class CombinedComposer(ModeComposer):
    mode = GenerationMode.COMBINED
    kind = "combined"

    def variation_count(self, inputs: GenerationInputs) -> int:
        return MAX_VARIATION_COUNT

    def instruction_text(self, inputs: GenerationInputs, count: int) -> str:
        background = _clean(inputs.instruction)
        if background:
            clause = templates.COMBINED_BACKGROUND.format(background=background)
        else:
            clause = templates.COMBINED_DEFAULT_BACKGROUND
        return templates.TEXT_REMOVAL.format(instruction=templates.COMBINED_BASE + clause, count=count)


MODE_COMPOSERS: dict[GenerationMode, ModeComposer] = {
    composer.mode: composer
    for composer in (EditComposer(), TextOnlyComposer(), GenerateComposer(), CombinedComposer())
}


def compose(mode: str | GenerationMode, inputs: GenerationInputs) -> GenerationRequest:
    """Build the outbound request for mode. Raises InvalidInputError before building anything."""
    return MODE_COMPOSERS[GenerationMode.parse(mode)].compose(inputs)
