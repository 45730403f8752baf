"""Pydantic models for caller-supplied options and credential configs."""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from uploader.exceptions import InvalidOptionsError


class UploadOptions(BaseModel):
    """
    Options for uploading a file.

    chunk_size == 0 uploads the stream as one chunk; a positive value splits
    it into chunks of at most that many bytes. Unknown keys are rejected.
    """
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    file_type: str = Field(default="", alias="fileType")
    chunk_size: int = Field(default=0, ge=0, alias="chunkSize")


class ChunkUploadOptions(BaseModel):
    """Options for uploading an already split list of chunk streams."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    file_type: str = Field(default="", alias="fileType")


class ServiceAccountConfig(BaseModel):
    """One service account entry of the credentials file."""
    model_config = ConfigDict(extra="ignore")

    identifier: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    client_email: Optional[str] = None


OptionsInput = Union[None, Mapping[str, Any], BaseModel]


def parse_options(options: OptionsInput, model: type) -> Any:
    """
    Validate and default options against `model`.

    Accepts None, a mapping (snake_case or camelCase keys) or a model
    instance; the latter is re-validated so a broader model can be narrowed.

    Raises:
        InvalidOptionsError: If a value is invalid or a key is unknown
    """
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    if isinstance(options, BaseModel):
        options = options.model_dump(include=set(model.model_fields))
    try:
        return model.model_validate(dict(options))
    except ValidationError as e:
        raise InvalidOptionsError(f"Invalid upload options: {e}") from e
