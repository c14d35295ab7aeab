from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .records import Record


class CamelModel(BaseModel):
    # The admin UI speaks camelCase; accept either spelling on input
    model_config = ConfigDict(populate_by_name=True)


class CharacterItem(CamelModel):
    filename: str = Field(json_schema_extra={"example": "elf_wood_talisyn_moonshadow.md"})
    base: str = Field(
        description="Slug shared by the markdown document and its image",
        json_schema_extra={"example": "elf_wood_talisyn_moonshadow"},
    )
    image_file_base: str = Field(alias="imageFileBase")
    name: str = ""
    race: str = ""
    subrace: str = ""
    tags: List[Any] = Field(default_factory=list)
    projects: List[Any] = Field(default_factory=list)
    image_url: str = Field(alias="imageUrl")
    has_image: bool = Field(
        alias="hasImage",
        description="Whether the image file exists right now (checked on every listing)",
    )

    @classmethod
    def from_record(cls, record: Record) -> "CharacterItem":
        return cls(
            filename=record.filename,
            base=record.slug,
            image_file_base=record.image_ref,
            name=record.name,
            race=record.race,
            subrace=record.subrace,
            tags=record.tags,
            projects=record.projects,
            image_url=f"/images/{record.image_ref}.webp",
            has_image=record.has_image,
        )


class CharacterList(BaseModel):
    items: List[CharacterItem]


class CharacterFields(CamelModel):
    name: Optional[str] = Field(default=None, json_schema_extra={"example": "Talisyn Moonshadow"})
    race: Optional[str] = Field(default=None, json_schema_extra={"example": "elf"})
    subrace: Optional[str] = Field(default=None, json_schema_extra={"example": "wood"})
    tags: Optional[List[str]] = None
    projects: Optional[List[str]] = None

    def fields(self) -> Dict[str, Any]:
        return self.model_dump(include={"name", "race", "subrace", "tags", "projects"}, exclude_none=True)


class CreateRequest(CharacterFields):
    base: Optional[str] = Field(
        default=None,
        description="Explicit slug; derived from race/subrace/name when omitted",
    )


class UpdateRequest(CharacterFields):
    original_base: Optional[str] = Field(default=None, alias="originalBase")


class DeleteRequest(CamelModel):
    base: Optional[str] = None


class OkResponse(BaseModel):
    ok: bool = True


class CreateResponse(OkResponse):
    base: str


class UpdateResponse(CamelModel):
    ok: bool = True
    updated_base: str = Field(alias="updatedBase")


class IngestFailureItem(BaseModel):
    source: str
    reason: str
    error: str


class IngestResponse(BaseModel):
    ok: bool
    found: int = Field(description="Files found under the raw images folder")
    ingested: List[str] = Field(description="Slugs written to the images folder")
    failed: List[IngestFailureItem] = Field(default_factory=list)


class RacesResponse(BaseModel):
    races: Dict[str, List[str]]
