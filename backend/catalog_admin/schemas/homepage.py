"""
Request schemas for the homepage section endpoints.
"""
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from catalog_admin.domain.exceptions import ValidationError
from catalog_admin.domain.sanitizers import HREF_MAX_LENGTH, is_valid_href

SectionLayout = Literal["featured", "grid"]
SectionBackground = Literal["white", "gray"]

HREF_MESSAGE = "Use a link that starts with / or https://"

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class HomepageSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class SectionFields(HomepageSchema):
    title: str = Field(min_length=3, max_length=120)
    subtitle: Optional[str] = Field(default=None, max_length=200)
    layout_kind: SectionLayout
    background: SectionBackground
    cta_label: str = Field(min_length=2, max_length=80)
    cta_href: str = Field(min_length=1, max_length=HREF_MAX_LENGTH)
    linked_category_id: Optional[str] = Field(default=None, max_length=80)
    position: Optional[int] = Field(default=None, ge=1, le=500)
    active: Optional[bool] = None
    # whitelisting happens in the sanitizer, unknown keys are dropped there
    config: Optional[Dict[str, Any]] = None

    @field_validator("subtitle", "linked_category_id", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("cta_href")
    @classmethod
    def validate_href(cls, value: str) -> str:
        if not is_valid_href(value):
            raise ValueError(HREF_MESSAGE)
        return value


class CreateSectionRequest(SectionFields):
    id: Optional[str] = Field(default=None, min_length=2, max_length=60, pattern=r"^[a-z0-9-]+$")


class UpdateSectionRequest(SectionFields):
    pass


class MoveSectionRequest(HomepageSchema):
    position: int = Field(ge=1, le=500)


class PositionEntry(HomepageSchema):
    id: str = Field(min_length=1, max_length=60)
    position: int = Field(ge=1, le=500)


class ReorderSectionsRequest(HomepageSchema):
    moves: List[PositionEntry] = Field(min_length=1)


class AddItemRequest(HomepageSchema):
    product_id: str = Field(min_length=1, max_length=36)
    position: Optional[int] = Field(default=None, ge=1, le=50)
    metadata: Optional[Dict[str, Any]] = None


class UpdateItemRequest(HomepageSchema):
    position: Optional[int] = Field(default=None, ge=1, le=50)
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def require_change(self):
        if self.position is None and self.metadata is None:
            raise ValueError("Provide position or metadata")
        return self


class ItemPositionEntry(HomepageSchema):
    id: str = Field(min_length=1, max_length=36)
    position: int = Field(ge=0, le=100)


class ReorderItemsRequest(HomepageSchema):
    items: List[ItemPositionEntry] = Field(min_length=1)


def parse_payload(schema: Type[SchemaT], data: Any) -> SchemaT:
    """Validate ``data`` against ``schema``, raising our ValidationError."""
    try:
        return schema.model_validate(data if data is not None else {})
    except PydanticValidationError as exc:
        issues = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "body",
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise ValidationError("Invalid data", details=issues) from exc
