"""
Response models for the Diffbot APIs and the batch wire format.

Models only declare the identifying fields and the most common attributes;
every other field returned by Diffbot is kept as an extra attribute.
"""

from __future__ import annotations

import typing as t
from datetime import datetime
from email.utils import parsedate_to_datetime
from enum import StrEnum

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from diffbot.exceptions import ParseError


class PageType(StrEnum):
    ARTICLE = "article"
    AUDIO = "audio"
    CHART = "chart"
    DISCUSSION = "discussion"
    DOCUMENT = "document"
    DOWNLOAD = "download"
    ERROR = "error"
    EVENT = "event"
    FAQ = "faq"
    FRONTPAGE = "frontpage"
    GAME = "game"
    IMAGE = "image"
    JOB = "job"
    LOCATION = "location"
    OTHER = "other"
    PRODUCT = "product"
    PROFILE = "profile"
    RECIPE = "recipe"
    REVIEWLIST = "reviewslist"
    SERP = "serp"
    VIDEO = "video"


E = t.TypeVar("E", bound=StrEnum)


def _known_member(value: str | None, enum_cls: type[E]) -> E | str | None:
    # Values Diffbot added after this release are kept as plain strings
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return value


PageTypeField = t.Annotated[
    str | None, AfterValidator(lambda value: _known_member(value, PageType))
]


class Model(BaseModel):
    """
    Base class of every Diffbot result.

    Two results are equal when they describe the same URL with the same page
    type, whatever API produced them: an ``Article`` equals a ``Classified``
    of the same article URL.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    url: str | None = None
    type: PageTypeField = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self.type == other.type and self.url == other.url

    def __hash__(self) -> int:
        return hash((self.type, self.url))


class Article(Model):
    type: PageTypeField = PageType.ARTICLE
    title: str | None = None
    text: str | None = None
    html: str | None = None
    date: str | None = None
    author: str | None = None
    resolved_url: str | None = Field(
        default=None, validation_alias=AliasChoices("resolved_url", "resolvedUrl")
    )
    icon: str | None = None
    summary: str | None = None
    tags: list[str] | None = None
    media: list[dict[str, t.Any]] | None = None


class Image(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    url: str | None = None
    anchor_url: str | None = Field(
        default=None, validation_alias=AliasChoices("anchor_url", "anchorUrl")
    )
    mime: str | None = None
    caption: str | None = None
    pixel_height: int | None = Field(
        default=None, validation_alias=AliasChoices("pixel_height", "pixelHeight")
    )
    pixel_width: int | None = Field(
        default=None, validation_alias=AliasChoices("pixel_width", "pixelWidth")
    )


class Images(Model):
    type: PageTypeField = PageType.IMAGE
    title: str | None = None
    resolved_url: str | None = None
    images: list[Image] = Field(default_factory=list)


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str | None = None
    description: str | None = None
    brand: str | None = None
    offer_price: str | None = Field(
        default=None, validation_alias=AliasChoices("offer_price", "offerPrice")
    )
    regular_price: str | None = Field(
        default=None, validation_alias=AliasChoices("regular_price", "regularPrice")
    )
    availability: bool | None = None


class Products(Model):
    type: PageTypeField = PageType.PRODUCT
    resolved_url: str | None = None
    links: list[str] | None = None
    breadcrumb: list[str] | None = None
    products: list[Product] = Field(default_factory=list)


class Stats(BaseModel):
    model_config = ConfigDict(extra="allow")

    confidence: float | None = None
    types: dict[str, float] | None = None


M = t.TypeVar("M", bound=Model)


class Classified(Model):
    """
    Result of the page classifier.

    The classifier fully extracts pages of a supported type, so a
    ``Classified`` can be reinterpreted as the matching API result.
    """

    title: str | None = None
    resolved_url: str | None = None
    human_language: str | None = None
    stats: Stats | None = None

    def as_article(self) -> Article:
        return self._reinterpret(model_cls=Article)

    def as_images(self) -> Images:
        return self._reinterpret(model_cls=Images)

    def as_products(self) -> Products:
        return self._reinterpret(model_cls=Products)

    def _reinterpret(self, *, model_cls: type[M]) -> M:
        try:
            return model_cls.model_validate(self.model_dump(exclude_none=True))
        except ValidationError as error:
            raise ParseError(
                f"The classified object cannot be parsed as {model_cls.__name__}"
            ) from error


class ItemType(StrEnum):
    IMAGE = "IMAGE"
    LINK = "LINK"
    STORY = "STORY"
    CHUNK = "CHUNK"


class Info(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    title: str | None = None
    source_url: str | None = Field(
        default=None, validation_alias=AliasChoices("source_url", "sourceURL")
    )
    icon: str | None = None
    source_type: str | None = Field(
        default=None, validation_alias=AliasChoices("source_type", "sourceType")
    )
    num_items: int = Field(default=0, validation_alias=AliasChoices("num_items", "numItems"))
    num_spam_items: int = Field(
        default=0, validation_alias=AliasChoices("num_spam_items", "numSpamItems")
    )


class Item(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | None = None
    title: str | None = None
    description: str | None = None
    text: str | None = None
    text_summary: str | None = Field(
        default=None, validation_alias=AliasChoices("text_summary", "textSummary")
    )
    link: str | None = None
    img: str | None = None
    xroot: str | None = None
    type: t.Annotated[
        str | None, AfterValidator(lambda value: _known_member(value, ItemType))
    ] = None
    pub_date: datetime | None = Field(
        default=None, validation_alias=AliasChoices("pub_date", "pubDate")
    )
    spam_score: float | None = Field(default=None, validation_alias=AliasChoices("spam_score", "sp"))
    static_rank: float | None = Field(
        default=None, validation_alias=AliasChoices("static_rank", "sr")
    )
    fresh_score: float | None = Field(
        default=None, validation_alias=AliasChoices("fresh_score", "fresh")
    )

    @field_validator("pub_date", mode="before")
    @classmethod
    def parse_rfc822_date(cls, value: t.Any) -> t.Any:
        # DML dates look like "Sat, 11 Jan 2014 10:32:00 GMT"
        if isinstance(value, str):
            return parsedate_to_datetime(value)
        return value


class Frontpage(Model):
    type: PageTypeField = PageType.FRONTPAGE
    info: Info | None = None
    items: list[Item] | None = None

    @model_validator(mode="after")
    def url_from_info(self) -> "Frontpage":
        if self.url is None and self.info is not None:
            self.url = self.info.source_url
        return self


class BatchRequest(BaseModel):
    method: t.Literal["GET", "POST"] = "GET"
    relative_url: str


class Header(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    value: str | None = None


class BatchResponse(BaseModel):
    """
    One sub-response of a batch call.

    Diffbot echoes the ``relative_url`` of the sub-request; it is the only way
    to match a sub-response with the request that produced it.
    """

    model_config = ConfigDict(extra="allow")

    relative_url: str
    code: int
    body: str = ""
    headers: list[Header] = Field(default_factory=list)

    @field_validator("headers", mode="before")
    @classmethod
    def null_headers(cls, value: t.Any) -> t.Any:
        return [] if value is None else value

    @field_validator("body", mode="before")
    @classmethod
    def null_body(cls, value: t.Any) -> t.Any:
        return "" if value is None else value

    def first_header(self, name: str) -> Header | None:
        """
        Return the first header with a given name, compared case-insensitively.

        Parameters
        ----------
        name : str
            Header name.

        Returns
        -------
        Header | None
            Matching header, if any.
        """
        lowered = name.lower()
        for header in self.headers:
            if header.name is not None and header.name.lower() == lowered:
                return header
        return None


batch_request_list_adapter = TypeAdapter(list[BatchRequest])
batch_response_list_adapter = TypeAdapter(list[BatchResponse])
