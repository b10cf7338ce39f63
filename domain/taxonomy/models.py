"""Typed records produced by the taxonomy grammar."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class LangValues(BaseModel):
    """One `<lang>:<value>, <value>, ...` line."""

    lang: str
    values: list[str]


class ParentRef(BaseModel):
    """A `<<lang>:<name>` parent line."""

    lang: str
    name: str


class CategoryProperty(BaseModel):
    """A `<property>[:<lang>]:<value>` line following a category's names."""

    name: str
    lang: str | None = None
    value: str


class CommentBlock(BaseModel):
    """A run of comment lines standing on its own between blank lines."""

    kind: Literal["comment"] = "comment"
    line: int
    comments: list[str] = Field(default_factory=list)


class SynonymBlock(BaseModel):
    """Consecutive `synonyms:<lang>:...` lines."""

    kind: Literal["synonyms"] = "synonyms"
    line: int
    entries: list[LangValues]
    comments: list[str] = Field(default_factory=list)


class StopwordBlock(BaseModel):
    kind: Literal["stopwords"] = "stopwords"
    line: int
    entries: list[LangValues]
    comments: list[str] = Field(default_factory=list)


class CategoryBlock(BaseModel):
    """
    A category definition as written in the taxonomy file.

    `parents`, `names` and `properties` are always lists, in source order.
    Comment lines found anywhere inside the block are kept in `comments`.
    """

    kind: Literal["category"] = "category"
    line: int
    parents: list[ParentRef] = Field(default_factory=list)
    names: list[LangValues]
    properties: list[CategoryProperty] = Field(default_factory=list)
    comments: list[str] = Field(default_factory=list)


Block = Annotated[
    CategoryBlock | SynonymBlock | StopwordBlock | CommentBlock,
    Field(discriminator="kind"),
]
