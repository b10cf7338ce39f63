"""
Food rescue topics and their DocBook 5.1 representation.

A topic is one unit of food rescue knowledge (for example "Fridge storage") that is
shown for all products in its target categories.
"""

import xml.etree.ElementTree as ET
from datetime import date
from typing import ClassVar, Literal

from pydantic import BaseModel, Field

DOCBOOK_NS = "http://docbook.org/ns/docbook"
XINCLUDE_NS = "http://www.w3.org/2001/XInclude"
SUBJECT_SCHEME = "off-categories-subset-frc"

ET.register_namespace("", DOCBOOK_NS)
ET.register_namespace("xi", XINCLUDE_NS)

Section = Literal[
    "risks",
    "edibility_assessment",
    "symptoms",
    "edible_parts",
    "storage_overview",
    "storage_instructions",
    "preservation",
    "preparation",
    "reuse_and_recycling",
]


class Author(BaseModel):
    """A person or organization credited for topics."""

    givenname: str | None = None
    honorific: str | None = None
    middlenames: str | None = None
    surname: str | None = None
    orgname: str | None = None
    orgdiv: str | None = None
    uri: str | None = None
    email: str | None = None

    # Fields that together identify an author across topics.
    IDENTITY_FIELDS: ClassVar[tuple[str, ...]] = ("givenname", "middlenames", "surname", "orgname")

    def identity(self) -> dict[str, str | None]:
        return {f: getattr(self, f) for f in self.IDENTITY_FIELDS}

    @property
    def display_name(self) -> str:
        person = " ".join(p for p in (self.honorific, self.givenname, self.middlenames, self.surname) if p)
        return person or self.orgname or ""


class Literature(BaseModel):
    """A bibliography entry, keyed like a BibTeX entry."""

    id: str
    abbrev: str | None = None
    entry: str = ""


class LiteratureRef(BaseModel):
    """Reference from a topic to a Literature entry."""

    id: str
    ref: str | None = None
    ref_details: str | None = None

    def render(self) -> str:
        details = ", ".join(p for p in (self.ref, self.ref_details) if p)
        return f"{self.id} ({details})" if details else self.id


class Para(BaseModel):
    kind: Literal["para"] = "para"
    text: str = ""


class ItemizedList(BaseModel):
    kind: Literal["itemizedlist"] = "itemizedlist"
    items: list[str] = Field(default_factory=list)


class Topic(BaseModel):
    """A food rescue topic with metadata and DocBook body content."""

    external_id: str | None = None
    title: str
    section: Section
    version: date
    lang: str = "en"
    abstract: str = ""
    authors: list[Author] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)  # English category names
    literature: list[LiteratureRef] = Field(default_factory=list)
    content: list[Para | ItemizedList] = Field(default_factory=list)


def _db(tag: str) -> str:
    return f"{{{DOCBOOK_NS}}}{tag}"


def _sub(parent: ET.Element, tag: str, text: str | None = None) -> ET.Element:
    el = ET.SubElement(parent, _db(tag))
    if text is not None:
        el.text = text
    return el


def _content_element(part: Para | ItemizedList) -> ET.Element:
    if isinstance(part, Para):
        el = ET.Element(_db("para"))
        el.text = part.text
        return el
    el = ET.Element(_db("itemizedlist"))
    for item in part.items:
        _sub(_sub(el, "listitem"), "para", item)
    return el


def _author_element(parent: ET.Element, author: Author) -> None:
    el = _sub(parent, "author")
    if author.givenname or author.surname:
        person = _sub(el, "personname")
        for tag, value in (
            ("honorific", author.honorific),
            ("givenname", author.givenname),
            ("othername", author.middlenames),
            ("surname", author.surname),
        ):
            if value:
                _sub(person, tag, value)
    elif author.orgname:
        _sub(el, "orgname", author.orgname)
    if author.orgdiv:
        affiliation = _sub(el, "affiliation")
        _sub(affiliation, "orgdiv", author.orgdiv)
    if author.uri:
        _sub(el, "uri", author.uri)
    if author.email:
        _sub(el, "email", author.email)


def render_content(topic: Topic) -> str:
    """Serialize only the body content, as stored in the content database."""
    return "".join(
        ET.tostring(_content_element(part), encoding="unicode") for part in topic.content
    )


def render_docbook(topic: Topic, *, bibliography_href: str = "bibliography.xml") -> bytes:
    """
    Render a topic as a complete DocBook 5.1 `<topic>` document.

    Args:
        topic: Topic to render
        bibliography_href: XInclude target holding the shared bibliography

    Returns:
        UTF-8 encoded XML, with declaration and indentation
    """
    root = ET.Element(_db("topic"), {"type": topic.section, "version": "5.1"})

    info = _sub(root, "info")
    _sub(info, "title", topic.title)
    for author in topic.authors:
        _author_element(info, author)
    _sub(_sub(info, "edition"), "date", topic.version.isoformat())
    if topic.abstract:
        _sub(_sub(info, "abstract"), "para", topic.abstract)
    if topic.categories:
        subjectset = _sub(info, "subjectset")
        subjectset.set("scheme", SUBJECT_SCHEME)
        for name in topic.categories:
            _sub(_sub(subjectset, "subject"), "subjectterm", name)

    for part in topic.content:
        root.append(_content_element(part))

    if topic.literature:
        _sub(root, "para", "Literature used: ")
        refs = _sub(root, "itemizedlist")
        for ref in topic.literature:
            _sub(_sub(refs, "listitem"), "para", ref.render())

    ET.SubElement(root, f"{{{XINCLUDE_NS}}}include", {"href": bibliography_href})

    tree = ET.ElementTree(root)
    ET.indent(tree, space="    ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)
