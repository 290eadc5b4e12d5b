"""
Locator Models - Ranked strategies for re-finding an element.

A locator is one candidate way of finding an element again, tagged by
``type``. Locators for an element form an ordered list, most reliable first;
the resolver depends on that order. The union below is closed: adding a
locator type means adding a model here and a handler in every consumer
(generator, resolver, description helpers).
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


SemanticKind = Literal["web-search", "composer-plus"]


class _LocatorBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class RoleLocator(_LocatorBase):
    """Explicit ARIA role plus an accessible name."""
    type: Literal["role"] = "role"
    role: str
    name: str


class DataTestIdLocator(_LocatorBase):
    """Explicit test hook (``data-testid``)."""
    type: Literal["data-testid"] = "data-testid"
    value: str


class IdLocator(_LocatorBase):
    """Non-dynamic element id."""
    type: Literal["id"] = "id"
    value: str


class HrefLocator(_LocatorBase):
    """Anchor href, path component only."""
    type: Literal["href"] = "href"
    path: str


class TitleLocator(_LocatorBase):
    type: Literal["title"] = "title"
    value: str


class TextLocator(_LocatorBase):
    """Exact trimmed text content."""
    type: Literal["text"] = "text"
    content: str


class SemanticLocator(_LocatorBase):
    """
    Application-level control recognised by meaning, not by attributes.

    Carries no selector; resolution is delegated to the finder registered
    for its kind.
    """
    type: SemanticKind
    description: str


class CssLocator(_LocatorBase):
    type: Literal["css"] = "css"
    selector: str


class XPathLocator(_LocatorBase):
    type: Literal["xpath"] = "xpath"
    path: str


Locator = Annotated[
    Union[
        RoleLocator,
        DataTestIdLocator,
        IdLocator,
        HrefLocator,
        TitleLocator,
        TextLocator,
        SemanticLocator,
        CssLocator,
        XPathLocator,
    ],
    Field(discriminator="type"),
]

LOCATOR_MODELS = (
    RoleLocator,
    DataTestIdLocator,
    IdLocator,
    HrefLocator,
    TitleLocator,
    TextLocator,
    SemanticLocator,
    CssLocator,
    XPathLocator,
)

def describe_locator(locator: Locator) -> str:
    """Short human-readable description of a locator."""
    if isinstance(locator, RoleLocator):
        return f"Role: {locator.role} ({locator.name})"
    if isinstance(locator, DataTestIdLocator):
        return f"Test ID: {locator.value}"
    if isinstance(locator, IdLocator):
        return f"ID: {locator.value}"
    if isinstance(locator, HrefLocator):
        return f"Link: {locator.path}"
    if isinstance(locator, TitleLocator):
        return f"Title: {locator.value}"
    if isinstance(locator, TextLocator):
        return f'Text: "{locator.content}"'
    if isinstance(locator, SemanticLocator):
        return locator.description
    if isinstance(locator, CssLocator):
        return f"CSS: {locator.selector}"
    if isinstance(locator, XPathLocator):
        return f"XPath: {locator.path}"
    raise TypeError(f"Unsupported locator: {locator!r}")
