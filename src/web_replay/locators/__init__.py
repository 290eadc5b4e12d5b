"""
Locators module - Generate and resolve ranked element locators.

The generator turns an element captured once into an ordered menu of ways
to find it again; the resolver walks that menu against a live page.
"""

from web_replay.locators.models import (
    Locator,
    RoleLocator,
    DataTestIdLocator,
    IdLocator,
    HrefLocator,
    TitleLocator,
    TextLocator,
    SemanticLocator,
    CssLocator,
    XPathLocator,
    LOCATOR_MODELS,
    describe_locator,
)
from web_replay.locators.dynamic_ids import is_dynamic_id
from web_replay.locators.generator import LocatorGenerator
from web_replay.locators.resolver import LocatorResolver, ResolvedTarget
from web_replay.locators.semantic import SEMANTIC_PROFILES, SemanticFinder, SemanticProfile

__all__ = [
    "Locator",
    "RoleLocator",
    "DataTestIdLocator",
    "IdLocator",
    "HrefLocator",
    "TitleLocator",
    "TextLocator",
    "SemanticLocator",
    "CssLocator",
    "XPathLocator",
    "LOCATOR_MODELS",
    "describe_locator",
    "is_dynamic_id",
    "LocatorGenerator",
    "LocatorResolver",
    "ResolvedTarget",
    "SEMANTIC_PROFILES",
    "SemanticFinder",
    "SemanticProfile",
]
