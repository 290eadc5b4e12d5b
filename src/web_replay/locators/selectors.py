"""
Selector Builders - Best-effort CSS and XPath for a captured element.

Both builders prefer explicit test hooks, then non-dynamic ids, and only
then fall back to structure (class names for CSS, a bounded positional path
for XPath).
"""

from typing import Optional
from urllib.parse import urlsplit

from web_replay.interfaces.browser import ElementSnapshot
from web_replay.locators.dynamic_ids import is_dynamic_id


def css_escape(value: str) -> str:
    """
    Escape a string for use as a CSS identifier (``CSS.escape`` semantics).

    Raises:
        ValueError: For an empty identifier
    """
    if not value:
        raise ValueError("Cannot escape an empty CSS identifier")

    out = []
    for index, ch in enumerate(value):
        code = ord(ch)
        if code == 0:
            out.append("\ufffd")
        elif (
            0x1 <= code <= 0x1F
            or code == 0x7F
            or (index == 0 and ch.isdigit())
            or (index == 1 and ch.isdigit() and value[0] == "-")
        ):
            out.append(f"\\{code:x} ")
        elif index == 0 and ch == "-" and len(value) == 1:
            out.append("\\-")
        elif code >= 0x80 or ch in "-_" or (ch.isascii() and ch.isalnum()):
            out.append(ch)
        else:
            out.append("\\" + ch)
    return "".join(out)


def css_string(value: str) -> str:
    """Quote a value for a CSS attribute selector."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\a ")
        .replace("\r", "\\d ")
    )
    return f'"{escaped}"'


def attribute_selector(name: str, value: str, operator: str = "=") -> str:
    """Build ``[name<op>"value"]``."""
    return f"[{name}{operator}{css_string(value)}]"


def xpath_literal(value: str) -> str:
    """Quote a value as an XPath 1.0 string literal."""
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    parts = value.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


def href_path(href: str) -> Optional[str]:
    """
    Path component of an href, query and fragment dropped.

    Returns None for empty or root paths, which would match any link.
    """
    path = urlsplit(href).path
    if not path or path == "/":
        return None
    return path


def stable_id(snapshot: ElementSnapshot) -> Optional[str]:
    """The element id if it does not look generated."""
    element_id = snapshot.id
    if element_id and not is_dynamic_id(element_id):
        return element_id
    return None


def build_css_selector(snapshot: ElementSnapshot, max_classes: int = 3) -> Optional[str]:
    """
    Generate a CSS selector for an element.

    Prefers ``data-testid``, then a non-dynamic id, else the tag name with
    up to ``max_classes`` class names longer than two characters, plus
    ``href`` fragment and ``title`` predicates when present.

    Args:
        snapshot: Captured element
        max_classes: Maximum number of class names to include

    Returns:
        Selector string, or None if nothing usable was found
    """
    test_id = snapshot.attributes.get("data-testid")
    if test_id:
        return attribute_selector("data-testid", test_id)

    element_id = stable_id(snapshot)
    if element_id:
        return "#" + css_escape(element_id)

    if not snapshot.tag_name:
        return None

    selector = snapshot.tag_name
    classes = [c for c in snapshot.class_list if len(c) > 2][:max_classes]
    if classes:
        selector += "".join("." + css_escape(c) for c in classes)

    if snapshot.href:
        fragment = snapshot.href.rstrip("/").split("/")[-1]
        if fragment:
            selector += attribute_selector("href", fragment, "*=")

    title = snapshot.attributes.get("title")
    if title:
        selector += attribute_selector("title", title)

    return selector


def build_xpath(snapshot: ElementSnapshot, max_depth: int = 5) -> Optional[str]:
    """
    Generate an XPath for an element.

    Prefers ``data-testid`` or a non-dynamic id as an attribute predicate.
    Otherwise walks at most ``max_depth`` levels up the ancestor chain,
    adding ``[n]`` only where same-tag siblings exist. A path that stops
    short of the document root is anchored with ``//``.

    Args:
        snapshot: Captured element
        max_depth: Maximum number of path steps

    Returns:
        XPath string, or None if the snapshot has no path
    """
    test_id = snapshot.attributes.get("data-testid")
    if test_id:
        return f"//*[@data-testid={xpath_literal(test_id)}]"

    element_id = stable_id(snapshot)
    if element_id:
        return f"//*[@id={xpath_literal(element_id)}]"

    segments = []
    for segment in snapshot.path[:max_depth]:
        if not segment.tag:
            raise ValueError("Path segment without a tag name")
        step = segment.tag
        if segment.same_tag_siblings > 0:
            step += f"[{segment.position}]"
        segments.append(step)

    if not segments:
        return None

    reaches_root = len(snapshot.path) <= max_depth and not snapshot.truncated
    prefix = "/" if reaches_root else "//"
    return prefix + "/".join(reversed(segments))
