"""
Navigation Heuristics - Decide when a URL change is not a new destination.

Single-page apps rewrite the URL for reasons that are not navigations the
user performed (a chat app assigning an id to a freshly created thread, for
instance). Replaying those as ``navigate`` steps would break the replay, so
each heuristic may veto the step. Heuristics are named and configured via
``capture.navigation_heuristics``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlsplit
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationContext:
    """
    What the capture engine knows when the URL changes.

    Attributes:
        url: The new URL
        last_url: The URL last seen (recorded or not)
        last_step_type: Type of the most recently emitted step
    """
    url: str
    last_url: Optional[str]
    last_step_type: Optional[str]


def _host(url: Optional[str]) -> str:
    if not url:
        return ""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def host_matches(url: Optional[str], hosts: Iterable[str]) -> bool:
    """True if the URL's host is one of ``hosts`` or a subdomain of one."""
    host = _host(url)
    if not host:
        return False
    return any(host == h or host.endswith("." + h) for h in hosts)


class NavigationHeuristic(ABC):
    """A rule that may suppress a ``navigate`` step."""

    name: str = ""

    @abstractmethod
    def suppresses(self, context: NavigationContext) -> bool:
        """True if this URL change should not be recorded."""
        ...


class SameChatThreadHeuristic(NavigationHeuristic):
    """
    Suppress URL changes that stay within the same chat thread.

    The thread is identified by whatever follows ``/c/`` in the URL; two
    URLs without a thread segment count as the same (thread-less) page.
    """

    name = "same-chat-thread"

    def __init__(self, chat_hosts: Sequence[str]):
        self.chat_hosts = [h.lower() for h in chat_hosts]

    @staticmethod
    def thread_id(url: str) -> Optional[str]:
        parts = url.split("/c/", 1)
        return parts[1] if len(parts) > 1 else None

    def suppresses(self, context: NavigationContext) -> bool:
        if not context.last_url:
            return False
        if not host_matches(context.url, self.chat_hosts):
            return False
        if not host_matches(context.last_url, self.chat_hosts):
            return False
        return self.thread_id(context.url) == self.thread_id(context.last_url)


class AfterKeyPressHeuristic(NavigationHeuristic):
    """
    Suppress a URL change that directly follows a key press.

    Submitting with Enter often makes the app rewrite the URL itself; the
    replayed key press will do the same. With ``hosts`` set the rule only
    applies to those sites.
    """

    name = "after-key-press"

    def __init__(self, hosts: Optional[Sequence[str]] = None):
        self.hosts = [h.lower() for h in hosts] if hosts else None

    def suppresses(self, context: NavigationContext) -> bool:
        if context.last_step_type != "press":
            return False
        if self.hosts is not None and not host_matches(context.url, self.hosts):
            return False
        return True


HEURISTIC_FACTORIES: Dict[str, Callable[[Sequence[str]], NavigationHeuristic]] = {
    SameChatThreadHeuristic.name: lambda chat_hosts: SameChatThreadHeuristic(chat_hosts),
    AfterKeyPressHeuristic.name: lambda chat_hosts: AfterKeyPressHeuristic(),
}


def build_heuristics(names: Iterable[str], chat_hosts: Sequence[str] = ()) -> List[NavigationHeuristic]:
    """
    Instantiate heuristics by name.

    Args:
        names: Heuristic names, e.g. ``["same-chat-thread", "after-key-press"]``
        chat_hosts: Hosts the chat-thread rule applies to

    Raises:
        ValueError: For an unknown heuristic name
    """
    heuristics = []
    for name in names:
        factory = HEURISTIC_FACTORIES.get(name)
        if factory is None:
            raise ValueError(
                f"Unknown navigation heuristic: {name}. "
                f"Available: {', '.join(HEURISTIC_FACTORIES)}"
            )
        heuristics.append(factory(chat_hosts))
    return heuristics
