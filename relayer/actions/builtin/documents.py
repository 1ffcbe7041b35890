"""
Document resolvers.

Both fetch the same document twice so the second hop is served from the
document store's cache:

    None -> Document(path), continuation 1
    1    -> Document(path)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..descriptors import DocumentAction
from ..resolver import ActionResolver, Secret

if TYPE_CHECKING:
    from ...engine.records import ChainState
    from ...events import Event


class CachedDocumentResolver(ActionResolver):
    def __init__(self, name: str, path: str):
        self._name = name
        self.path = path

    @property
    def name(self) -> str:
        return self._name

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> DocumentAction:
        action = DocumentAction(path=self.path)
        if previous is None:
            return action.then(1)
        return action


def document_json() -> CachedDocumentResolver:
    return CachedDocumentResolver("documentJson", "documents/document.json")


def document_jpg() -> CachedDocumentResolver:
    return CachedDocumentResolver("documentJpg", "documents/document.jpg")
