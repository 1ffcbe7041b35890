"""
Action Executor for Relayer.

Executes one descriptor against its collaborator and returns a RawOutcome
for the normalizer. Exactly one branch fires per descriptor; anything that
is not one of the four descriptor types is a configuration fault.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..actions.descriptors import (
    ActionDescriptor,
    DocumentAction,
    RequestAction,
    ResponseAction,
    SecretAction,
    SecretMethod,
)
from ..errors import AuthorizationFault, ConfigurationFault, UpstreamFault
from ..integrations.documents import split_document_path
from .records import RawOutcome

if TYPE_CHECKING:
    from ..integrations.documents import DocumentStore
    from ..integrations.http import OutboundRequestRunner
    from ..integrations.secrets import SecretStore

logger = logging.getLogger(__name__)

SECRET_CONTENT_TYPE = "text/json"

# Extension -> (media type, binary)
DOCUMENT_TYPES: dict[str, tuple[str, bool]] = {
    "json": ("text/json", False),
    "html": ("text/html", False),
    "htm": ("text/html", False),
    "xml": ("text/xml", False),
    "txt": ("text/plain", False),
    "text": ("text/plain", False),
    "jpg": ("image/jpeg", True),
    "jpeg": ("image/jpeg", True),
    "png": ("image/png", True),
    "gif": ("image/gif", True),
}


DESCRIPTOR_TYPES = (RequestAction, ResponseAction, SecretAction, DocumentAction)


def unprocessable(descriptor: object) -> ConfigurationFault:
    return ConfigurationFault(
        f"descriptor unprocessable: {type(descriptor).__name__}",
        status_code=501,
    )


def check_descriptor(descriptor: object) -> ActionDescriptor:
    """Return the descriptor if it is one of the four known types, else raise a 501 fault."""
    if not isinstance(descriptor, DESCRIPTOR_TYPES):
        raise unprocessable(descriptor)
    return descriptor


class ActionExecutor:
    """
    Dispatches descriptors to the outbound runner, secret store or
    document store.

    Secret writes require ``allow_secret_write``; without it a Secret POST
    fails before the store is touched.
    """

    def __init__(
        self,
        *,
        runner: OutboundRequestRunner,
        secrets: SecretStore,
        documents: DocumentStore,
        allow_secret_write: bool = False,
    ):
        self.runner = runner
        self.secrets = secrets
        self.documents = documents
        self.allow_secret_write = allow_secret_write

    async def execute(self, descriptor: ActionDescriptor) -> RawOutcome:
        """
        Execute one descriptor.

        Raises:
            ConfigurationFault: Descriptor is not one of the known types
            UpstreamFault: The collaborator failed or returned nothing
            AuthorizationFault: Secret POST without write privilege
        """
        if isinstance(descriptor, RequestAction):
            return await self._execute_request(descriptor)
        elif isinstance(descriptor, ResponseAction):
            return RawOutcome(
                headers=dict(descriptor.headers),
                body=descriptor.body,
                status_code=descriptor.status_code,
            )
        elif isinstance(descriptor, SecretAction):
            return await self._execute_secret(descriptor)
        elif isinstance(descriptor, DocumentAction):
            return await self._execute_document(descriptor)

        raise unprocessable(descriptor)

    async def _execute_request(self, action: RequestAction) -> RawOutcome:
        label = action.name or action.url
        logger.debug(f"process |request| {label}: {action.method} {action.url}")

        response = await self.runner.send(
            action.url,
            method=action.method,
            headers=action.headers,
            body=action.body,
            parameters=action.parameters,
            timeout=action.timeout,
        )

        return RawOutcome(
            headers=dict(response.headers),
            body=response.body,
            status_code=response.status_code,
            content_type=response.content_type,
        )

    async def _execute_secret(self, action: SecretAction) -> RawOutcome:
        if action.method is SecretMethod.GET:
            value = await self.secrets.get(action.secret_id, action.region)
            if not value:
                raise UpstreamFault(f"|{action.secret_id}| secret not found")
        elif action.method is SecretMethod.POST:
            if not self.allow_secret_write:
                raise AuthorizationFault(f"|{action.secret_id}| not authorized to store secret")
            value = await self.secrets.store(action.secret_id, action.secret, action.region)
            if not value:
                raise UpstreamFault(f"|{action.secret_id}| unable to store secret")
        else:
            raise ConfigurationFault(
                f"secret method |{action.method}| unprocessable",
                status_code=501,
            )

        return RawOutcome(
            headers={"Content-Type": SECRET_CONTENT_TYPE},
            body=value,
            status_code=200,
        )

    async def _execute_document(self, action: DocumentAction) -> RawOutcome:
        directory, name, extension = split_document_path(action.path)
        content = await self.documents.get(directory, name, extension)
        if content is None:
            raise UpstreamFault(f"|{action.path}| document not found", status_code=404)

        content_type, binary = DOCUMENT_TYPES.get(
            extension,
            (None, isinstance(content, bytes)),
        )

        return RawOutcome(
            headers={"Content-Type": content_type} if content_type else {},
            body=content,
            status_code=200,
            content_type=content_type,
            binary=binary,
        )
