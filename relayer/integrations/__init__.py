"""
Relayer collaborators.

The chain engine talks to the outside world only through these:

- OutboundRequestRunner: outbound HTTP for Request hops
- SecretStore: secret reads and writes for Secret hops
- DocumentStore: static content for Document hops
"""

from .documents import DocumentStore, FileDocumentStore, split_document_path
from .http import OutboundRequestRunner, OutboundResponse, RetryableUpstreamFault, create_url
from .secrets import (
    AWSSecretStore,
    InMemorySecretStore,
    SecretStore,
    coerce_secret,
    create_secret_store,
)

__all__ = [
    # HTTP
    "OutboundRequestRunner",
    "OutboundResponse",
    "RetryableUpstreamFault",
    "create_url",
    # Secrets
    "SecretStore",
    "InMemorySecretStore",
    "AWSSecretStore",
    "coerce_secret",
    "create_secret_store",
    # Documents
    "DocumentStore",
    "FileDocumentStore",
    "split_document_path",
]
