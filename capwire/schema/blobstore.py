"""
capwire.schema.blobstore
========================

Blob store operations (capability id ``capwire:blobstore``). Blobs live in
containers and move in chunks: uploads are opened with StartUpload and fed
with UploadChunk; downloads are opened with StartDownload and delivered to
the actor as a stream of FileChunk messages (ReceiveChunk).

- "BlobStore.CreateContainer"  Container -> Container
- "BlobStore.RemoveContainer"  Container -> Empty
- "BlobStore.ListContainers"   Empty -> ContainerList
- "BlobStore.ListObjects"      Container -> BlobList
- "BlobStore.GetObjectInfo"    Blob -> Blob
- "BlobStore.RemoveObject"     Blob -> Empty
- "BlobStore.StartUpload"      StartUploadRequest -> StartUploadResponse
- "BlobStore.UploadChunk"      UploadChunk -> Empty
- "BlobStore.StartDownload"    StreamRequest -> Transfer
- "BlobStore.ReceiveChunk"     FileChunk -> Empty   (provider -> actor)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from .base import BYTES, STR, U64, Message, list_of, struct, wire
from .core import Empty, OperationDirection

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

CAPABILITY_ID = "capwire:blobstore"

OP_CREATE_CONTAINER = "BlobStore.CreateContainer"
OP_REMOVE_CONTAINER = "BlobStore.RemoveContainer"
OP_LIST_CONTAINERS = "BlobStore.ListContainers"
OP_LIST_OBJECTS = "BlobStore.ListObjects"
OP_GET_OBJECT_INFO = "BlobStore.GetObjectInfo"
OP_REMOVE_OBJECT = "BlobStore.RemoveObject"
OP_START_UPLOAD = "BlobStore.StartUpload"
OP_UPLOAD_CHUNK = "BlobStore.UploadChunk"
OP_START_DOWNLOAD = "BlobStore.StartDownload"
OP_RECEIVE_CHUNK = "BlobStore.ReceiveChunk"


@dataclass(frozen=True, kw_only=True)
class Container(Message):
    id: str = wire(STR)

    @classmethod
    def sample(cls) -> "Container":
        return cls(id="container")


@dataclass(frozen=True, kw_only=True)
class ContainerList(Message):
    containers: List[Container] = wire(list_of(struct(Container)), default_factory=list)

    @classmethod
    def sample(cls) -> "ContainerList":
        return cls(containers=[Container(id="container")])


@dataclass(frozen=True, kw_only=True)
class Blob(Message):
    id: str = wire(STR)
    container: str = wire(STR)
    # total size in bytes; 0 when used as a lookup key
    byte_size: int = wire(U64, default=0)

    @classmethod
    def sample(cls) -> "Blob":
        return cls(id="blob", container="container", byte_size=53400)


@dataclass(frozen=True, kw_only=True)
class BlobList(Message):
    blobs: List[Blob] = wire(list_of(struct(Blob)), default_factory=list)

    @classmethod
    def sample(cls) -> "BlobList":
        return cls(blobs=[Blob.sample()])


@dataclass(frozen=True, kw_only=True)
class StartUploadRequest(Message):
    container: str = wire(STR)
    name: str = wire(STR)
    total_bytes: int = wire(U64)
    # preferred chunk size; 0 lets the provider choose
    chunk_size: int = wire(U64, default=0)

    @classmethod
    def sample(cls) -> "StartUploadRequest":
        return cls(container="container", name="blob", total_bytes=53400, chunk_size=1024)


@dataclass(frozen=True, kw_only=True)
class StartUploadResponse(Message):
    upload_id: str = wire(STR)

    @classmethod
    def sample(cls) -> "StartUploadResponse":
        return cls(upload_id="upl-0001")


@dataclass(frozen=True, kw_only=True)
class UploadChunk(Message):
    upload_id: str = wire(STR)
    chunk_index: int = wire(U64)
    chunk_bytes: bytes = wire(BYTES, key="bytes")

    @classmethod
    def sample(cls) -> "UploadChunk":
        return cls(upload_id="upl-0001", chunk_index=5, chunk_bytes=b"\x01\x02\x03\x04\x05")


@dataclass(frozen=True, kw_only=True)
class StreamRequest(Message):
    """Request to download a blob. `chunk_size` is a preference, not a promise."""

    id: str = wire(STR)
    container: str = wire(STR)
    chunk_size: int = wire(U64)

    @classmethod
    def sample(cls) -> "StreamRequest":
        return cls(id="blob", container="container", chunk_size=1024)


@dataclass(frozen=True, kw_only=True)
class Transfer(Message):
    blob_id: str = wire(STR)
    container: str = wire(STR)
    chunk_size: int = wire(U64)
    total_size: int = wire(U64)
    total_chunks: int = wire(U64)

    @classmethod
    def sample(cls) -> "Transfer":
        return cls(
            blob_id="blob",
            container="container",
            chunk_size=1024,
            total_size=53400,
            total_chunks=53,
        )


@dataclass(frozen=True, kw_only=True)
class FileChunk(Message):
    """
    One chunk of a blob download. The last chunk of a stream may be shorter
    than `chunk_size`.
    """

    sequence_no: int = wire(U64)
    container: str = wire(STR)
    id: str = wire(STR)
    total_bytes: int = wire(U64)
    chunk_size: int = wire(U64)
    chunk_bytes: bytes = wire(BYTES, default=b"")

    @classmethod
    def sample(cls) -> "FileChunk":
        return cls(
            sequence_no=5,
            container="container",
            id="blob",
            total_bytes=53400,
            chunk_size=1024,
            chunk_bytes=b"\x01\x02\x03\x04\x05",
        )


def register(registry: "OperationRegistry") -> None:
    reg = registry.for_capability(CAPABILITY_ID)
    to_provider = OperationDirection.TO_PROVIDER
    reg.register(OP_CREATE_CONTAINER, Container, Container,
                 direction=to_provider, doc="Create a container")
    reg.register(OP_REMOVE_CONTAINER, Container, Empty,
                 direction=to_provider, doc="Remove a container and its blobs")
    reg.register(OP_LIST_CONTAINERS, Empty, ContainerList,
                 direction=to_provider, doc="List containers")
    reg.register(OP_LIST_OBJECTS, Container, BlobList,
                 direction=to_provider, doc="List the blobs in a container")
    reg.register(OP_GET_OBJECT_INFO, Blob, Blob,
                 direction=to_provider, doc="Fetch blob metadata")
    reg.register(OP_REMOVE_OBJECT, Blob, Empty,
                 direction=to_provider, doc="Remove a blob")
    reg.register(OP_START_UPLOAD, StartUploadRequest, StartUploadResponse,
                 direction=to_provider, doc="Open a chunked upload")
    reg.register(OP_UPLOAD_CHUNK, UploadChunk, Empty,
                 direction=to_provider, doc="Send one chunk of an open upload")
    reg.register(OP_START_DOWNLOAD, StreamRequest, Transfer,
                 direction=to_provider, doc="Start streaming a blob to the actor")
    reg.register(OP_RECEIVE_CHUNK, FileChunk, Empty,
                 direction=OperationDirection.TO_ACTOR, doc="Deliver one chunk of a download")


__all__ = [
    "CAPABILITY_ID",
    "OP_CREATE_CONTAINER",
    "OP_REMOVE_CONTAINER",
    "OP_LIST_CONTAINERS",
    "OP_LIST_OBJECTS",
    "OP_GET_OBJECT_INFO",
    "OP_REMOVE_OBJECT",
    "OP_START_UPLOAD",
    "OP_UPLOAD_CHUNK",
    "OP_START_DOWNLOAD",
    "OP_RECEIVE_CHUNK",
    "Container",
    "ContainerList",
    "Blob",
    "BlobList",
    "StartUploadRequest",
    "StartUploadResponse",
    "UploadChunk",
    "StreamRequest",
    "Transfer",
    "FileChunk",
    "register",
]
