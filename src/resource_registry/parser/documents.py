"""Specification document loading.

A document is either a single-resource spec file or a domain-merged file.
Both variants are read once, kept immutable, and expose ``descriptors()``
so the registry merger can treat them alike.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from resource_registry.errors import DocumentLoadError, InputRootError

from .base import ResourceDescriptor
from .descriptor import build_domain_descriptors, build_spec_descriptor
from .detect import detect_kind, domain_tag
from .schema_id import extract_schema_id

logger = logging.getLogger(__name__)


class SingleSpecDocument(BaseModel):
    """One resource, described by a file following the spec naming grammar."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"
    identifier: str  # the filename
    schema_id: str
    content: dict

    def descriptors(self) -> list[ResourceDescriptor]:
        descriptor = build_spec_descriptor(self.identifier, self.schema_id, self.content)
        return [descriptor] if descriptor is not None else []


class DomainDocument(BaseModel):
    """Many resources merged into one file under a domain tag."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["domain"] = "domain"
    identifier: str
    domain: str | None = None
    content: dict

    def descriptors(self) -> list[ResourceDescriptor]:
        return build_domain_descriptors(self.identifier, self.domain, self.content)


SpecDocument = Annotated[Union[SingleSpecDocument, DomainDocument], Field(discriminator="kind")]


def read_document(file_path: Path) -> dict:
    """Read and parse one JSON document. Raises DocumentLoadError."""
    try:
        content = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentLoadError(file_path, str(e)) from e
    except json.JSONDecodeError as e:
        raise DocumentLoadError(file_path, f"invalid JSON ({e.msg} at line {e.lineno})") from e

    if not isinstance(content, dict):
        raise DocumentLoadError(file_path, "top-level value is not an object")
    return content


def load_spec_document(file_path: Path) -> SingleSpecDocument | None:
    schema_id = extract_schema_id(file_path.name)
    if not schema_id:
        logger.warning("Skipping %s: filename does not follow the spec naming convention", file_path.name)
        return None
    content = read_document(file_path)
    return SingleSpecDocument(identifier=file_path.name, schema_id=schema_id, content=content)


def load_domain_document(file_path: Path, strict: bool = False) -> DomainDocument | None:
    content = read_document(file_path)
    domain = domain_tag(content)
    if strict and not domain:
        logger.warning("Skipping %s: no domain tag", file_path.name)
        return None
    return DomainDocument(identifier=file_path.name, domain=domain, content=content)


def load_document(file_path: Path, kind: str = "auto", strict: bool = False) -> SpecDocument | None:
    """Load one document of the given kind ('single', 'domain' or 'auto').

    Per-document failures are logged and yield None so a batch can go on.
    """
    if kind == "auto":
        kind = detect_kind(file_path)

    try:
        if kind == "single":
            return load_spec_document(file_path)
        return load_domain_document(file_path, strict=strict)
    except DocumentLoadError as e:
        logger.error("%s", e)
        return None


def list_document_files(directory: Path) -> list[Path]:
    """List JSON documents in a directory, sorted by filename.

    The sort is what makes first-occurrence deduplication reproducible, so it
    must not depend on the filesystem's enumeration order.
    """
    if not directory.exists():
        raise InputRootError(f"Input directory not found: {directory}")
    if not directory.is_dir():
        raise InputRootError(f"Input path is not a directory: {directory}")
    return sorted((p for p in directory.iterdir() if p.suffix == ".json"), key=lambda p: p.name)


def load_documents(
    directory: Path,
    kind: str = "auto",
    strict: bool = False,
    max_workers: int = 1,
) -> list[SpecDocument]:
    """Load every document in a directory, in sorted identifier order.

    Reads may run on a thread pool; ``executor.map`` hands results back in
    input order, so the returned list is always sorted by filename.
    """
    files = list_document_files(directory)
    logger.info("Found %d document files in %s", len(files), directory)

    def load(file_path: Path) -> SpecDocument | None:
        return load_document(file_path, kind=kind, strict=strict)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            loaded = list(executor.map(load, files))
    else:
        loaded = [load(file_path) for file_path in files]

    return [doc for doc in loaded if doc is not None]
