"""Auto-detect the kind of an API specification document."""

from pathlib import Path

from .schema_id import extract_schema_id

DOMAIN_TAG_KEYS = ("x-ves-cli-domain", "x-f5xc-cli-domain")


def domain_tag(content: dict) -> str | None:
    """Return the document's domain tag from ``info``, if it has one."""
    info = content.get("info") if isinstance(content, dict) else None
    if not isinstance(info, dict):
        return None
    for key in DOMAIN_TAG_KEYS:
        if info.get(key):
            return info[key]
    return None


def detect_kind(file_path: Path) -> str:
    """Detect whether a document describes one resource or a whole domain.

    Files following the single-spec naming grammar are 'single'; anything
    else is treated as a domain-merged file.

    Returns: 'single' or 'domain'.
    """
    if extract_schema_id(file_path.name):
        return "single"
    return "domain"
