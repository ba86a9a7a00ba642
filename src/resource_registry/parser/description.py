"""Description normalization.

Replaces legacy Volterra branding in user-facing descriptions with current
F5 Distributed Cloud terminology. URLs and API field names that contain the
legacy name are protected so they survive untouched.
"""

import re

# Applied in order; more specific patterns come first.
TERMINOLOGY_REPLACEMENTS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\bregional sites from volterra\b", re.IGNORECASE), "F5 XC Regional Edge sites"),
    (re.compile(r"\bvolterra service\b", re.IGNORECASE), "F5 XC service"),
    (re.compile(r"\bvolterra edge cloud\b", re.IGNORECASE), "F5 XC edge cloud"),
    (re.compile(r"\bvolterra software appliance\b", re.IGNORECASE), "F5 XC software appliance"),
    (re.compile(r"\bvolterra site\b", re.IGNORECASE), "F5 XC site"),
    (re.compile(r"\bVolterra's\b", re.IGNORECASE), "F5 XC's"),
    (re.compile(r"\bVolterra\b"), "F5 XC"),
    (re.compile(r"\bvolterra\b"), "F5 XC"),
    (re.compile(r"\bVoltConsole\b"), "F5 XC Console"),
]

PRESERVE_PATTERNS: list[re.Pattern] = [
    re.compile(r"console\.ves\.volterra\.io"),
    re.compile(r"volterra_software_version"),
    re.compile(r"dns_volterra_managed"),
    re.compile(r"volterra_trusted_ca"),
]

_TOKEN_FORMAT = "__PRESERVED_{}__"


def _protect(text: str) -> tuple[str, dict[str, str]]:
    preserved: dict[str, str] = {}

    def stash(match: re.Match) -> str:
        token = _TOKEN_FORMAT.format(len(preserved))
        preserved[token] = match.group(0)
        return token

    for pattern in PRESERVE_PATTERNS:
        text = pattern.sub(stash, text)
    return text, preserved


def _restore(text: str, preserved: dict[str, str]) -> str:
    for token, original in preserved.items():
        text = text.replace(token, original)
    return text


def normalize_description(description: str | None) -> str:
    """Normalize legacy product terminology in a description."""
    if not description:
        return description or ""

    result, preserved = _protect(description)
    for pattern, replacement in TERMINOLOGY_REPLACEMENTS:
        result = pattern.sub(replacement, result)
    return _restore(result, preserved)


def analyze_description(description: str) -> dict:
    """Report what normalization would change in a description.

    Returns a dict with ``original``, ``normalized`` and ``changes`` (a list
    of ``{"from": ..., "to": ...}`` pairs).
    """
    normalized = normalize_description(description)
    changes = []
    if description != normalized:
        protected, _ = _protect(description)
        for pattern, replacement in TERMINOLOGY_REPLACEMENTS:
            for match in pattern.findall(protected):
                if match not in normalized:
                    changes.append({"from": match, "to": replacement})
    return {"original": description, "normalized": normalized, "changes": changes}
