"""
Citation readiness: how well a site is set up to be cited by AI answer engines.

Three weighted sub-scores add up to 100:

- structured data (40): 10 points per page carrying any structured data
- E-E-A-T signals (30): 5 points per trust keyword found in titles,
  descriptions and headings, plus 5 for Organization schema
- content quality (30): 7 points per page over 100 words (max 20) and
  5 points per page with an H1 or H2 (max 10)
"""

from __future__ import annotations

from typing import Any, Iterator

from ..models import SiteSnapshot
from .common import count_by_severity, make_issue

STRUCTURED_DATA_MAX = 40
EEAT_MAX = 30
CONTENT_MAX = 30
EEAT_KEYWORDS = ("author", "about", "team", "contact", "privacy", "terms")
AUTHOR_TYPES = {"person", "author"}
ORGANIZATION_TYPES = {"organization", "corporation"}
SUBSTANTIAL_WORDS = 100
THIN_CONTENT_WORDS = 50


def normalize_type(value: Any) -> str:
    cleaned = str(value or "").strip().rstrip("/")
    if "#" in cleaned:
        cleaned = cleaned.rsplit("#", 1)[-1]
    if "/" in cleaned:
        cleaned = cleaned.rsplit("/", 1)[-1]
    return cleaned.lower()


def type_list(raw_type: Any) -> list[str]:
    values = raw_type if isinstance(raw_type, list) else [raw_type]
    return [t for t in (normalize_type(v) for v in values) if t]


def mentions_schema_org(value: Any) -> bool:
    if isinstance(value, list):
        return any(mentions_schema_org(v) for v in value)
    if isinstance(value, dict):
        return any(mentions_schema_org(v) for v in value.values())
    return isinstance(value, str) and "schema.org" in value.lower()


def iter_schema_nodes(value: Any, inherited_context: Any = None) -> Iterator[tuple[dict[str, Any], Any]]:
    if isinstance(value, dict):
        context = value.get("@context", inherited_context)
        if "@type" in value:
            yield value, context
        for child in value.values():
            yield from iter_schema_nodes(child, context)
    elif isinstance(value, list):
        for child in value:
            yield from iter_schema_nodes(child, inherited_context)


def block_signals(block: dict[str, Any]) -> dict[str, bool]:
    found = {"schema_org": False, "author": False, "organization": False, "faq": False, "howto": False}
    kind = block.get("type")
    if kind == "microdata":
        types = type_list(block.get("schema"))
        found["schema_org"] = mentions_schema_org((block.get("data") or {}).get("itemType"))
        nodes: list[tuple[dict[str, Any], Any]] = []
    elif kind in ("opengraph", "twitter-card"):
        return found
    else:
        # json-ld blocks, or bare JSON-LD payloads from older snapshot files
        payload = block.get("data") if kind == "json-ld" else block
        nodes = list(iter_schema_nodes(payload))
        types = [t for node, _ in nodes for t in type_list(node.get("@type"))]

    for node, context in nodes:
        if mentions_schema_org(context):
            found["schema_org"] = True
        if isinstance(node.get("mainEntity"), list):
            found["faq"] = True
    found["author"] = found["author"] or bool(AUTHOR_TYPES.intersection(types))
    found["organization"] = found["organization"] or bool(ORGANIZATION_TYPES.intersection(types))
    found["faq"] = found["faq"] or "faqpage" in types
    found["howto"] = found["howto"] or "howto" in types
    return found


def check_citation_readiness(snapshot: SiteSnapshot) -> dict[str, Any]:
    site = snapshot.website_url
    signals = {"schema_org": False, "author": False, "organization": False, "faq": False, "howto": False}

    structured_score = 0
    for page in snapshot.pages:
        if not page.structured_data:
            continue
        structured_score += 10
        for block in page.structured_data:
            if not isinstance(block, dict):
                continue
            for key, hit in block_signals(block).items():
                signals[key] = signals[key] or hit
    structured_score = min(structured_score, STRUCTURED_DATA_MAX)

    corpus = " ".join(
        " ".join([p.title or "", p.meta_description or "", " ".join(p.h1), " ".join(p.h2)])
        for p in snapshot.pages
    ).lower()
    matched = [kw for kw in EEAT_KEYWORDS if kw in corpus]
    eeat_score = len(matched) * 5
    if signals["organization"]:
        eeat_score += 5
    eeat_score = min(eeat_score, EEAT_MAX)
    has_author_info = "author" in matched or "team" in matched

    substantial = [p for p in snapshot.pages if p.word_count > SUBSTANTIAL_WORDS]
    with_headings = [p for p in snapshot.pages if p.h1 or p.h2]
    content_score = min(len(substantial) * 7, 20) + min(len(with_headings) * 5, 10)

    issues: list[dict[str, Any]] = []
    if not signals["schema_org"]:
        issues.append(make_issue(
            type="missing_schema_org",
            severity="high",
            page=site,
            message="No Schema.org structured data found. AI systems prefer sites with structured data for citation.",
        ))
    if not signals["author"] and not has_author_info:
        issues.append(make_issue(
            type="missing_author_info",
            severity="medium",
            page=site,
            message="No author information or Author schema found. E-E-A-T requires clear attribution.",
        ))
    if not signals["organization"]:
        issues.append(make_issue(
            type="missing_organization_schema",
            severity="medium",
            page=site,
            message="No Organization schema found. Adding this helps establish authority.",
        ))
    if not signals["faq"]:
        issues.append(make_issue(
            type="missing_faq_schema",
            severity="low",
            page=site,
            message="No FAQ schema found. FAQs are highly valued for AI citations.",
        ))
    if not signals["howto"]:
        issues.append(make_issue(
            type="missing_howto_schema",
            severity="low",
            page=site,
            message="No HowTo schema found. How-to content is frequently cited by AI.",
        ))
    thin = [p for p in snapshot.pages if p.word_count < THIN_CONTENT_WORDS]
    if thin:
        issues.append(make_issue(
            type="thin_content",
            severity="high",
            page=site,
            message=f"{len(thin)} page(s) with very thin content (<{THIN_CONTENT_WORDS} words). AI prefers substantial content.",
        ))

    score = structured_score + eeat_score + content_score
    return {
        "citation_score": score,
        "score": score,
        "max_score": STRUCTURED_DATA_MAX + EEAT_MAX + CONTENT_MAX,
        "total_issues": len(issues),
        "high_severity": count_by_severity(issues, "high"),
        "medium_severity": count_by_severity(issues, "medium"),
        "low_severity": count_by_severity(issues, "low"),
        "checks": {
            "structured_data": {
                "score": structured_score,
                "max": STRUCTURED_DATA_MAX,
                "has_schema_org": signals["schema_org"],
                "has_author_schema": signals["author"],
                "has_organization_schema": signals["organization"],
                "has_faq_schema": signals["faq"],
                "has_howto_schema": signals["howto"],
            },
            "eeat_signals": {
                "score": eeat_score,
                "max": EEAT_MAX,
                "matched_keywords": matched,
                "has_author_info": has_author_info,
                "has_contact_info": "contact" in matched,
                "has_about_page": "about" in matched,
                "has_privacy_policy": "privacy" in matched,
            },
            "content_quality": {
                "score": content_score,
                "max": CONTENT_MAX,
                "pages_with_substantial_content": len(substantial),
                "pages_with_headings": len(with_headings),
            },
        },
        "issues": issues,
    }
