"""Per-business and per-run JSON reports."""

from __future__ import annotations

import hashlib
from pathlib import Path

from wikidata_publish.common.fs import read_json, write_json
from wikidata_publish.gate.notability import NotabilityResult
from wikidata_publish.model.entity import WikidataEntity
from wikidata_publish.publish.runner import PublishOutcome

# Human-readable names for report output only.
PROPERTY_LABELS = {
    "P17": "country",
    "P31": "instance of",
    "P131": "located in the administrative territorial entity",
    "P249": "ticker symbol",
    "P452": "industry",
    "P571": "inception",
    "P576": "dissolved, abolished or demolished date",
    "P585": "point in time",
    "P625": "coordinate location",
    "P813": "retrieved",
    "P854": "reference URL",
    "P856": "official website",
    "P968": "email address",
    "P1128": "employees",
    "P1329": "phone number",
    "P1448": "official name",
    "P1454": "legal form",
    "P1476": "title",
    "P2002": "X username",
    "P2003": "Instagram username",
    "P2013": "Facebook username",
    "P4264": "LinkedIn company ID",
    "P6375": "street address",
}


def property_label(pid: str) -> str:
    return PROPERTY_LABELS.get(pid, pid)


def reports_dir(data_dir: Path) -> Path:
    return data_dir / "out" / "reports"


def _slug(business_id: str) -> str:
    slug = "".join(char if char.isalnum() or char in "-_" else "_" for char in business_id)
    if slug and slug == business_id:
        return slug
    # lossy: suffix a digest of the raw id so "a/b" and "a_b" stay distinct
    digest = hashlib.sha1(business_id.encode("utf-8")).hexdigest()[:10]
    return f"{slug or 'business'}-{digest}"


def entity_path(data_dir: Path, business_id: str) -> Path:
    return data_dir / "out" / "entities" / f"{_slug(business_id)}.json"


def report_path(data_dir: Path, business_id: str) -> Path:
    return reports_dir(data_dir) / f"{_slug(business_id)}_report.json"


def summarise_properties(entity: WikidataEntity) -> list[dict]:
    return [
        {
            "pid": pid,
            "label": property_label(pid),
            "statements": len(claims),
            "referenced": any(claim.has_references() for claim in claims),
        }
        for pid, claims in entity.claims.items()
    ]


def write_business_report(
    data_dir: Path,
    *,
    run_id: str,
    business_id: str,
    entity: WikidataEntity,
    notability: NotabilityResult | None = None,
    outcome: PublishOutcome | None = None,
) -> Path:
    if outcome is not None:
        status = outcome.state
    elif notability is not None and not notability.is_notable:
        status = "not_notable"
    elif notability is not None:
        status = "eligible"
    else:
        status = "assembled"

    payload = {
        "run_id": run_id,
        "business_id": business_id,
        "status": status,
        "label": entity.labels["en"].value if "en" in entity.labels else None,
        "property_count": len(entity.claims),
        "properties": summarise_properties(entity),
        "notability": notability.to_dict() if notability is not None else None,
        "publish": outcome.to_dict() if outcome is not None else None,
    }
    path = report_path(data_dir, business_id)
    write_json(path, payload)
    return path


def write_run_summary(data_dir: Path, run_id: str, business_ids: list[str]) -> Path:
    business_reports = {}
    totals = {
        "assembled": 0,
        "eligible": 0,
        "not_notable": 0,
        "published": 0,
        "publishing": 0,
        "error": 0,
    }
    missing_count = 0

    for business_id in business_ids:
        path = report_path(data_dir, business_id)
        if not path.exists():
            business_reports[business_id] = {"status": "missing_report"}
            missing_count += 1
            continue
        report = read_json(path)
        status = report.get("status", "assembled")
        business_reports[business_id] = {
            "status": status,
            "property_count": report.get("property_count", 0),
            "qid": (report.get("publish") or {}).get("qid"),
            "reasons": (report.get("notability") or {}).get("reasons", []),
        }
        totals[status] = totals.get(status, 0) + 1

    status = "success"
    if totals["error"] > 0 or totals["publishing"] > 0 or missing_count > 0:
        status = "error"
    elif totals["not_notable"] > 0:
        status = "partial"

    summary_path = reports_dir(data_dir) / "run_summary.json"
    write_json(
        summary_path,
        {
            "run_id": run_id,
            "status": status,
            "businesses": business_ids,
            "totals": totals,
            "missing_count": missing_count,
            "business_reports": business_reports,
        },
    )
    return summary_path
