"""CLI entrypoint for business entity assembly, notability gating and Wikibase publishing."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from wikidata_publish.assembly.assembler import assemble
from wikidata_publish.common.config_loader import ConfigBundle, load_all_configs
from wikidata_publish.common.constants import (
    COMMANDS,
    EXIT_HARD_FAIL,
    EXIT_NOT_NOTABLE,
    EXIT_PUBLISH_FAILED,
    EXIT_SUCCESS,
    PUBLISH_IN_FLIGHT,
    PUBLISH_TARGETS,
)
from wikidata_publish.common.errors import ConfigError, PipelineError
from wikidata_publish.common.fs import read_json, write_json
from wikidata_publish.common.ids import generate_run_id
from wikidata_publish.common.logging import build_logger, log_event, log_failure
from wikidata_publish.gate.notability import validate
from wikidata_publish.model.inputs import BusinessRecord, CrawledData, NotabilityAssessment
from wikidata_publish.pipeline.publish_state import (
    current_state,
    load_publish_state,
    mark_publishing,
    record_outcome,
    state_path,
)
from wikidata_publish.pipeline.reports import entity_path, write_business_report, write_run_summary
from wikidata_publish.publish.action_api import ActionApiPublisher
from wikidata_publish.publish.runner import PublishOutcome, publish_with_retry
from wikidata_publish.publish.state import PUBLISHED, PUBLISHING

# Later exit codes win when several businesses finish differently.
_EXIT_SEVERITY = (EXIT_SUCCESS, EXIT_NOT_NOTABLE, EXIT_PUBLISH_FAILED, EXIT_HARD_FAIL)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*COMMANDS, "all"])
    parser.add_argument("--input", default="./data/in/businesses.json")
    parser.add_argument("--target", default="test", choices=list(PUBLISH_TARGETS))
    parser.add_argument("--csrf-token", default=os.environ.get("WIKIDATA_CSRF_TOKEN"))
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def load_inputs(path: Path) -> list[tuple[BusinessRecord, CrawledData | None, NotabilityAssessment | None]]:
    """Read business items from JSON: one object or a list of ``{business, crawled?, notability?}``."""
    if not path.exists():
        raise ConfigError(f"Missing input file: {path}")
    payload = read_json(path)
    items = payload if isinstance(payload, list) else [payload]

    out = []
    for item in items:
        if not isinstance(item, dict):
            raise ConfigError(f"Input items must be JSON objects, got {type(item).__name__}")
        raw_business = item.get("business", item)
        raw_crawled = item.get("crawled") or item.get("crawlData")
        raw_notability = item.get("notability")
        record = BusinessRecord.from_dict(raw_business)
        if not record.business_id:
            raise ConfigError("Every business needs an id")
        out.append(
            (
                record,
                CrawledData.from_dict(raw_crawled) if isinstance(raw_crawled, dict) else None,
                NotabilityAssessment.from_dict(raw_notability) if isinstance(raw_notability, dict) else None,
            )
        )
    return out


def _token_provider(publisher: ActionApiPublisher, target: str, initial: str | None):
    pending = [initial] if initial else []

    def _provide() -> str:
        if pending:
            return pending.pop()
        return publisher.fetch_csrf_token(target)

    return _provide


def process_business(
    command: str,
    record: BusinessRecord,
    crawled: CrawledData | None,
    external: NotabilityAssessment | None,
    *,
    bundle: ConfigBundle,
    args: argparse.Namespace,
    publisher: ActionApiPublisher | None,
    data_dir: Path,
    run_id: str,
    logger,
) -> int:
    business_id = record.business_id
    entity = assemble(record, crawled, lookups=bundle.qid_lookups)
    write_json(entity_path(data_dir, business_id), entity.to_dict())
    log_event(
        logger,
        "entity assembled",
        run_id=run_id,
        stage="assemble",
        business_id=business_id,
        event="ASSEMBLED",
        status="ok",
        property_count=len(entity.claims),
    )
    if command == "assemble":
        write_business_report(data_dir, run_id=run_id, business_id=business_id, entity=entity)
        return EXIT_SUCCESS

    notability = validate(entity, external)
    log_event(
        logger,
        "; ".join(notability.reasons) or "entity is notable",
        run_id=run_id,
        stage="validate",
        business_id=business_id,
        event="VALIDATED",
        status="ok" if notability.is_notable else "rejected",
        property_count=len(entity.claims),
    )
    if command == "validate" or not notability.is_notable:
        write_business_report(data_dir, run_id=run_id, business_id=business_id, entity=entity, notability=notability)
        return EXIT_SUCCESS if notability.is_notable else EXIT_NOT_NOTABLE

    path = state_path(data_dir)
    state = current_state(load_publish_state(path), business_id)
    if state == PUBLISHED:
        log_event(
            logger,
            "already published; skipping",
            run_id=run_id,
            stage="publish",
            business_id=business_id,
            target=args.target,
            event="PUBLISH_SKIPPED",
            status="ok",
        )
        write_business_report(data_dir, run_id=run_id, business_id=business_id, entity=entity, notability=notability)
        return EXIT_SUCCESS
    if state == PUBLISHING:
        # A create call may have landed; only reconciliation against the wiki can clear this.
        outcome = PublishOutcome(
            business_id=business_id,
            state=PUBLISHING,
            error_code=PUBLISH_IN_FLIGHT,
            message="publish already in flight or interrupted; reconcile before retrying",
        )
        log_failure(
            logger,
            outcome.message,
            run_id=run_id,
            stage="publish",
            business_id=business_id,
            target=args.target,
            event="PUBLISH_BLOCKED",
            status="error",
            error_code=outcome.error_code,
        )
        write_business_report(
            data_dir,
            run_id=run_id,
            business_id=business_id,
            entity=entity,
            notability=notability,
            outcome=outcome,
        )
        return EXIT_HARD_FAIL

    mark_publishing(path, business_id, target=args.target)
    outcome = publish_with_retry(
        publisher,
        entity,
        args.target,
        business_id=business_id,
        token_provider=_token_provider(publisher, args.target, args.csrf_token),
        retry_config=bundle.retry(),
        state=state,
        timeout=bundle.timeout(),
        logger=logger,
    )
    record_outcome(path, outcome, target=args.target)
    write_business_report(
        data_dir,
        run_id=run_id,
        business_id=business_id,
        entity=entity,
        notability=notability,
        outcome=outcome,
    )
    if outcome.state == PUBLISHED:
        log_event(
            logger,
            f"published as {outcome.qid}",
            run_id=run_id,
            stage="publish",
            business_id=business_id,
            target=args.target,
            event="PUBLISHED",
            status="ok",
            attempt=outcome.attempts,
        )
        return EXIT_SUCCESS

    log_failure(
        logger,
        outcome.message or "publish failed",
        run_id=run_id,
        stage="publish",
        business_id=business_id,
        target=args.target,
        event="PUBLISH_FAIL",
        status="error",
        attempt=outcome.attempts,
        error_code=outcome.error_code,
    )
    return EXIT_PUBLISH_FAILED if outcome.retryable else EXIT_HARD_FAIL


def _worst(current: int, new: int) -> int:
    return max(current, new, key=_EXIT_SEVERITY.index)


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
    inputs = load_inputs(Path(args.input))
    command = "publish" if args.command == "all" else args.command
    publisher = ActionApiPublisher.from_config(bundle) if command == "publish" else None

    exit_code = EXIT_SUCCESS
    business_ids: list[str] = []
    log_event(logger, "run start", run_id=run_id, stage=command, event="RUN_START", status="ok")
    try:
        for record, crawled, external in inputs:
            business_ids.append(record.business_id)
            try:
                result = process_business(
                    command,
                    record,
                    crawled,
                    external,
                    bundle=bundle,
                    args=args,
                    publisher=publisher,
                    data_dir=data_dir,
                    run_id=run_id,
                    logger=logger,
                )
            except PipelineError as exc:
                log_failure(
                    logger,
                    f"failed for business {record.business_id}: {exc}",
                    run_id=run_id,
                    stage=command,
                    business_id=record.business_id,
                    event="BUSINESS_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                result = EXIT_HARD_FAIL
            exit_code = _worst(exit_code, result)
            if args.strict and result != EXIT_SUCCESS:
                break
    finally:
        if publisher is not None:
            publisher.http.close()

    write_run_summary(data_dir, run_id=run_id, business_ids=business_ids)
    log_event(logger, "run end", run_id=run_id, stage=command, event="RUN_END", status="ok")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
