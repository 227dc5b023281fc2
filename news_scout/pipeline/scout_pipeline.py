from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from ..models import RankedResult, Run, utc_now
from ..orchestrator import Orchestrator
from ..output.message_formatter import format_results_message
from ..output.telegram_client import TelegramClient
from ..processors import apply_filters, deduplicate_articles, rank_candidates
from ..processors.ai import LLMClient, create_llm_client
from ..processors.rank import MAX_RESULTS
from ..storage import JsonRunStore, UsageLog, UsageRecord, WorkspaceStore
from ..utils.logging import get_logger
from ..utils.pipeline_config import ScoutConfig
from ..utils.pricing import estimate_cost_cents
from .run_log import RunLog

logger = get_logger("scout.pipeline")


def execute_run(
    run_id: str,
    *,
    runs: JsonRunStore,
    workspaces: WorkspaceStore,
    llm: Optional[LLMClient] = None,
    notifier: Optional[TelegramClient] = None,
    usage_log: Optional[UsageLog] = None,
    orchestrator: Optional[Orchestrator] = None,
    config: Optional[ScoutConfig] = None,
    now: Optional[datetime] = None,
) -> Run:
    """Execute one run end to end and persist its outcome.

    A run that is no longer ``running`` is returned untouched, so a duplicate
    trigger is harmless. Any failure after the claim is recorded on the run
    (status ``error``) and re-raised. Delivery lines are saved with a second
    write once notifications finish.
    """
    cfg = config or ScoutConfig.from_env()
    run = runs.get(run_id)
    if run is None:
        raise LookupError(f"Run {run_id} not found")
    if run.status != "running":
        logger.info("Run %s already %s; skipping", run_id, run.status)
        return run

    run_log = RunLog(run.id, run.logs)
    try:
        topic = workspaces.get_topic(run.workspace_id, run.topic_id)
        sources = workspaces.active_sources(run.workspace_id)
        run_log.add("init", f"Topic: {topic.name} | Model: {topic.model}")
        run_log.add("init", f"Active sources: {len(sources)}")

        orch = orchestrator or Orchestrator(config=cfg)
        fetched = orch.fetch_all(sources, topic.description, run_log)
        candidates = orch.apply_cap(fetched, topic.max_sources_per_run, run_log)

        filtered = apply_filters(
            candidates, topic.negative_filters, hours_back=cfg.lookback_hours, now=now
        )
        run_log.add("filter", f"Passed: {len(filtered.filtered)} | Removed: {filtered.removed}")

        deduped = deduplicate_articles(filtered.filtered, threshold=cfg.similarity_threshold)
        run_log.add("dedup", f"After dedup: {len(deduped)} unique stories")

        cost_cents = 0
        if len(deduped) <= MAX_RESULTS:
            run_log.add("rank", f"{len(deduped)} candidates (≤{MAX_RESULTS}), skipping LLM")
            ranked = rank_candidates(deduped, topic.description, topic.model, now=now)
        else:
            run_log.add("rank", f"Ranking {len(deduped)} candidates via {topic.model}")
            client = llm or create_llm_client()
            ranked = rank_candidates(
                deduped, topic.description, topic.model, client=client, now=now
            )
            cost_cents = estimate_cost_cents(topic.model, ranked.input_tokens, ranked.output_tokens)
            run_log.add(
                "rank",
                f"LLM done: {ranked.input_tokens} in / {ranked.output_tokens} out | "
                f"{ranked.latency_ms}ms | {cost_cents}¢"
                + (" | parsed from text" if ranked.used_fallback else ""),
            )
            if usage_log is not None:
                usage_log.record(
                    UsageRecord(
                        provider=client.provider,
                        model=topic.model,
                        input_tokens=ranked.input_tokens,
                        output_tokens=ranked.output_tokens,
                        latency_ms=ranked.latency_ms,
                        workspace_id=run.workspace_id,
                        run_id=run.id,
                        cost_cents=cost_cents,
                    )
                )

        run.status = "done"
        run.result_meta = list(ranked.results)
        run.result_urls = [r.url for r in ranked.results]
        run.cost_cents = cost_cents
        run.candidate_count = len(candidates)
        run.logs = list(run_log.entries)
        run.finished_at = utc_now()
        runs.save(run)
    except Exception as exc:
        run_log.add("error", str(exc) or type(exc).__name__, level=logging.ERROR)
        run.status = "error"
        run.error_message = str(exc) or type(exc).__name__
        run.logs = list(run_log.entries)
        run.finished_at = utc_now()
        runs.save(run)
        raise

    if notifier is not None and run.result_meta:
        _notify(
            notifier,
            workspaces.recipients(run.workspace_id),
            topic.name,
            run.result_meta,
            run_log,
        )
        run.logs = list(run_log.entries)
        runs.save(run)
    return run


def _notify(
    notifier: TelegramClient,
    recipients: List[str],
    topic_name: str,
    results: Sequence[RankedResult],
    run_log: RunLog,
) -> int:
    """Send the results to every recipient; one failure never stops the rest."""
    if not recipients:
        run_log.add("notify", "No linked recipients")
        return 0
    text = format_results_message(topic_name, results)
    sent = 0
    for recipient in recipients:
        try:
            notifier.send(recipient, text, "HTML")
            sent += 1
        except Exception as exc:  # noqa: BLE001 - delivery is best effort per recipient
            run_log.add("notify", f"Delivery to {recipient} failed: {exc}", level=logging.WARNING)
    run_log.add("notify", f"Notifications sent: {sent}/{len(recipients)}")
    return sent
