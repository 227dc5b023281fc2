from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional

from .fetchers import AdapterResult, SourceAdapter, create_adapters
from .models import CandidateArticle, SourceConfig
from .pipeline.run_log import RunLog
from .utils.logging import get_logger
from .utils.pipeline_config import ScoutConfig

logger = get_logger("scout.orchestrator")


class Orchestrator:
    """Fans out adapter calls for all active sources and joins on every one.

    A source that fails, raises or hangs until its network timeout only costs
    its own candidates; the remaining sources are always collected.
    """

    def __init__(
        self,
        *,
        adapters: Optional[Mapping[str, SourceAdapter]] = None,
        config: Optional[ScoutConfig] = None,
    ) -> None:
        self.adapters: Dict[str, SourceAdapter] = dict(adapters or create_adapters(config))

    def _fetch_source(self, source: SourceConfig, topic_description: str) -> AdapterResult:
        adapter = self.adapters.get(source.type)
        if adapter is None:
            raise ValueError(f"No adapter registered for source type '{source.type}'")
        return adapter.fetch(source, topic_description)

    def fetch_all(
        self,
        sources: Iterable[SourceConfig],
        topic_description: str,
        run_log: RunLog,
    ) -> List[CandidateArticle]:
        """Fetch from all sources concurrently; aggregate in source order."""
        src_list = list(sources)
        results: List[CandidateArticle] = []
        if not src_list:
            run_log.add("fetch", "Total candidates: 0")
            return results

        logger.debug("Starting concurrent fetch for %d sources", len(src_list))
        with ThreadPoolExecutor(max_workers=len(src_list), thread_name_prefix="fetch") as executor:
            futures = [
                executor.submit(self._fetch_source, s, topic_description) for s in src_list
            ]
            for source, fut in zip(src_list, futures):
                try:
                    outcome = fut.result()
                except Exception as exc:  # noqa: BLE001 - one source never sinks the run
                    logger.exception("Fetch failed for %s", source.name)
                    run_log.add("fetch", f"[{source.name}] ERROR: {exc}", level=logging.WARNING)
                    continue
                results.extend(outcome.articles)
                for err in outcome.errors:
                    run_log.add("fetch", f"[{source.name}] {err}", level=logging.WARNING)
                run_log.add("fetch", f"[{source.name}] {len(outcome.articles)} articles")

        run_log.add("fetch", f"Total candidates: {len(results)}")
        return results

    @staticmethod
    def apply_cap(
        articles: List[CandidateArticle], cap: int, run_log: RunLog
    ) -> List[CandidateArticle]:
        """Prefix-truncate to ``cap`` candidates, keeping the order received."""
        if cap >= 0 and len(articles) > cap:
            run_log.add("cap", f"Capped to {cap} candidates (from {len(articles)})")
            return articles[:cap]
        return articles
