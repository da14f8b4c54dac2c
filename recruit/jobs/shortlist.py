"""Analyze-and-shortlist batch.

Aggregate -> build prompt -> evaluate -> persist, once per eligible candidate.
A failing candidate is recorded in the summary and never stops the batch.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from ..errors import ConfigurationError, ShortlistError
from ..services.activity import log_activity
from ..services.aggregator import aggregate_candidates
from ..services.openai_wrap import invoke_json
from ..services.prompts import build_evaluation_prompt
from ..services.shortlist_writer import upsert_outcome

logger = logging.getLogger(__name__)


class CandidateState(str, Enum):
    PENDING = "pending"
    AGGREGATED = "aggregated"
    PROMPT_BUILT = "prompt_built"
    EVALUATED = "evaluated"
    PERSISTED = "persisted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class BatchSummary:
    total: int = 0
    analyzed: List[Dict[str, Any]] = field(default_factory=list)
    skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    states: Dict[int, CandidateState] = field(default_factory=dict)

    def fail(self, candidate_id, error):
        self.states[candidate_id] = CandidateState.FAILED
        self.errors.append({"candidate_id": candidate_id, "error": str(error) or "Unknown error"})

    def to_response(self) -> Dict[str, Any]:
        if not self.total:
            return {"message": "No candidates found", "analyzed": 0, "skipped": 0, "candidates": []}
        body = {
            "message": f"Analyzed {len(self.analyzed)} candidates",
            "analyzed": len(self.analyzed),
            "skipped": self.skipped,
            "candidates": self.analyzed,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


def _error_message(e):
    if isinstance(e, ShortlistError):
        return e.message
    return str(e) or e.__class__.__name__


class ShortlistBatch:
    def __init__(self, session, completion, models, fallback_model, temperature=0.3,
                 max_workers=1, activity=log_activity):
        if completion is None:
            raise ConfigurationError("OpenAI API key not configured")
        self.session = session
        self.completion = completion
        self.models = list(models)
        self.fallback_model = fallback_model
        self.temperature = temperature
        self.max_workers = max(1, int(max_workers or 1))
        self.activity = activity

    @classmethod
    def from_app(cls, app, session):
        cfg = app.config
        return cls(
            session,
            app.extensions.get("completion_client"),
            models=cfg.get("SHORTLIST_MODELS") or ["gpt-4o"],
            fallback_model=cfg.get("SHORTLIST_FALLBACK_MODEL", "gpt-4o"),
            temperature=cfg.get("SHORTLIST_TEMPERATURE", 0.3),
            max_workers=cfg.get("SHORTLIST_MAX_WORKERS", 1),
        )

    def evaluate(self, prompt) -> Dict[str, Any]:
        return invoke_json(
            self.completion,
            prompt.user,
            system=prompt.system,
            fallback_system=prompt.fallback_system,
            models=self.models,
            fallback_model=self.fallback_model,
            temperature=self.temperature,
        )

    def run(self, org_id, job_id=None, candidate_ids=None, user_id=None) -> BatchSummary:
        logger.info("Shortlist batch started org=%s job=%s candidates=%s", org_id, job_id, candidate_ids)
        aggregation = aggregate_candidates(self.session, org_id, job_id=job_id, candidate_ids=candidate_ids)
        summary = BatchSummary(total=aggregation.total, skipped=aggregation.skipped_count)
        for candidate_id, _reason in aggregation.skipped:
            summary.states[candidate_id] = CandidateState.SKIPPED
        for candidate_id, reason in aggregation.failed:
            summary.fail(candidate_id, reason)

        prepared = []
        for bundle in aggregation.eligible:
            cid = bundle.candidate.id
            summary.states[cid] = CandidateState.AGGREGATED
            try:
                prompt = build_evaluation_prompt(bundle)
            except Exception as e:
                logger.exception("Building prompt for candidate %s failed", cid)
                summary.fail(cid, _error_message(e))
                continue
            summary.states[cid] = CandidateState.PROMPT_BUILT
            prepared.append((bundle, prompt))

        if self.max_workers > 1 and len(prepared) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="shortlist") as pool:
                futures = [pool.submit(self.evaluate, prompt) for _, prompt in prepared]
                # persist on this thread, in candidate order
                for (bundle, prompt), future in zip(prepared, futures):
                    self._finish(summary, bundle, prompt, future.result, org_id, user_id)
        else:
            for bundle, prompt in prepared:
                self._finish(summary, bundle, prompt, lambda p=prompt: self.evaluate(p), org_id, user_id)

        logger.info("Shortlist batch finished org=%s analyzed=%s skipped=%s errors=%s",
                    org_id, len(summary.analyzed), summary.skipped, len(summary.errors))
        return summary

    def _finish(self, summary, bundle, prompt, get_verdict, org_id, user_id):
        cid = bundle.candidate.id
        try:
            verdict = get_verdict()
            summary.states[cid] = CandidateState.EVALUATED
            row = upsert_outcome(self.session, bundle, verdict, prompt.total_score)
        except Exception as e:
            logger.exception("Error analyzing candidate %s", cid)
            summary.fail(cid, _error_message(e))
            return
        summary.states[cid] = CandidateState.PERSISTED
        summary.analyzed.append({
            "candidate_id": cid,
            "name": row.name,
            "status": row.status,
            "total_score": prompt.total_score,
            "recommendation": verdict.get("recommendation"),
        })
        if not self.activity:
            return
        try:
            self.activity(
                self.session, org_id, "candidate_analyzed",
                f"Candidate {row.name} analyzed and {row.status}",
                user_id=user_id, entity_type="candidate", entity_id=cid, entity_name=row.name,
                category="candidate_pipeline",
                details={"candidate_id": cid, "job_id": row.job_id, "recommendation": row.recommendation},
            )
        except Exception:
            # the verdict is already saved; a broken activity hook must not undo that
            logger.exception("Activity hook failed for candidate %s", cid)
