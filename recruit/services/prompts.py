"""Render an aggregated candidate into the holistic evaluation prompt."""

import json
import math
from dataclasses import dataclass
from typing import Iterable

SYSTEM_PROMPT = (
    "You are an expert HR analyst specializing in comprehensive candidate evaluation. "
    "Provide detailed, objective analysis in JSON format only. "
    "Return ONLY valid JSON, no markdown or additional text."
)

FALLBACK_SYSTEM_PROMPT = SYSTEM_PROMPT + " Start your response with { and end with }."


@dataclass(frozen=True)
class EvaluationPrompt:
    system: str
    fallback_system: str
    user: str
    total_score: int


def overall_score(scores: Iterable[float]) -> int:
    """Mean of the scored stages, rounded half up. A 0 means "not scored" and is left out."""
    scored = [s for s in scores if s and s > 0]
    if not scored:
        return 0
    return int(math.floor(sum(scored) / len(scored) + 0.5))


def _fmt(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _join(items):
    return ", ".join(str(i) for i in (items or [])) or "Not specified"


def build_evaluation_prompt(bundle) -> EvaluationPrompt:
    c = bundle.candidate
    job = bundle.job
    mcq = bundle.mcq
    tech = bundle.technical
    interview = bundle.interview
    total = overall_score(bundle.scores())

    total_q = mcq.total_questions or 0
    lines = [
        "You are an expert HR analyst. Analyze this candidate comprehensively and provide a detailed assessment.",
        "",
        "CANDIDATE INFORMATION:",
        f"Name: {c.display_name}",
        f"Email: {c.email}",
        f"Skills: {_join(c.skills)}",
        f"Experience: {c.experience_years or 0} years",
        f"Summary: {c.summary or 'Not provided'}",
        f"Education: {c.education or 'Not provided'}",
        "",
        "JOB REQUIREMENTS:",
        f"Title: {job.title if job else 'Unknown'}",
        f"Description: {(job.description if job else None) or 'Not provided'}",
        f"Required Skills: {_join(job.required_skills if job else None)}",
        f"Preferred Skills: {_join(job.preferred_skills if job else None)}",
        f"Experience Required: {(job.experience_required if job else None) or 0} years",
        "",
        "ASSESSMENT SCORES:",
        f"1. ATS Score (Resume Analysis): {_fmt(bundle.ats_score)}/100",
        f"   Breakdown: {json.dumps(c.ats_breakdown or {}, sort_keys=True)}",
        "",
        f"2. MCQ Test Score: {_fmt(bundle.mcq_score)}/100",
        f"   Details: {mcq.correct_answers or 0}/{total_q} correct",
        f"   Attempted: {mcq.attempted_questions or 0}/{total_q}",
        f"   Passed: {'Yes' if mcq.passed else 'No'}",
        "",
        f"3. Technical Test Score: {_fmt(bundle.technical_score)}/100",
        f"   Code Quality: {_fmt(tech.code_quality_score or 0)}/100",
        f"   Correctness: {_fmt(tech.correctness_score or 0)}/100",
        f"   Approach: {_fmt(tech.approach_score or 0)}/100",
        f"   Communication: {_fmt(tech.communication_score or 0)}/100",
        f"   Feedback: {tech.feedback or 'Not provided'}",
        f"   Code Review: {tech.code_review or 'Not provided'}",
        "",
        f"4. Interview Score: {_fmt(bundle.interview_score)}/100",
        f"   Transcript: {'Available' if interview.transcript else 'Not available'}",
        f"   Analysis: {interview.analysis or 'Not provided'}",
        "",
        f"OVERALL SCORE: {total}/100",
        "",
        "TASK:",
        "Provide a comprehensive analysis in JSON format with the following structure:",
        "{",
        '  "recommendation": "shortlist" or "reject",',
        '  "confidence": 0-100,',
        f'  "total_score": {total},',
        '  "strengths": ["strength1", "strength2", ...],',
        '  "weaknesses": ["weakness1", "weakness2", ...],',
        '  "detailed_analysis": "Comprehensive 2-3 paragraph analysis covering all aspects",',
        '  "ats_evaluation": "Analysis of resume/CV match",',
        '  "mcq_evaluation": "Analysis of MCQ test performance",',
        '  "technical_evaluation": "Analysis of technical test performance",',
        '  "interview_evaluation": "Analysis of interview performance",',
        '  "overall_assessment": "Final comprehensive assessment",',
        '  "recommendation_reason": "Detailed reason for shortlist/reject decision",',
        '  "improvement_areas": ["area1", "area2", ...],',
        '  "hire_readiness": "ready" | "conditional" | "not_ready",',
        '  "priority": "high" | "medium" | "low"',
        "}",
        "",
        "Be thorough, objective, and provide actionable insights.",
    ]
    return EvaluationPrompt(
        system=SYSTEM_PROMPT,
        fallback_system=FALLBACK_SYSTEM_PROMPT,
        user="\n".join(lines),
        total_score=total,
    )
