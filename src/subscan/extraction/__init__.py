"""
Candidate Extraction Package

Hybrid model-assisted + heuristic extraction of subscription facts from
billing messages.

Key Components:
- extractor: keyword gate and the stage chain
- model_stage: structured JSON extraction via a text-generation service
- heuristic: regex amount / subject-derived merchant fallback
- text_generation: OpenAI-backed TextGenerator
- models: SubscriptionCandidate and the tagged ExtractionResult type

A message that fails the keyword gate never reaches the model, which keeps
per-scan inference cost proportional to plausible bills only.
"""

from .extractor import CandidateExtractor, build_extractor, build_extractor_from_config
from .heuristic import HeuristicExtractionStage, find_amount, merchant_from_subject
from .model_stage import ModelExtractionStage
from .models import (
    BillingFrequency,
    Extracted,
    ExtractionConfidence,
    ExtractionResult,
    ExtractionStage,
    NotSubscription,
    SubscriptionCandidate,
    Unextractable,
)
from .text_generation import OpenAITextGenerator, TextGenerator

__all__ = [
    "BillingFrequency",
    "CandidateExtractor",
    "Extracted",
    "ExtractionConfidence",
    "ExtractionResult",
    "ExtractionStage",
    "HeuristicExtractionStage",
    "ModelExtractionStage",
    "NotSubscription",
    "OpenAITextGenerator",
    "SubscriptionCandidate",
    "TextGenerator",
    "Unextractable",
    "build_extractor",
    "build_extractor_from_config",
    "find_amount",
    "merchant_from_subject",
]
