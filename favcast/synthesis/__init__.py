"""Grouping, narration and script assembly."""

from .grouper import ContentGrouper
from .text_cleanup import clean_narration, NARRATION_CLEANUP_RULES
from .section_narrator import SectionNarrator, PLACEHOLDER_TEXT
from .script_assembler import ScriptAssembler, ScriptBuilder, TrendSummarizer

__all__ = [
    "ContentGrouper",
    "clean_narration",
    "NARRATION_CLEANUP_RULES",
    "SectionNarrator",
    "PLACEHOLDER_TEXT",
    "ScriptAssembler",
    "ScriptBuilder",
    "TrendSummarizer",
]
