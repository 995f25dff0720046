"""
Utility Functions
=================
Schema validation helpers shared by the loader and the executors.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .schema_validation import (
    validate_against_schema,
    validate_run_report,
    validate_task_manifest,
    is_valid_task_manifest,
)

__all__ = [
    "validate_against_schema",
    "validate_run_report",
    "validate_task_manifest",
    "is_valid_task_manifest",
]
