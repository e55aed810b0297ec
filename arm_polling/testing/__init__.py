"""Test-recording harness.

- RecordingSanitizer: vcrpy hooks that scrub secrets before recording
- recording_vcr: Builds the vcr.VCR that records and replays cassettes
"""

from arm_polling.testing.recording import (
    SANITIZED_VALUE,
    RecordingSanitizer,
    recording_vcr,
)

__all__ = [
    "SANITIZED_VALUE",
    "RecordingSanitizer",
    "recording_vcr",
]
