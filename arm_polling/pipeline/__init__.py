"""Request pipeline abstraction.

- Pipeline: Abstract base class every transport implements
- HttpPipeline: httpx-backed implementation
- unmarshal_arm_error: Default error unmarshaller for ARM error envelopes
"""

from arm_polling.pipeline.base import Pipeline, unmarshal_arm_error
from arm_polling.pipeline.http import HttpPipeline

__all__ = [
    "HttpPipeline",
    "Pipeline",
    "unmarshal_arm_error",
]
