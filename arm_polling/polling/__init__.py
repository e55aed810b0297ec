"""Long-running-operation polling.

- LROPoller: State machine that drives one asynchronous operation
- OperationLocationStrategy / LocationStrategy / NoOpStrategy: header conventions
- is_lro_status_valid: Response classifier shared by all stages
"""

from arm_polling.polling.poller import LROPoller, is_lro_status_valid
from arm_polling.polling.strategies import (
    LocationStrategy,
    NoOpStrategy,
    OperationLocationStrategy,
    OperationStrategy,
    is_terminal_status,
    select_strategy,
)

__all__ = [
    "LROPoller",
    "LocationStrategy",
    "NoOpStrategy",
    "OperationLocationStrategy",
    "OperationStrategy",
    "is_lro_status_valid",
    "is_terminal_status",
    "select_strategy",
]
