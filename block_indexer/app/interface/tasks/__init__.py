from __future__ import annotations

from collections.abc import Awaitable, Callable

from .index_blocks_task import index_blocks_task
from .initialize_protocols_task import initialize_protocols_task

TaskFn = Callable[..., Awaitable[None]]

TASKS: dict[str, TaskFn] = {
    "initialize_protocols_task": initialize_protocols_task,
    "index_blocks_task": index_blocks_task,
}
