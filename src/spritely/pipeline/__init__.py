from spritely.pipeline.context import RunContext, RunResult
from spritely.pipeline.runner import SpriteRunner, merge
from spritely.pipeline.tasks import SequentialTasks, Task

__all__ = ["RunContext", "RunResult", "SequentialTasks", "SpriteRunner", "Task", "merge"]
