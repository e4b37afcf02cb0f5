"""Sample tree seeded by ``tasktree init --sample``.

``parent_id`` values are 1-based positions in ``SAMPLE_TASKS``; repositories
rewire them to the ids they assign.
"""

from tasktree.models import TaskCreate, TaskStatus

SAMPLE_TASKS: list[TaskCreate] = [
    TaskCreate(
        title="Education",
        description="Learning and educational goals",
        status=TaskStatus.IN_PROGRESS,
        labels=["learning", "personal"],
    ),
    TaskCreate(
        title="Languages",
        description="Pick up a second language",
        parent_id=1,
        labels=["study"],
    ),
    TaskCreate(
        title="Finish grammar workbook",
        description="Chapters 4 to 9",
        parent_id=2,
        labels=["study", "reading"],
        priority=2,
    ),
    TaskCreate(
        title="Finance",
        description="Financial planning and management",
        labels=["money", "planning"],
    ),
    TaskCreate(
        title="Taxes",
        description="Yearly tax return",
        parent_id=4,
        labels=["government"],
        priority=3,
    ),
    TaskCreate(
        title="Collect receipts",
        description="Gather deductible receipts for the return",
        status=TaskStatus.DONE,
        parent_id=5,
        labels=["paperwork"],
    ),
]
