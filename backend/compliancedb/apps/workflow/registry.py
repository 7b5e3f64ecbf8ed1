from __future__ import annotations

from .guards import guard_assignment_completion

# Forward-only: no state may return to an earlier one, COMPLETED is terminal.
WORKFLOWS = {
    "training_assignment": {
        "transitions": {
            "pending": {
                "in_progress": [],
            },
            "in_progress": {
                "completed": [guard_assignment_completion],
            },
            "completed": {},
        }
    },
}
