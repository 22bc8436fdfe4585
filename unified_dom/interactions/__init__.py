"""
Drag and drop, keyboard and multi-step workflow interactions.
"""

from .drag_drop import (
    DragDropInteractions,
    DragDropOptions,
    create_drag_drop_interactions,
    simulate_drag_and_drop,
)
from .keyboard import (
    KeyboardInteractions,
    KeyboardOptions,
    create_keyboard_interactions,
    focusable_elements,
    simulate_tab_navigation,
)
from .workflow import (
    WORKFLOW_PATTERNS,
    MultiStepWorkflow,
    StepResult,
    WorkflowPatterns,
    WorkflowResult,
    WorkflowStep,
    create_multi_step_workflow,
)

__all__ = [
    "DragDropInteractions",
    "DragDropOptions",
    "KeyboardInteractions",
    "KeyboardOptions",
    "MultiStepWorkflow",
    "StepResult",
    "WORKFLOW_PATTERNS",
    "WorkflowPatterns",
    "WorkflowResult",
    "WorkflowStep",
    "create_drag_drop_interactions",
    "create_keyboard_interactions",
    "create_multi_step_workflow",
    "focusable_elements",
    "simulate_drag_and_drop",
    "simulate_tab_navigation",
]
