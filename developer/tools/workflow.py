"""Multi-step workflow tracking with revisions and branches."""

import logging
import threading
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from developer.results import Content, ToolResult

logger = logging.getLogger(__name__)


class WorkflowStep(BaseModel):
    """One recorded step of a reasoning workflow."""

    model_config = ConfigDict(frozen=True)

    step_description: str = Field(description="Detailed description of what this step accomplishes")
    step_number: int = Field(
        description="Current position in the workflow sequence (e.g., 1 for first step)"
    )
    total_steps: int = Field(description="Estimated total number of steps in the complete workflow")
    next_step_needed: bool = Field(
        description="Set to true if another step will follow this one, false if this is the final step"
    )
    is_step_revision: Optional[bool] = Field(
        None, description="Set to true if this step revises a previous step"
    )
    revises_step: Optional[int] = Field(
        None, description="If revising a previous step, specify which step number is being revised"
    )
    branch_from_step: Optional[int] = Field(
        None, description="If creating a branch, specify which step number this branch starts from"
    )
    branch_id: Optional[str] = Field(
        None, description="A unique identifier for this branch (required when creating a branch)"
    )
    needs_more_steps: Optional[bool] = Field(
        None, description="Indicates whether additional steps are required to complete the workflow"
    )


class WorkflowStatus(BaseModel):
    """Snapshot returned after each accepted step."""

    step_number: int
    total_steps: int
    next_step_needed: bool
    last_step_description: str
    current_branch: Optional[str] = None
    branches: list[str] = Field(default_factory=list)
    step_history_length: int


class WorkflowState:
    """Main trace, per-branch traces and the active branch."""

    def __init__(self):
        self.step_history: list[WorkflowStep] = []
        self.branches: dict[str, list[WorkflowStep]] = {}
        self.current_branch: Optional[str] = None


class Workflow:
    """Records workflow steps and validates their bookkeeping.

    Validation problems are returned as error results rather than raised, so
    the calling agent can read them and correct the next step.
    """

    def __init__(
        self,
        allow_branches: bool = True,
        max_steps: Optional[int] = None,
        log_steps: bool = True,
    ):
        """Initialize the workflow tool.

        Args:
            allow_branches: Whether steps may open branches
            max_steps: Optional highest accepted step number
            log_steps: Log every step at info level
        """
        self.allow_branches = allow_branches
        self.max_steps = max_steps
        self.log_steps = log_steps

        self.state = WorkflowState()
        self._lock = threading.Lock()

    def execute_step(self, step: WorkflowStep) -> ToolResult:
        """Validate and record a step.

        Args:
            step: The submitted step

        Returns:
            ToolResult with the JSON status, or an error result
        """
        if self.log_steps:
            logger.debug("Workflow step arguments received: %r", step)

        with self._lock:
            if self.max_steps is not None and step.step_number > self.max_steps:
                return self._reject(
                    f"Step number {step.step_number} exceeds configured maximum of {self.max_steps}"
                )

            if step.step_number > step.total_steps:
                if self.log_steps:
                    logger.info(
                        "Adjusting total_steps from %d to match step_number %d",
                        step.total_steps,
                        step.step_number,
                    )
                step = step.model_copy(update={"total_steps": step.step_number})

            if step.revises_step is not None and step.is_step_revision is None:
                return self._reject(
                    "When specifying revises_step, is_step_revision must be set to true"
                )

            if step.branch_id is not None and step.branch_from_step is None:
                return self._reject(
                    "When creating a branch (branch_id), you must specify branch_from_step"
                )

            state = self.state

            if step.branch_id is not None and step.branch_from_step is not None:
                if not self.allow_branches:
                    return self._reject("Branching is disabled in current configuration")

                if step.branch_from_step <= 0 or step.branch_from_step > len(state.step_history):
                    return self._reject(
                        f"branch_from_step {step.branch_from_step} does not exist in step history"
                    )

                if self.log_steps:
                    logger.info(
                        "Processing branch step %d on branch %r from step %d",
                        step.step_number,
                        step.branch_id,
                        step.branch_from_step,
                    )

                state.current_branch = step.branch_id
                state.branches.setdefault(step.branch_id, []).append(step)
            elif state.current_branch is not None:
                if self.log_steps:
                    logger.info(
                        "Moving from branch %r back to main history at step %d",
                        state.current_branch,
                        step.step_number,
                    )
                state.current_branch = None

            state.step_history.append(step)

            if self.log_steps:
                logger.info(
                    "Workflow step %d/%d processed (revision=%s, branch=%s, next=%s): %s",
                    step.step_number,
                    step.total_steps,
                    step.is_step_revision,
                    step.branch_id,
                    step.next_step_needed,
                    step.step_description,
                )

            status = self._build_status(step)

        return ToolResult.success(Content(status.model_dump_json(indent=2)))

    def get_status(self) -> Optional[WorkflowStatus]:
        """Status for the last recorded step, or None before the first one."""
        with self._lock:
            if not self.state.step_history:
                return None
            return self._build_status(self.state.step_history[-1])

    def _build_status(self, step: WorkflowStep) -> WorkflowStatus:
        return WorkflowStatus(
            step_number=step.step_number,
            total_steps=step.total_steps,
            next_step_needed=step.next_step_needed,
            last_step_description=step.step_description,
            current_branch=self.state.current_branch,
            branches=list(self.state.branches),
            step_history_length=len(self.state.step_history),
        )

    def _reject(self, message: str) -> ToolResult:
        if self.log_steps:
            logger.warning("Workflow step validation error: %s", message)
        return ToolResult.error(message)
