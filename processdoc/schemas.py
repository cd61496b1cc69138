"""Process summary data model.

The summary is produced by the interview subsystem (LLM extraction) and
arrives as camelCase JSON. ``ProcessSummary.from_dict`` validates it with
pydantic and reports the first problem by path (``steps[0].type``);
everything downstream works on the frozen models.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

StepType = Literal['task', 'decision', 'subprocess']

STEP_TYPES = get_args(StepType)


class SummaryValidationError(ValueError):
    """Raised when a summary payload does not match the expected shape."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f'{path}: {message}')
        self.path = path


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Condition(_WireModel):
    condition: str
    next_step: str = Field(alias='nextStep')


class Trigger(_WireModel):
    description: str
    type: Optional[str] = None


class Role(_WireModel):
    name: str
    description: Optional[str] = None


class SystemRef(_WireModel):
    name: str
    description: Optional[str] = None


class Metric(_WireModel):
    name: str
    value: Optional[str] = None


class ProcessStep(_WireModel):
    id: str
    name: str
    description: str
    type: StepType
    actor: Optional[str] = None
    system: Optional[str] = None
    # Declared branching targets; layout follows list order instead.
    next_steps: tuple[str, ...] = Field(default=(), alias='nextSteps')
    conditions: tuple[Condition, ...] = ()

    @field_validator('next_steps', 'conditions', mode='before')
    @classmethod
    def _absent_is_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def is_decision(self) -> bool:
        return self.type == 'decision'


class ProcessSummary(_WireModel):
    process_name: str = Field(alias='processName')
    steps: tuple[ProcessStep, ...]      # canonical control-flow order
    description: Optional[str] = None
    trigger: Optional[Trigger] = None
    roles: tuple[Role, ...] = ()
    systems: tuple[SystemRef, ...] = ()
    metrics: tuple[Metric, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> ProcessSummary:
        """Validate a summary payload (camelCase or snake_case keys)."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            first = exc.errors()[0]
            raise SummaryValidationError(_error_path(first['loc']), first['msg']) from None

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the camelCase wire form, dropping absent fields."""
        return self.model_dump(mode='json', by_alias=True, exclude_defaults=True)


def _error_path(loc: tuple[int | str, ...]) -> str:
    path = ''
    for part in loc:
        if isinstance(part, int):
            path += f'[{part}]'
        else:
            path += f'.{part}' if path else part
    return path or '$'
