"""Pipeline orchestration and stage execution."""

from painflow.pipeline.config import (
    BackendConfig,
    ConfigError,
    DeploymentConfig,
    LiveConfig,
    ProviderConfig,
    WorkflowConfig,
    load_config,
    resolve_config,
)
from painflow.pipeline.context import WorkflowContext
from painflow.pipeline.engine import (
    Collaborator,
    Completed,
    Failed,
    HaltedEmpty,
    RunOutcome,
    Superseded,
    WorkflowEngine,
)
from painflow.pipeline.progress import WorkflowProgress, build_stage_summary, describe_progress
from painflow.pipeline.stages import (
    DEFAULT_STAGES,
    STAGE_IDS,
    Stage,
    StageDefinition,
    StageStatus,
    has_items,
)

__all__ = [
    "DEFAULT_STAGES",
    "STAGE_IDS",
    "BackendConfig",
    "Collaborator",
    "Completed",
    "ConfigError",
    "DeploymentConfig",
    "Failed",
    "HaltedEmpty",
    "LiveConfig",
    "ProviderConfig",
    "RunOutcome",
    "Stage",
    "StageDefinition",
    "StageStatus",
    "Superseded",
    "WorkflowConfig",
    "WorkflowContext",
    "WorkflowEngine",
    "WorkflowProgress",
    "build_stage_summary",
    "describe_progress",
    "has_items",
    "load_config",
    "resolve_config",
]
