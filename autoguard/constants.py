"""Shared constants for autoguard."""

ORCHESTRATOR_ACTOR = "orchestrator"
SYSTEM_ACTOR = "system"

DEFAULT_WORKFLOW_TYPE = "COMPLETE_MAINTENANCE_FLOW"
DEFAULT_ACTIVITY_LOG_CAPACITY = 1000
DEFAULT_ANOMALY_LOG_CAPACITY = 500

# Pipeline stages, in execution order
STAGE_ANALYSIS = "DATA_ANALYSIS"
STAGE_DIAGNOSIS = "DIAGNOSIS"
STAGE_ENGAGEMENT = "CUSTOMER_ENGAGEMENT"
STAGE_SCHEDULING = "SCHEDULING"
STAGE_FEEDBACK = "FEEDBACK"
STAGE_INSIGHTS = "MANUFACTURING_INSIGHTS"

PIPELINE_STAGES = (
    STAGE_ANALYSIS,
    STAGE_DIAGNOSIS,
    STAGE_ENGAGEMENT,
    STAGE_SCHEDULING,
    STAGE_FEEDBACK,
    STAGE_INSIGHTS,
)

# Worker registry names
WORKER_ANALYSIS = "analysis"
WORKER_DIAGNOSIS = "diagnosis"
WORKER_ENGAGEMENT = "engagement"
WORKER_SCHEDULING = "scheduling"
WORKER_FEEDBACK = "feedback"
WORKER_INSIGHTS = "insights"

STAGE_WORKERS = {
    STAGE_ANALYSIS: WORKER_ANALYSIS,
    STAGE_DIAGNOSIS: WORKER_DIAGNOSIS,
    STAGE_ENGAGEMENT: WORKER_ENGAGEMENT,
    STAGE_SCHEDULING: WORKER_SCHEDULING,
    STAGE_FEEDBACK: WORKER_FEEDBACK,
    STAGE_INSIGHTS: WORKER_INSIGHTS,
}

# Activity labels emitted by the orchestrator
ACTION_WORKER_REGISTERED = "Worker registered"
ACTION_WORKFLOW_STARTED = "Workflow started"
ACTION_STEP_COMPLETED = "Workflow step completed"
ACTION_STEP_SKIPPED = "Workflow step skipped"
ACTION_WORKFLOW_COMPLETED = "Workflow completed"
ACTION_WORKFLOW_FAILED = "Workflow failed"
ACTION_DELEGATING = "Delegating to worker"
