"""FastAPI server for running and inspecting condition tasks."""

from pathlib import Path
from typing import Optional
from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel
import uvicorn

from ..config import load_config_from_yaml, setup_logging
from ..engine import DependencyEvaluator, LogicTaskExecutor, TaskLifecycleListener
from ..errors import (
    TaskInstanceNotFoundError,
    TaskParameterError,
    UnknownTaskTypeError,
    LogicTaskExecuteError,
)
from ..models import (
    TaskInstance,
    TaskExecutionStatus,
    DependResult,
    ConditionDependency,
    ConditionsParameters,
)
from ..plugins import ConditionLogicTask, default_registry
from ..storage import Database, TaskInstanceStore

logger = logging.getLogger(__name__)

# Global engine components
database: Optional[Database] = None
task_instance_store: Optional[TaskInstanceStore] = None
executor: Optional[LogicTaskExecutor] = None


# -------------------------------------------------------------------------
# Request/Response Models
# -------------------------------------------------------------------------

class EvaluateConditionRequest(BaseModel):
    """Request to evaluate an expression against given task states."""
    dependence: ConditionDependency
    task_states: dict[int, TaskExecutionStatus] = {}


class EvaluateConditionResponse(BaseModel):
    """Result of a pure evaluation."""
    result: str
    condition_success: bool


class RunTaskResponse(BaseModel):
    """Task instance after a logic task run."""
    task_instance: dict
    condition_success: Optional[bool] = None
    next_branch: list[int] = []


class SignalResponse(BaseModel):
    """Outcome of a pause or kill request."""
    task_instance_id: int
    accepted: bool


# -------------------------------------------------------------------------
# App Lifecycle
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global database, task_instance_store, executor

    config = load_config_from_yaml(Path(os.environ.get("CONDFLOW_CONFIG", "config/condflow.yaml")))

    logger.info("Starting condflow API server...")

    database = Database(config.db_path)
    await database.connect()
    task_instance_store = TaskInstanceStore(database)
    executor = LogicTaskExecutor(task_instance_store, default_registry(), TaskLifecycleListener())

    logger.info("condflow API server started")

    yield

    logger.info("Shutting down condflow API server...")
    await database.close()
    logger.info("condflow API server stopped")


# -------------------------------------------------------------------------
# App Factory
# -------------------------------------------------------------------------

def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title="condflow API",
        description="API for evaluating workflow condition tasks",
        version="1.0.0",
        lifespan=lifespan,
    )

    evaluator = DependencyEvaluator()

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # -------------------------------------------------------------------------
    # Condition Endpoints
    # -------------------------------------------------------------------------

    @app.post("/api/conditions/evaluate", response_model=EvaluateConditionResponse)
    async def evaluate_condition(request: EvaluateConditionRequest):
        """Evaluate an expression against task states without touching the store."""
        snapshot = {
            task_code: TaskInstance(
                id=0,
                task_code=task_code,
                workflow_instance_id=0,
                state=state,
            )
            for task_code, state in request.task_states.items()
        }
        result = evaluator.evaluate(request.dependence, snapshot)
        return {"result": result.value, "condition_success": result == DependResult.SUCCESS}

    # -------------------------------------------------------------------------
    # Task Instance Endpoints
    # -------------------------------------------------------------------------

    @app.post("/api/task-instances", response_model=TaskInstance, status_code=201)
    async def create_task_instance(task_instance: TaskInstance):
        """Store a task instance (insert or update)."""
        await task_instance_store.save(task_instance)
        return task_instance

    @app.get("/api/task-instances/{task_instance_id}", response_model=TaskInstance)
    async def get_task_instance(task_instance_id: int):
        """Get a task instance by ID."""
        task_instance = await task_instance_store.get(task_instance_id)
        if not task_instance:
            raise HTTPException(status_code=404, detail="Task instance not found")
        return task_instance

    @app.get(
        "/api/workflow-instances/{workflow_instance_id}/task-instances",
        response_model=list[TaskInstance],
    )
    async def list_valid_task_instances(
        workflow_instance_id: int,
        test_flag: int = Query(0, ge=0, le=1),
    ):
        """List the valid task instances of a workflow run."""
        return await task_instance_store.query_valid_task_instances(workflow_instance_id, test_flag)

    @app.post("/api/task-instances/{task_instance_id}/run", response_model=RunTaskResponse)
    async def run_task_instance(task_instance_id: int):
        """Run the logic task of a task instance to completion."""
        try:
            task_instance = await executor.execute(task_instance_id)
        except TaskInstanceNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except (TaskParameterError, UnknownTaskTypeError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except LogicTaskExecuteError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return _task_instance_to_run_response(task_instance)

    @app.post("/api/task-instances/{task_instance_id}/pause", response_model=SignalResponse)
    async def pause_task_instance(task_instance_id: int):
        """Forward a pause request to a running logic task."""
        accepted = await executor.pause(task_instance_id)
        return {"task_instance_id": task_instance_id, "accepted": accepted}

    @app.post("/api/task-instances/{task_instance_id}/kill", response_model=SignalResponse)
    async def kill_task_instance(task_instance_id: int):
        """Forward a kill request to a running logic task."""
        accepted = await executor.kill(task_instance_id)
        return {"task_instance_id": task_instance_id, "accepted": accepted}

    return app


def _task_instance_to_run_response(task_instance: TaskInstance) -> dict:
    """Convert a finished TaskInstance to a run response dict."""
    response = {"task_instance": task_instance.model_dump(mode="json")}
    if task_instance.task_type == ConditionLogicTask.task_type:
        condition_result = ConditionsParameters.model_validate_json(
            task_instance.task_params
        ).condition_result
        response["condition_success"] = condition_result.condition_success
        response["next_branch"] = condition_result.next_branch()
    return response


# -------------------------------------------------------------------------
# Main Entry Point
# -------------------------------------------------------------------------

def main():
    """Run the API server."""
    import argparse

    parser = argparse.ArgumentParser(description="condflow API Server")
    parser.add_argument("--config", default=None, help="Path to the YAML engine config")
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--log-level", default=None, help="Log level")
    args = parser.parse_args()

    if args.config:
        os.environ["CONDFLOW_CONFIG"] = args.config
    config = load_config_from_yaml(Path(os.environ.get("CONDFLOW_CONFIG", "config/condflow.yaml")))

    setup_logging(args.log_level or config.log_level)

    uvicorn.run(
        "condflow.api.server:create_app",
        factory=True,
        host=args.host or config.host,
        port=args.port or config.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
