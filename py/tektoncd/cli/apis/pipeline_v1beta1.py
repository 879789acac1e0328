"""Typed view of tekton.dev/v1beta1 PipelineRuns."""
import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from tektoncd.cli.apis import meta

API_VERSION = "tekton.dev/v1beta1"
KIND = "PipelineRun"


class PipelineRef(meta.TektonModel):
  name: Optional[str] = None
  api_version: Optional[str] = None
  resolver: Optional[str] = None
  params: Optional[List[meta.Param]] = None


class PipelineResourceBinding(meta.TektonModel):
  name: Optional[str] = None
  resource_ref: Optional[Dict[str, Any]] = None
  resource_spec: Optional[Dict[str, Any]] = None


class TimeoutFields(meta.TektonModel):
  pipeline: Optional[str] = None
  tasks: Optional[str] = None
  finally_: Optional[str] = Field(default=None, alias="finally")


class PipelineTaskRunSpec(meta.TektonModel):
  pipeline_task_name: Optional[str] = None
  task_service_account_name: Optional[str] = None
  task_pod_template: Optional[Dict[str, Any]] = None
  step_overrides: Optional[List[Dict[str, Any]]] = None
  sidecar_overrides: Optional[List[Dict[str, Any]]] = None
  metadata: Optional[Dict[str, Any]] = None
  compute_resources: Optional[Dict[str, Any]] = None


class PipelineRunSpec(meta.TektonModel):
  pipeline_ref: Optional[PipelineRef] = None
  pipeline_spec: Optional[Dict[str, Any]] = None
  # Deprecated; there is no equivalent in v1.
  resources: Optional[List[PipelineResourceBinding]] = None
  params: Optional[List[meta.Param]] = None
  service_account_name: Optional[str] = None
  status: Optional[str] = None
  timeouts: Optional[TimeoutFields] = None
  pod_template: Optional[Dict[str, Any]] = None
  workspaces: Optional[List[Dict[str, Any]]] = None
  task_run_specs: Optional[List[PipelineTaskRunSpec]] = None


class StepState(meta.TektonModel):
  name: Optional[str] = None
  container: Optional[str] = None
  image_id: Optional[str] = Field(default=None, alias="imageID")
  waiting: Optional[Dict[str, Any]] = None
  running: Optional[Dict[str, Any]] = None
  terminated: Optional[Dict[str, Any]] = None


class TaskRunStatus(meta.TektonModel):
  """The part of a TaskRun's status shown alongside its PipelineRun."""
  conditions: Optional[List[meta.Condition]] = None
  pod_name: Optional[str] = None
  start_time: Optional[datetime.datetime] = None
  completion_time: Optional[datetime.datetime] = None
  steps: Optional[List[StepState]] = None
  task_results: Optional[List[Dict[str, Any]]] = None


class CustomRunStatus(meta.TektonModel):
  """The part of a CustomRun's status shown alongside its PipelineRun."""
  conditions: Optional[List[meta.Condition]] = None
  start_time: Optional[datetime.datetime] = None
  completion_time: Optional[datetime.datetime] = None
  results: Optional[List[Dict[str, Any]]] = None
  extra_fields: Optional[Dict[str, Any]] = None


class PipelineRunTaskRunStatus(meta.TektonModel):
  pipeline_task_name: Optional[str] = None
  status: Optional[TaskRunStatus] = None
  when_expressions: Optional[List[Dict[str, Any]]] = None


class PipelineRunRunStatus(meta.TektonModel):
  pipeline_task_name: Optional[str] = None
  status: Optional[CustomRunStatus] = None
  when_expressions: Optional[List[Dict[str, Any]]] = None


class ChildStatusReference(meta.TektonModel):
  api_version: Optional[str] = None
  kind: Optional[str] = None
  name: Optional[str] = None
  pipeline_task_name: Optional[str] = None
  when_expressions: Optional[List[Dict[str, Any]]] = None


class PipelineRunStatus(meta.TektonModel):
  conditions: Optional[List[meta.Condition]] = None
  observed_generation: Optional[int] = None
  start_time: Optional[datetime.datetime] = None
  completion_time: Optional[datetime.datetime] = None
  task_runs: Optional[Dict[str, PipelineRunTaskRunStatus]] = None
  runs: Optional[Dict[str, PipelineRunRunStatus]] = None
  pipeline_results: Optional[List[Dict[str, Any]]] = None
  pipeline_spec: Optional[Dict[str, Any]] = None
  skipped_tasks: Optional[List[Dict[str, Any]]] = None
  child_references: Optional[List[ChildStatusReference]] = None
  finally_start_time: Optional[datetime.datetime] = None
  provenance: Optional[Dict[str, Any]] = None


class PipelineRun(meta.TektonModel):
  api_version: str = API_VERSION
  kind: str = KIND
  metadata: meta.ObjectMeta = Field(default_factory=meta.ObjectMeta)
  spec: PipelineRunSpec = Field(default_factory=PipelineRunSpec)
  status: Optional[PipelineRunStatus] = None
