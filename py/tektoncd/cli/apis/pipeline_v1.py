"""Typed view of tekton.dev/v1 PipelineRuns."""
import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from tektoncd.cli.apis import meta
from tektoncd.cli.apis import pipeline_v1beta1

API_VERSION = "tekton.dev/v1"
KIND = "PipelineRun"

# These are unchanged between v1beta1 and v1.
PipelineRef = pipeline_v1beta1.PipelineRef
TimeoutFields = pipeline_v1beta1.TimeoutFields
ChildStatusReference = pipeline_v1beta1.ChildStatusReference
PipelineRunTaskRunStatus = pipeline_v1beta1.PipelineRunTaskRunStatus
PipelineRunRunStatus = pipeline_v1beta1.PipelineRunRunStatus


class PipelineTaskRunTemplate(meta.TektonModel):
  pod_template: Optional[Dict[str, Any]] = None
  service_account_name: Optional[str] = None


class PipelineTaskRunSpec(meta.TektonModel):
  pipeline_task_name: Optional[str] = None
  service_account_name: Optional[str] = None
  pod_template: Optional[Dict[str, Any]] = None
  step_specs: Optional[List[Dict[str, Any]]] = None
  sidecar_specs: Optional[List[Dict[str, Any]]] = None
  metadata: Optional[Dict[str, Any]] = None
  compute_resources: Optional[Dict[str, Any]] = None


class PipelineRunSpec(meta.TektonModel):
  pipeline_ref: Optional[PipelineRef] = None
  pipeline_spec: Optional[Dict[str, Any]] = None
  params: Optional[List[meta.Param]] = None
  status: Optional[str] = None
  timeouts: Optional[TimeoutFields] = None
  task_run_template: Optional[PipelineTaskRunTemplate] = None
  workspaces: Optional[List[Dict[str, Any]]] = None
  task_run_specs: Optional[List[PipelineTaskRunSpec]] = None


class PipelineRunStatus(meta.TektonModel):
  conditions: Optional[List[meta.Condition]] = None
  observed_generation: Optional[int] = None
  start_time: Optional[datetime.datetime] = None
  completion_time: Optional[datetime.datetime] = None
  results: Optional[List[Dict[str, Any]]] = None
  pipeline_spec: Optional[Dict[str, Any]] = None
  skipped_tasks: Optional[List[Dict[str, Any]]] = None
  child_references: Optional[List[ChildStatusReference]] = None
  finally_start_time: Optional[datetime.datetime] = None
  provenance: Optional[Dict[str, Any]] = None
  # Deprecated in v1; only populated client side for display.
  task_runs: Optional[Dict[str, PipelineRunTaskRunStatus]] = None
  runs: Optional[Dict[str, PipelineRunRunStatus]] = None


class PipelineRun(meta.TektonModel):
  api_version: str = API_VERSION
  kind: str = KIND
  metadata: meta.ObjectMeta = Field(default_factory=meta.ObjectMeta)
  spec: PipelineRunSpec = Field(default_factory=PipelineRunSpec)
  status: Optional[PipelineRunStatus] = None
