"""Convert between unstructured objects and typed PipelineRuns.

Unstructured objects are the dictionaries exchanged with the APIServer.
Typed objects are the pydantic models in tektoncd.cli.apis. In addition
this module converts PipelineRuns between tekton.dev/v1beta1 and
tekton.dev/v1 so callers can keep working with v1beta1 whichever version
the cluster serves.
"""
import json

import pydantic

from tektoncd.cli import errors
from tektoncd.cli.apis import pipeline_v1
from tektoncd.cli.apis import pipeline_v1beta1

# v1 has no PipelineResources; v1beta1 spec.resources is kept here as JSON
# so converting back to v1beta1 restores it.
RESOURCES_ANNOTATION = "tekton.dev/v1beta1Resources"


def to_unstructured(obj):
  """Return the wire representation of a typed object.

  Fields that are unset are left out, as the APIServer does.
  """
  return obj.model_dump(mode="json", by_alias=True, exclude_none=True)


def from_unstructured(obj, shape):
  """Parse an unstructured object into a typed object.

  Args:
    obj: Dictionary as returned by the APIServer.
    shape: The model class to parse into; e.g. pipeline_v1.PipelineRun

  Returns:
    typed: An instance of shape.

  Raises:
    ShapeMismatchError: If obj has a different apiVersion or kind than
      shape or doesn't validate against it.
  """
  if not isinstance(obj, dict):
    raise errors.ShapeMismatchError(
      "Expected an object for {0} but got {1}".format(shape.__name__,
                                                      type(obj).__name__))

  for field, key in [("api_version", "apiVersion"), ("kind", "kind")]:
    expected = shape.model_fields[field].default
    actual = obj.get(key)
    if actual and actual != expected:
      raise errors.ShapeMismatchError(
        "Expected {0}={1} but got {2}".format(key, expected, actual))

  try:
    return shape.model_validate(obj)
  except pydantic.ValidationError as e:
    raise errors.ShapeMismatchError(
      "Object doesn't match {0}.{1}: {2}".format(shape.__module__,
                                                 shape.__name__, e))


def list_from_unstructured(obj, shape):
  """Parse the items of an unstructured list object."""
  if not isinstance(obj, dict):
    raise errors.ShapeMismatchError("Expected a list object")
  return [from_unstructured(item, shape) for item in obj.get("items") or []]


def convert_to(source):
  """Convert a v1beta1 PipelineRun to v1.

  Args:
    source: pipeline_v1beta1.PipelineRun; not modified.

  Returns:
    sink: pipeline_v1.PipelineRun
  """
  source = source.model_copy(deep=True)
  spec = source.spec

  metadata = source.metadata
  if spec.resources:
    annotations = dict(metadata.annotations or {})
    annotations[RESOURCES_ANNOTATION] = json.dumps(
      [to_unstructured(r) for r in spec.resources], sort_keys=True)
    metadata.annotations = annotations

  task_run_template = None
  if spec.service_account_name is not None or spec.pod_template is not None:
    task_run_template = pipeline_v1.PipelineTaskRunTemplate(
      service_account_name=spec.service_account_name,
      pod_template=spec.pod_template)

  task_run_specs = None
  if spec.task_run_specs is not None:
    task_run_specs = [
      pipeline_v1.PipelineTaskRunSpec(
        pipeline_task_name=s.pipeline_task_name,
        service_account_name=s.task_service_account_name,
        pod_template=s.task_pod_template,
        step_specs=s.step_overrides,
        sidecar_specs=s.sidecar_overrides,
        metadata=s.metadata,
        compute_resources=s.compute_resources)
      for s in spec.task_run_specs]

  sink_spec = pipeline_v1.PipelineRunSpec(
    pipeline_ref=spec.pipeline_ref,
    pipeline_spec=spec.pipeline_spec,
    params=spec.params,
    status=spec.status,
    timeouts=spec.timeouts,
    task_run_template=task_run_template,
    workspaces=spec.workspaces,
    task_run_specs=task_run_specs)

  sink_status = None
  status = source.status
  if status is not None:
    sink_status = pipeline_v1.PipelineRunStatus(
      conditions=status.conditions,
      observed_generation=status.observed_generation,
      start_time=status.start_time,
      completion_time=status.completion_time,
      results=status.pipeline_results,
      pipeline_spec=status.pipeline_spec,
      skipped_tasks=status.skipped_tasks,
      child_references=status.child_references,
      finally_start_time=status.finally_start_time,
      provenance=status.provenance,
      task_runs=status.task_runs,
      runs=status.runs)

  return pipeline_v1.PipelineRun(metadata=metadata, spec=sink_spec,
                                 status=sink_status)


def convert_from(source):
  """Convert a v1 PipelineRun to v1beta1.

  Args:
    source: pipeline_v1.PipelineRun; not modified.

  Returns:
    sink: pipeline_v1beta1.PipelineRun

  Raises:
    ShapeMismatchError: If the stashed v1beta1 resources can't be parsed.
  """
  source = source.model_copy(deep=True)
  spec = source.spec

  metadata = source.metadata
  resources = None
  if metadata.annotations and RESOURCES_ANNOTATION in metadata.annotations:
    annotations = dict(metadata.annotations)
    stashed = annotations.pop(RESOURCES_ANNOTATION)
    metadata.annotations = annotations
    try:
      resources = [pipeline_v1beta1.PipelineResourceBinding.model_validate(r)
                   for r in json.loads(stashed)]
    except (ValueError, TypeError, pydantic.ValidationError) as e:
      raise errors.ShapeMismatchError(
        "Annotation {0} doesn't hold PipelineResources: {1}".format(
          RESOURCES_ANNOTATION, e))

  service_account_name = None
  pod_template = None
  if spec.task_run_template is not None:
    service_account_name = spec.task_run_template.service_account_name
    pod_template = spec.task_run_template.pod_template

  task_run_specs = None
  if spec.task_run_specs is not None:
    task_run_specs = [
      pipeline_v1beta1.PipelineTaskRunSpec(
        pipeline_task_name=s.pipeline_task_name,
        task_service_account_name=s.service_account_name,
        task_pod_template=s.pod_template,
        step_overrides=s.step_specs,
        sidecar_overrides=s.sidecar_specs,
        metadata=s.metadata,
        compute_resources=s.compute_resources)
      for s in spec.task_run_specs]

  sink_spec = pipeline_v1beta1.PipelineRunSpec(
    pipeline_ref=spec.pipeline_ref,
    pipeline_spec=spec.pipeline_spec,
    resources=resources,
    params=spec.params,
    service_account_name=service_account_name,
    status=spec.status,
    timeouts=spec.timeouts,
    pod_template=pod_template,
    workspaces=spec.workspaces,
    task_run_specs=task_run_specs)

  sink_status = None
  status = source.status
  if status is not None:
    sink_status = pipeline_v1beta1.PipelineRunStatus(
      conditions=status.conditions,
      observed_generation=status.observed_generation,
      start_time=status.start_time,
      completion_time=status.completion_time,
      task_runs=status.task_runs,
      runs=status.runs,
      pipeline_results=status.results,
      pipeline_spec=status.pipeline_spec,
      skipped_tasks=status.skipped_tasks,
      child_references=status.child_references,
      finally_start_time=status.finally_start_time,
      provenance=status.provenance)

  return pipeline_v1beta1.PipelineRun(metadata=metadata, spec=sink_spec,
                                      status=sink_status)
