"""Attach the statuses of child TaskRuns and CustomRuns to a PipelineRun.

Recent versions of Tekton only record references to the child runs of a
PipelineRun in its status; to show users how the individual tasks are
doing we fetch every child and graft a compact copy of its status onto the
PipelineRun. This is done on reads only; the result is never written back
to the cluster.
"""
import collections
import functools
import logging
from multiprocessing import pool

import pydantic

from tektoncd.cli import discovery
from tektoncd.cli import errors
from tektoncd.cli.apis import pipeline_v1beta1

# Maximum number of children fetched at the same time.
MAX_PARALLEL_FETCHES = 8

TASKRUN_KIND = "TaskRun"
CUSTOMRUN_KIND = "CustomRun"
# v1alpha1 predecessor of CustomRun.
RUN_KIND = "Run"

CHILD_GROUP_RESOURCES = {
  TASKRUN_KIND: discovery.GroupResource("tekton.dev", "taskruns"),
  CUSTOMRUN_KIND: discovery.GroupResource("tekton.dev", "customruns"),
  RUN_KIND: discovery.GroupResource("tekton.dev", "runs"),
}

_TASKRUN_STATUS_KEYS = ["conditions", "podName", "startTime", "completionTime",
                        "steps"]
_CUSTOMRUN_STATUS_KEYS = ["conditions", "startTime", "completionTime",
                          "results", "extraFields"]

Child = collections.namedtuple(
  "Child", ("name", "kind", "pipeline_task_name", "when_expressions"))


def _children(pr):
  """List the children of a PipelineRun.

  Uses status.childReferences; PipelineRuns created by older controllers
  only have the embedded status.taskRuns and status.runs maps.
  """
  status = pr.status
  if status is None:
    return []

  if status.child_references:
    return [Child(ref.name, ref.kind or TASKRUN_KIND, ref.pipeline_task_name,
                  ref.when_expressions)
            for ref in status.child_references]

  children = []
  for name, child_status in (status.task_runs or {}).items():
    children.append(Child(name, TASKRUN_KIND, child_status.pipeline_task_name,
                          child_status.when_expressions))
  for name, child_status in (status.runs or {}).items():
    children.append(Child(name, RUN_KIND, child_status.pipeline_task_name,
                          child_status.when_expressions))
  return children


def _fetch_child(clients, namespace, options, child):
  """Fetch a child run.

  Returns:
    child, obj: obj is None if the child no longer exists.
  """
  gvr = clients.resolve(CHILD_GROUP_RESOURCES[child.kind], options)
  try:
    obj = clients.dynamic(gvr).get_namespaced(namespace, child.name, options)
  except errors.NotFoundError:
    logging.info("%s %s.%s not found; it was probably garbage collected",
                 child.kind, namespace, child.name)
    return child, None
  return child, obj


def _compact_status(obj, keys):
  status = obj.get("status") or {}
  return {k: status[k] for k in keys if k in status}


def _taskrun_status(child, obj):
  compact = _compact_status(obj, _TASKRUN_STATUS_KEYS)
  child_status = obj.get("status") or {}
  # v1 TaskRuns call them results
  results = child_status.get("taskResults", child_status.get("results"))
  if results is not None:
    compact["taskResults"] = results
  return pipeline_v1beta1.PipelineRunTaskRunStatus(
    pipeline_task_name=child.pipeline_task_name,
    when_expressions=child.when_expressions,
    status=pipeline_v1beta1.TaskRunStatus.model_validate(compact))


def _customrun_status(child, obj):
  compact = _compact_status(obj, _CUSTOMRUN_STATUS_KEYS)
  return pipeline_v1beta1.PipelineRunRunStatus(
    pipeline_task_name=child.pipeline_task_name,
    when_expressions=child.when_expressions,
    status=pipeline_v1beta1.CustomRunStatus.model_validate(compact))


def get_full_pipeline_task_statuses(clients, namespace, pr, options=None):
  """Fetch the statuses of all children of a PipelineRun.

  Args:
    clients: clients.Clients
    namespace: Namespace of the PipelineRun.
    pr: v1beta1 or v1 PipelineRun.
    options: (Optional) util.RequestOptions for the child requests.

  Returns:
    task_runs: Dictionary of TaskRun name -> PipelineRunTaskRunStatus
    runs: Dictionary of CustomRun name -> PipelineRunRunStatus

  Raises:
    Error: Any error fetching a child other than NotFoundError.
  """
  children = []
  for child in _children(pr):
    if child.kind not in CHILD_GROUP_RESOURCES:
      logging.warning("Skipping child %s of PipelineRun %s; unsupported kind "
                      "%s", child.name, pr.metadata.name, child.kind)
      continue
    children.append(child)

  if not children:
    return {}, {}

  fetch = functools.partial(_fetch_child, clients, namespace, options)
  with pool.ThreadPool(min(MAX_PARALLEL_FETCHES, len(children))) as p:
    results = p.map(fetch, children)

  task_runs = {}
  runs = {}
  for child, obj in sorted(results, key=lambda r: r[0].name):
    if obj is None:
      continue
    try:
      if child.kind == TASKRUN_KIND:
        task_runs[child.name] = _taskrun_status(child, obj)
      else:
        runs[child.name] = _customrun_status(child, obj)
    except pydantic.ValidationError as e:
      raise errors.ShapeMismatchError(
        "Unexpected status for {0} {1}: {2}".format(child.kind, child.name, e))

  return task_runs, runs


def populate_pipelinerun_task_statuses(clients, namespace, pr, options=None):
  """Return a copy of pr with status.taskRuns and status.runs filled in.

  pr itself is not modified.
  """
  try:
    task_runs, runs = get_full_pipeline_task_statuses(clients, namespace, pr,
                                                      options)
  except errors.Error as e:
    logging.error("Failed to get TaskRun and Run statuses for PipelineRun %s "
                  "from namespace %s: %s", pr.metadata.name, namespace, e)
    raise

  populated = pr.model_copy(deep=True)
  if populated.status is None:
    # Nothing has run yet.
    return populated
  populated.status.task_runs = task_runs
  populated.status.runs = runs
  return populated
