"""Typed access to PipelineRuns whatever version the cluster serves.

Callers work with tekton.dev/v1beta1 PipelineRuns. Depending on the version
the cluster serves we talk to it in v1beta1 or v1 and convert as needed.
"""
import logging

from tektoncd.cli import convert
from tektoncd.cli import discovery
from tektoncd.cli import errors
from tektoncd.cli import formatted
from tektoncd.cli import pipelinerun_sort
from tektoncd.cli import status
from tektoncd.cli.apis import pipeline_v1
from tektoncd.cli.apis import pipeline_v1beta1

PIPELINERUN_GROUP_RESOURCE = discovery.GroupResource("tekton.dev",
                                                     "pipelineruns")

V1 = "v1"
V1BETA1 = "v1beta1"

# Values of spec.status that cancel a PipelineRun.
CANCELLED = "Cancelled"
CANCELLED_RUN_FINALLY = "CancelledRunFinally"
STOPPED_RUN_FINALLY = "StoppedRunFinally"

_SHAPES = {
  V1: pipeline_v1.PipelineRun,
  V1BETA1: pipeline_v1beta1.PipelineRun,
}


def _resolve(clients, options):
  gvr = clients.resolve(PIPELINERUN_GROUP_RESOURCE, options)
  if gvr.version not in _SHAPES:
    raise errors.NotServedError(PIPELINERUN_GROUP_RESOURCE)
  return gvr


def _as_v1(obj, version):
  typed = convert.from_unstructured(obj, _SHAPES[version])
  if version == V1BETA1:
    return convert.convert_to(typed)
  return typed


def _as_v1beta1(obj, version):
  typed = convert.from_unstructured(obj, _SHAPES[version])
  if version == V1:
    return convert.convert_from(typed)
  return typed


def get(clients, name, namespace, options=None):
  """Get a PipelineRun along with the statuses of its TaskRuns and Runs.

  Args:
    clients: clients.Clients
    name: Name of the PipelineRun.
    namespace: Namespace of the PipelineRun.
    options: (Optional) util.RequestOptions

  Returns:
    pr: pipeline_v1beta1.PipelineRun
  """
  gvr = _resolve(clients, options)
  try:
    obj = clients.dynamic(gvr).get_namespaced(namespace, name, options)
  except errors.Error as e:
    logging.error("Failed to get PipelineRun %s.%s: %s", namespace, name, e)
    raise

  pr = _as_v1beta1(obj, gvr.version)
  return status.populate_pipelinerun_task_statuses(clients, namespace, pr,
                                                   options)


def list_pipelineruns(clients, namespace, options=None):
  """List PipelineRuns in a namespace as v1 PipelineRuns.

  When options.page_size is set the server returns results in pages of
  that size; all pages are fetched.
  """
  gvr = _resolve(clients, options)
  resource_client = clients.dynamic(gvr)

  runs = []
  while True:
    results = resource_client.list_namespaced(namespace, options)
    runs.extend(_as_v1(item, gvr.version) for item in results.get("items") or [])

    next_token = (results.get("metadata") or {}).get("continue")
    if not next_token or not options or not options.page_size:
      return runs
    options = options._replace(continue_token=next_token)


def get_all_pipelineruns(clients, namespace, options=None, limit=0,
                         clock=None):
  """Return one display line per PipelineRun, most recently started first.

  Args:
    clients: clients.Clients
    namespace: Namespace to list.
    options: (Optional) util.RequestOptions; e.g. with a label selector.
    limit: Maximum number of lines; <= 0 returns all of them.
    clock: (Optional) formatted.Clock used to compute ages.

  Returns:
    lines: List of "<name> started <age>"
  """
  runs = list_pipelineruns(clients, namespace, options)
  runs = pipelinerun_sort.truncate(pipelinerun_sort.sort_by_start_time(runs),
                                   limit)

  lines = []
  for run in runs:
    start_time = None
    if run.status is not None:
      start_time = run.status.start_time
    lines.append("{0} started {1}".format(run.metadata.name,
                                          formatted.age(start_time, clock)))
  return lines


def create(clients, pr, namespace, options=None):
  """Create a PipelineRun.

  Args:
    clients: clients.Clients
    pr: pipeline_v1beta1.PipelineRun to create.
    namespace: Namespace to create it in.
    options: (Optional) util.RequestOptions

  Returns:
    created: pipeline_v1beta1.PipelineRun as returned by the server.
  """
  gvr = _resolve(clients, options)
  if gvr.version == V1:
    body = convert.to_unstructured(convert.convert_to(pr))
  else:
    body = convert.to_unstructured(pr)

  resource_client = clients.dynamic(gvr)
  body["apiVersion"] = resource_client.api_version
  body["kind"] = pipeline_v1.KIND

  name = pr.metadata.name or pr.metadata.generate_name
  logging.info("Creating PipelineRun %s.%s as %s", namespace, name,
               resource_client.api_version)
  try:
    created = resource_client.create_namespaced(namespace, body, options)
  except errors.Error as e:
    logging.error("Failed to create PipelineRun %s.%s: %s", namespace, name, e)
    raise

  return _as_v1beta1(created, gvr.version)


def cancel(clients, name, cancel_status, namespace, options=None):
  """Cancel a PipelineRun by setting spec.status.

  Args:
    clients: clients.Clients
    name: Name of the PipelineRun.
    cancel_status: The value to set spec.status to; e.g. CANCELLED. The
      server validates it.
    namespace: Namespace of the PipelineRun.
    options: (Optional) util.RequestOptions

  Returns:
    pr: pipeline_v1.PipelineRun as returned by the server.
  """
  gvr = _resolve(clients, options)
  patch = [{
    "op": "replace",
    "path": "/spec/status",
    "value": cancel_status,
  }]

  logging.info("Setting spec.status=%s on PipelineRun %s.%s", cancel_status,
               namespace, name)
  try:
    obj = clients.dynamic(gvr).patch_namespaced(namespace, name, patch,
                                                options)
  except errors.Error as e:
    logging.error("Failed to cancel PipelineRun %s.%s: %s", namespace, name, e)
    raise

  return _as_v1(obj, gvr.version)


def watch(clients, namespace, options=None):
  """Watch PipelineRuns in a namespace.

  Returns:
    stream: dynamic.EventStream of unstructured objects in the served
      version.
  """
  gvr = _resolve(clients, options)
  return clients.dynamic(gvr).watch_namespaced(namespace, options)


def delete(clients, name, namespace, options=None):
  """Delete a PipelineRun."""
  gvr = _resolve(clients, options)
  logging.info("Deleting PipelineRun %s.%s", namespace, name)
  clients.dynamic(gvr).delete_namespaced(namespace, name, options)


def succeeded_condition(pr):
  """Return the Succeeded condition of a PipelineRun or None."""
  if pr.status is None:
    return None
  for c in pr.status.conditions or []:
    if c.type == "Succeeded":
      return c
  return None


def is_done(pr):
  """Whether a PipelineRun finished; successfully or not."""
  condition = succeeded_condition(pr)
  return condition is not None and condition.status in ["True", "False"]
