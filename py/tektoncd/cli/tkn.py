"""tkn: a command line client for Tekton.

Usage:
  tkn pipelinerun list --limit=5
  tkn pipelinerun describe my-run --output=json
  tkn pipelinerun create run.yaml
  tkn pipelinerun cancel my-run --grace=stop
  tkn --namespace=ci --verbose pipelinerun wait my-run
  tkn resource create
"""
import json
import logging
import sys

import fire
import retrying
import yaml

from tektoncd.cli import clients as tkn_clients
from tektoncd.cli import convert
from tektoncd.cli import dynamic
from tektoncd.cli import errors
from tektoncd.cli import pipelineresource
from tektoncd.cli import pipelinerun
from tektoncd.cli import tkn_logging
from tektoncd.cli import util
from tektoncd.cli.apis import pipeline_v1
from tektoncd.cli.apis import pipeline_v1beta1

# Map the --grace flag to the value of spec.status.
GRACE_STATUSES = {
  None: pipelinerun.CANCELLED,
  "cancel": pipelinerun.CANCELLED_RUN_FINALLY,
  "stop": pipelinerun.STOPPED_RUN_FINALLY,
}


class NotDoneError(Exception):
  """The PipelineRun hasn't finished yet."""


class Session(object): # pylint: disable=useless-object-inheritance
  """Lazily creates the clients and namespace shared by all verbs.

  Credentials are only loaded once a verb needs them so that e.g. --help
  works without a cluster.
  """

  def __init__(self, namespace=None, context=None, kubeconfig=None,
               clients=None):
    self._namespace = namespace
    self._context = context
    self._kubeconfig = kubeconfig
    self._clients = clients

  @property
  def namespace(self):
    if not self._namespace:
      self._namespace = util.current_namespace(config_file=self._kubeconfig,
                                               context=self._context)
    return self._namespace

  @property
  def clients(self):
    if not self._clients:
      self._clients = tkn_clients.Clients.from_kube_config(
        config_file=self._kubeconfig, context=self._context)
    return self._clients


def load_pipelinerun(path):
  """Load a v1beta1 or v1 PipelineRun from a YAML file as v1beta1."""
  with open(path) as hf:
    obj = yaml.safe_load(hf)

  if not isinstance(obj, dict):
    raise errors.ShapeMismatchError(
      "{0} doesn't contain a PipelineRun".format(path))

  if obj.get("apiVersion") == pipeline_v1.API_VERSION:
    return convert.convert_from(
      convert.from_unstructured(obj, pipeline_v1.PipelineRun))
  return convert.from_unstructured(obj, pipeline_v1beta1.PipelineRun)


class PipelineRunCLI(object): # pylint: disable=useless-object-inheritance
  """Manage PipelineRuns."""

  def __init__(self, session, out=None):
    self._session = session
    self._out = out or sys.stdout

  def _print(self, line):
    self._out.write(line + "\n")

  def list(self, limit=0, label_selector=None):
    """List PipelineRuns, most recently started first.

    Args:
      limit: Number of PipelineRuns to show; 0 shows all of them.
      label_selector: Only show PipelineRuns matching this selector.
    """
    options = util.RequestOptions(label_selector=label_selector)
    lines = pipelinerun.get_all_pipelineruns(self._session.clients,
                                             self._session.namespace,
                                             options=options, limit=limit)
    if not lines:
      self._print("No PipelineRuns found")
      return
    for line in lines:
      self._print(line)

  def describe(self, name, output="yaml"):
    """Print a PipelineRun along with the statuses of its TaskRuns.

    Args:
      name: Name of the PipelineRun.
      output: yaml or json.
    """
    pr = pipelinerun.get(self._session.clients, name, self._session.namespace)
    obj = convert.to_unstructured(pr)
    if output == "json":
      self._print(json.dumps(obj, indent=2, sort_keys=True))
    elif output == "yaml":
      self._print(yaml.safe_dump(obj, default_flow_style=False).rstrip())
    else:
      raise ValueError("output must be yaml or json; got {0}".format(output))

  def create(self, path):
    """Create a PipelineRun from a YAML file."""
    pr = load_pipelinerun(path)
    namespace = pr.metadata.namespace or self._session.namespace
    created = pipelinerun.create(self._session.clients, pr, namespace)
    self._print("PipelineRun created: {0}".format(created.metadata.name))

  def cancel(self, name, grace=None):
    """Cancel a PipelineRun.

    Args:
      name: Name of the PipelineRun.
      grace: None to cancel immediately; "cancel" to cancel and run finally
        tasks; "stop" to let running tasks finish and then run finally
        tasks.
    """
    if grace not in GRACE_STATUSES:
      raise ValueError("grace must be one of cancel, stop; got {0}".format(
        grace))

    clients = self._session.clients
    namespace = self._session.namespace
    pr = pipelinerun.get(clients, name, namespace)
    if pipelinerun.is_done(pr):
      raise errors.InvalidError(
        "failed to cancel PipelineRun {0}: PipelineRun has already "
        "finished".format(name))

    pipelinerun.cancel(clients, name, GRACE_STATUSES[grace], namespace)
    self._print("PipelineRun cancelled: {0}".format(name))

  def delete(self, name):
    """Delete a PipelineRun."""
    pipelinerun.delete(self._session.clients, name, self._session.namespace)
    self._print("PipelineRun deleted: {0}".format(name))

  def watch(self, label_selector=None, timeout_seconds=None):
    """Print PipelineRun events as they happen."""
    options = util.RequestOptions(label_selector=label_selector,
                                  timeout_seconds=timeout_seconds)
    stream = pipelinerun.watch(self._session.clients, self._session.namespace,
                               options)
    for event in stream:
      if event.type == dynamic.ERROR:
        raise errors.TransportError(event.object.get("message", ""),
                                    code=event.object.get("code"),
                                    reason=event.object.get("reason"))
      name = (event.object.get("metadata") or {}).get("name")
      self._print("{0} {1}".format(event.type, name))

  def wait(self, name, timeout_minutes=30, poll_seconds=5):
    """Wait for a PipelineRun to finish and print its final condition.

    Args:
      name: Name of the PipelineRun.
      timeout_minutes: How long to wait.
      poll_seconds: How often to check.
    """
    clients = self._session.clients
    namespace = self._session.namespace

    @retrying.retry(wait_fixed=poll_seconds * 1000,
                    stop_max_delay=timeout_minutes * 60 * 1000,
                    retry_on_exception=lambda e: isinstance(e, NotDoneError))
    def get_done():
      pr = pipelinerun.get(clients, name, namespace)
      condition = pipelinerun.succeeded_condition(pr)
      logging.info("PipelineRun %s.%s; condition=%s", namespace, name,
                   condition.reason if condition else None)
      if not pipelinerun.is_done(pr):
        raise NotDoneError("Waiting for {0}.{1} to finish".format(namespace,
                                                                  name))
      return pr

    try:
      pr = get_done()
    except NotDoneError:
      raise errors.DeadlineExceededError(
        "Timed out after {0} minutes waiting for PipelineRun {1}".format(
          timeout_minutes, name))

    condition = pipelinerun.succeeded_condition(pr)
    self._print("PipelineRun {0} finished: {1}".format(name,
                                                       condition.reason))


class ResourceCLI(object): # pylint: disable=useless-object-inheritance
  """Manage PipelineResources."""

  def __init__(self, session, out=None, prompt_driver=None):
    self._session = session
    self._out = out or sys.stdout
    self._prompt_driver = prompt_driver

  def create(self):
    """Interactively create a PipelineResource."""
    creator = pipelineresource.ResourceCreator(
      self._session.clients, self._session.namespace,
      prompt_driver=self._prompt_driver, out=self._out)
    creator.create_interactive()


class TknCLI(object): # pylint: disable=useless-object-inheritance
  """A command line client for Tekton."""

  def __init__(self, namespace=None, context=None, kubeconfig=None,
               log_format=tkn_logging.TEXT, verbose=False):
    """Create the CLI.

    Args:
      namespace: Namespace to use; defaults to the namespace of the current
        kubeconfig context.
      context: kubeconfig context to use.
      kubeconfig: Path of the kubeconfig file.
      log_format: text or json.
      verbose: Log at INFO level.
    """
    level = logging.INFO if verbose else logging.WARNING
    tkn_logging.setup_logging(level=level, log_format=log_format)

    session = Session(namespace=namespace, context=context,
                      kubeconfig=kubeconfig)
    self.pipelinerun = PipelineRunCLI(session)
    self.resource = ResourceCLI(session)


def main(argv=None):
  """Run tkn and turn errors into an exit code.

  Returns:
    code: The exit code.
  """
  try:
    fire.Fire(TknCLI, command=argv)
  except errors.PromptInterruptedError:
    return 1
  except errors.AlreadyExistsError:
    sys.stderr.write("Error: resource already exists\n")
    return 1
  except (errors.Error, ValueError, OSError) as e:
    sys.stderr.write("Error: {0}\n".format(e))
    return 1
  return 0


if __name__ == "__main__":
  sys.exit(main())
