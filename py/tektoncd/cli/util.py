"""Utilities shared by the tektoncd.cli modules."""
import collections
import datetime
import logging
import multiprocessing
import os

from kubernetes import config as k8s_config
import urllib3

from tektoncd.cli import errors

# How long to wait for requests to the ApiServer unless told otherwise.
DEFAULT_TIMEOUT = datetime.timedelta(seconds=30)

# How often a pending request checks whether it was cancelled.
CANCEL_POLLING_INTERVAL = datetime.timedelta(milliseconds=100)

SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"

DEFAULT_NAMESPACE = "default"

# Options accepted by every request to the APIServer.
#
# timeout: datetime.timedelta; deadline for the request. None means
#   DEFAULT_TIMEOUT except for watches which have no deadline.
# cancel: threading.Event; setting it aborts the pending request. Watches
#   only check it between events so an idle watch keeps waiting until the
#   next event or until timeout_seconds passes.
# label_selector, field_selector: selectors for list and watch.
# continue_token: continuation token from a previous paged list.
# page_size: maximum number of items the server returns per list page.
# resource_version: resource version to list or watch from.
# timeout_seconds: server side timeout for watches.
# dry_run: set to "All" to have the server skip persisting.
# field_manager: name of the actor making the change.
# propagation_policy: deletion propagation policy.
RequestOptions = collections.namedtuple(
  "RequestOptions",
  ("timeout", "cancel", "label_selector", "field_selector", "continue_token",
   "page_size", "resource_version", "timeout_seconds", "dry_run",
   "field_manager", "propagation_policy"),
  defaults=(None,) * 11)


def is_in_cluster():
  """Check if we are running in cluster."""
  # Use the existince of a KSA token to determine if we are in the cluster
  return os.path.exists(SERVICE_ACCOUNT_DIR)


def load_kube_credentials(config_file=None, context=None):
  """Load credentials to talk to the K8s APIServer.

  There are a couple cases we need to handle

  1. An explicit kubeconfig file or context was requested.
  2. KUBECONFIG is set.
  3. Running in a pod - use the service account token to talk to
     the K8s API server.
  4. Fall back to the default KUBECONFIG file.
  """
  if config_file or context:
    logging.info("Loading credentials from kubeconfig=%s context=%s",
                 config_file, context)
    k8s_config.load_kube_config(config_file=config_file, context=context,
                                persist_config=False)
    return

  if os.getenv("KUBECONFIG"):
    logging.info("Environment variable KUBECONFIG=%s; loading credentials from "
                 "it.", os.getenv("KUBECONFIG"))
    k8s_config.load_kube_config(persist_config=False)
    return

  if is_in_cluster():
    logging.info("Using incluster configuration for K8s client")
    k8s_config.load_incluster_config()
    return

  logging.info("Attempting to load credentials from default KUBECONFIG file")
  k8s_config.load_kube_config(persist_config=False)


def current_namespace(config_file=None, context=None):
  """Return the namespace commands should default to.

  The namespace of the active kubeconfig context wins; inside a pod we
  fall back to the namespace of the service account.
  """
  try:
    contexts, active = k8s_config.list_kube_config_contexts(
      config_file=config_file)
    if context:
      active = next((c for c in contexts if c["name"] == context), active)
    namespace = (active or {}).get("context", {}).get("namespace")
    if namespace:
      return namespace
  except (k8s_config.ConfigException, OSError) as e:
    logging.info("Could not read namespace from kubeconfig: %s", e)

  namespace_file = os.path.join(SERVICE_ACCOUNT_DIR, "namespace")
  if os.path.exists(namespace_file):
    with open(namespace_file) as hf:
      return hf.read().strip()

  return DEFAULT_NAMESPACE


def wait_for_result(thread, timeout=DEFAULT_TIMEOUT, cancel=None,
                    polling_interval=CANCEL_POLLING_INTERVAL):
  """Wait for an asynchronous API call to finish.

  Calls made with async_req=True return a multiprocessing.pool.AsyncResult;
  waiting on it rather than blocking in the call lets us give up when
  the deadline passes or the caller cancels.

  Args:
    thread: The AsyncResult returned by the API call.
    timeout: datetime.timedelta; None waits forever.
    cancel: (Optional) threading.Event signalling cancellation.
    polling_interval: How often to check for cancellation.

  Returns:
    result: The result of the call.

  Raises:
    CancelledError: If cancel was set before the call finished.
    DeadlineExceededError: If the call didn't finish in time.
    TransportError: If the connection to the APIServer failed.
  """
  end_time = None
  if timeout is not None:
    end_time = datetime.datetime.now() + timeout

  while True:
    if cancel is not None and cancel.is_set():
      raise errors.CancelledError("Request was cancelled")

    wait = polling_interval
    if end_time is not None:
      wait = min(wait, end_time - datetime.datetime.now())

    try:
      return thread.get(max(wait.total_seconds(), 0))
    except multiprocessing.TimeoutError:
      pass
    except urllib3.exceptions.HTTPError as e:
      raise errors.TransportError(str(e))

    if end_time is not None and datetime.datetime.now() >= end_time:
      raise errors.DeadlineExceededError(
        "Timed out after {0} waiting for the APIServer".format(timeout))
