"""Discover which version of a resource the cluster serves.

Tekton has served PipelineRuns as v1alpha1, v1beta1 and v1 over time and
clusters in the wild run all of them. Before talking to the dynamic
client we ask the APIServer which version of a group/resource it serves
and remember the answer for the rest of the invocation.
"""
import collections
import logging
import re
import threading

from kubernetes import client as k8s_client
from kubernetes.client import rest

from tektoncd.cli import errors
from tektoncd.cli import util

GroupResource = collections.namedtuple("GroupResource", ("group", "resource"))

GroupVersionResource = collections.namedtuple(
  "GroupVersionResource", ("group", "version", "resource"))

# Versions that follow the Kubernetes convention e.g. v1, v2beta1, v1alpha3
KUBE_VERSION_PATTERN = re.compile(r"^v(\d+)(?:(alpha|beta)(\d+))?$")

# Stable versions sort before beta which sort before alpha.
_STABILITY = {None: 0, "beta": 1, "alpha": 2}


def version_priority(version):
  """Sort key ordering API versions from most to least preferred.

  Follows the Kubernetes version priority: GA before beta before alpha,
  higher numbers first within each level and versions not following the
  convention last, in lexicographic order.
  """
  m = KUBE_VERSION_PATTERN.match(version)
  if not m:
    return (1, 0, 0, 0, version)
  major, stability, minor = m.groups()
  return (0, _STABILITY[stability], -int(major), -int(minor or 0), version)


class ServerDiscovery(object): # pylint: disable=useless-object-inheritance
  """Reads the API surface advertised by the APIServer."""

  def __init__(self, api_client):
    self._apis_api = k8s_client.ApisApi(api_client)
    self._custom_api = k8s_client.CustomObjectsApi(api_client)

  def group_versions(self, group, options=None):
    """Return the versions of an API group.

    Args:
      group: Name of the API group; e.g. tekton.dev
      options: (Optional) util.RequestOptions

    Returns:
      preferred: The preferred version or None.
      versions: List of all served versions. Empty if the group isn't
        served.
    """
    options = options or util.RequestOptions()
    group_list = self._call(self._apis_api.get_api_versions, options)

    for g in group_list.groups or []:
      if g.name != group:
        continue
      preferred = None
      if g.preferred_version:
        preferred = g.preferred_version.version
      return preferred, [v.version for v in g.versions or []]

    return None, []

  def resources(self, group, version, options=None):
    """Return the names of the resources served in group/version."""
    options = options or util.RequestOptions()
    try:
      resource_list = self._call(self._custom_api.get_api_resources, options,
                                 group, version)
    except errors.NotFoundError:
      return []
    return [r.name for r in resource_list.resources or []]

  @staticmethod
  def _call(fn, options, *args):
    timeout = options.timeout or util.DEFAULT_TIMEOUT
    try:
      thread = fn(*args, async_req=True,
                  _request_timeout=timeout.total_seconds())
      return util.wait_for_result(thread, timeout, options.cancel)
    except rest.ApiException as e:
      error = errors.from_api_exception(e)
      if isinstance(error, errors.NotFoundError):
        raise error
      raise errors.TransportError(
        "Discovery request failed: {0}".format(error), code=error.code,
        reason=error.reason)


class DiscoveryCache(object): # pylint: disable=useless-object-inheritance
  """Maps a GroupResource to the GroupVersionResource served by the cluster.

  Entries are published under a lock so concurrent callers resolving the
  same coordinate only trigger one round of discovery. Failures are not
  cached; the next call asks the server again.
  """

  def __init__(self, server_discovery):
    self._server = server_discovery
    self._lock = threading.Lock()
    self._served = {}

  def resolve(self, group_resource, options=None):
    """Return the GroupVersionResource to use for group_resource.

    Args:
      group_resource: GroupResource
      options: (Optional) util.RequestOptions used for discovery requests.

    Raises:
      NotServedError: If no version of the resource is served.
      TransportError: If discovery failed.
    """
    served = self._served.get(group_resource)
    if served:
      return served

    with self._lock:
      served = self._served.get(group_resource)
      if served:
        return served

      served = self._discover(group_resource, options)
      self._served[group_resource] = served
      return served

  def _discover(self, group_resource, options):
    preferred, versions = self._server.group_versions(group_resource.group,
                                                      options)
    candidates = sorted(versions, key=version_priority)
    if preferred in candidates:
      candidates.remove(preferred)
      candidates.insert(0, preferred)

    for version in candidates:
      resources = self._server.resources(group_resource.group, version,
                                         options)
      if group_resource.resource in resources:
        served = GroupVersionResource(group_resource.group, version,
                                      group_resource.resource)
        logging.info("Resolved %s.%s to version %s", group_resource.resource,
                     group_resource.group, version)
        return served

    raise errors.NotServedError(group_resource)
