"""An in memory cluster used by the tests.

The fakes stand in for the two seams the code talks to the APIServer
through: discovery.ServerDiscovery and dynamic.ResourceClient.
"""
import copy
import os
import threading
import time
from unittest import mock

import pytest
import yaml

from tektoncd.cli import clients
from tektoncd.cli import discovery
from tektoncd.cli import dynamic
from tektoncd.cli import errors

TEST_DATA_DIR = os.path.join(os.path.dirname(__file__), "test_data")

TEKTON_RESOURCES = ["pipelineruns", "taskruns", "customruns"]

CREATION_TIMESTAMP = "2026-10-19T08:00:00Z"


def load_test_data(name):
  with open(os.path.join(TEST_DATA_DIR, name)) as hf:
    return yaml.safe_load(hf)


class FakeServerDiscovery(object): # pylint: disable=useless-object-inheritance
  """Serves a fixed API surface and counts discovery requests."""

  def __init__(self, served, preferred=None, delay=0):
    """Create the fake.

    Args:
      served: Dictionary group -> version -> list of resources.
      preferred: Dictionary group -> preferred version.
      delay: Seconds each group request takes; lets tests overlap callers.
    """
    self.served = served
    self.preferred = preferred or {}
    self.delay = delay
    self.group_requests = 0
    self._lock = threading.Lock()

  def group_versions(self, group, options=None): # pylint: disable=unused-argument
    with self._lock:
      self.group_requests += 1
    if self.delay:
      time.sleep(self.delay)
    versions = sorted(self.served.get(group, {}))
    return self.preferred.get(group), versions

  def resources(self, group, version, options=None): # pylint: disable=unused-argument
    return list(self.served.get(group, {}).get(version, []))


class FakeCluster(object): # pylint: disable=useless-object-inheritance
  """Objects keyed by (resource, namespace, name) plus a log of requests."""

  def __init__(self, server_discovery):
    self.discovery = server_discovery
    self.objects = {}
    self.requests = []
    # Name -> error raised when getting that object.
    self.get_errors = {}
    self.watch_events = []
    self._lock = threading.Lock()
    self._next_uid = 0

  def add(self, resource, obj):
    metadata = obj["metadata"]
    self.objects[(resource, metadata.get("namespace"),
                  metadata["name"])] = copy.deepcopy(obj)

  def requests_for(self, verb):
    return [r for r in self.requests if r[0] == verb]

  def record(self, *request):
    with self._lock:
      self.requests.append(copy.deepcopy(request))

  def new_uid(self):
    with self._lock:
      self._next_uid += 1
      return "uid-{0}".format(self._next_uid)


def _not_found(gvr, name):
  return errors.NotFoundError(
    "{0}.{1} \"{2}\" not found".format(gvr.resource, gvr.group, name),
    code=404, reason="NotFound")


def _apply_replace(obj, path, value):
  keys = path.strip("/").split("/")
  target = obj
  for k in keys[:-1]:
    target = target.setdefault(k, {})
  target[keys[-1]] = value


class FakeResourceClient(object): # pylint: disable=useless-object-inheritance
  """In memory stand in for dynamic.ResourceClient."""

  def __init__(self, cluster, gvr):
    self.cluster = cluster
    self.gvr = gvr

  @property
  def api_version(self):
    return "{0}/{1}".format(self.gvr.group, self.gvr.version)

  def _key(self, namespace, name):
    return (self.gvr.resource, namespace, name)

  def get_namespaced(self, namespace, name, options=None): # pylint: disable=unused-argument
    self.cluster.record("get", self.gvr, namespace, name)
    if name in self.cluster.get_errors:
      raise self.cluster.get_errors[name]
    obj = self.cluster.objects.get(self._key(namespace, name))
    if obj is None:
      raise _not_found(self.gvr, name)
    return copy.deepcopy(obj)

  def list_namespaced(self, namespace, options=None): # pylint: disable=unused-argument
    self.cluster.record("list", self.gvr, namespace)
    items = [copy.deepcopy(obj)
             for (resource, ns, _), obj in sorted(self.cluster.objects.items(),
                                                 key=lambda kv: kv[0])
             if resource == self.gvr.resource and ns == namespace]
    return {
      "apiVersion": self.api_version,
      "kind": "List",
      "metadata": {"resourceVersion": "100"},
      "items": items,
    }

  def create_namespaced(self, namespace, body, options=None): # pylint: disable=unused-argument
    self.cluster.record("create", self.gvr, namespace, body)
    obj = copy.deepcopy(body)
    metadata = obj.setdefault("metadata", {})
    key = self._key(namespace, metadata.get("name"))
    if key in self.cluster.objects:
      raise errors.AlreadyExistsError(
        "{0}.{1} \"{2}\" already exists".format(self.gvr.resource,
                                                self.gvr.group,
                                                metadata.get("name")),
        code=409, reason="AlreadyExists")
    metadata["namespace"] = namespace
    metadata["resourceVersion"] = "1"
    metadata["uid"] = self.cluster.new_uid()
    metadata["creationTimestamp"] = CREATION_TIMESTAMP
    self.cluster.objects[key] = obj
    return copy.deepcopy(obj)

  def patch_namespaced(self, namespace, name, patch, options=None): # pylint: disable=unused-argument
    self.cluster.record("patch", self.gvr, namespace, name, patch)
    obj = self.cluster.objects.get(self._key(namespace, name))
    if obj is None:
      raise _not_found(self.gvr, name)
    for op in patch:
      _apply_replace(obj, op["path"], op["value"])
    metadata = obj["metadata"]
    metadata["resourceVersion"] = str(int(metadata.get("resourceVersion",
                                                       "1")) + 1)
    return copy.deepcopy(obj)

  def delete_namespaced(self, namespace, name, options=None): # pylint: disable=unused-argument
    self.cluster.record("delete", self.gvr, namespace, name)
    if self.cluster.objects.pop(self._key(namespace, name), None) is None:
      raise _not_found(self.gvr, name)

  def watch_namespaced(self, namespace, options=None): # pylint: disable=unused-argument
    self.cluster.record("watch", self.gvr, namespace)
    return iter([dynamic.WatchEvent(t, copy.deepcopy(o))
                 for t, o in self.cluster.watch_events])


class FakeClients(clients.Clients):
  """Clients talking to a FakeCluster."""

  def __init__(self, cluster):
    super(FakeClients, self).__init__(
      api_client=mock.MagicMock(),
      discovery_cache=discovery.DiscoveryCache(cluster.discovery))
    self.cluster = cluster

  def dynamic(self, gvr):
    return FakeResourceClient(self.cluster, gvr)


def new_cluster(versions, preferred=None, delay=0):
  """Create a cluster serving the Tekton resources at versions."""
  served = {"tekton.dev": {v: list(TEKTON_RESOURCES) for v in versions}}
  # PipelineResources were never promoted past v1alpha1.
  served["tekton.dev"].setdefault("v1alpha1", []).append("pipelineresources")
  preferred_versions = {}
  if preferred:
    preferred_versions["tekton.dev"] = preferred
  return FakeCluster(FakeServerDiscovery(served, preferred_versions,
                                         delay=delay))


@pytest.fixture
def v1beta1_cluster():
  """A cluster that only serves tekton.dev/v1beta1."""
  return new_cluster(["v1beta1"], preferred="v1beta1")


@pytest.fixture
def v1_cluster():
  """A cluster that serves tekton.dev/v1 and v1beta1 preferring v1."""
  return new_cluster(["v1", "v1beta1"], preferred="v1")


@pytest.fixture
def cluster_factory():
  return new_cluster


@pytest.fixture
def clients_for():
  return FakeClients


@pytest.fixture
def test_data():
  return load_test_data
