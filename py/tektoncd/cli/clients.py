"""The set of clients used to talk to the cluster."""
import logging

from kubernetes import client as k8s_client

from tektoncd.cli import discovery
from tektoncd.cli import dynamic
from tektoncd.cli import status
from tektoncd.cli import util


def new_api_client():
  """Create an ApiClient able to run the child fetches of a PipelineRun at once.

  Requests made with async_req=True run on the ApiClient's own thread pool
  which only has one thread unless told otherwise.
  """
  return k8s_client.ApiClient(pool_threads=status.MAX_PARALLEL_FETCHES)


class Clients(object): # pylint: disable=useless-object-inheritance
  """Bundles the K8s client, the discovery cache and the dynamic clients.

  One instance is created per command invocation; the discovery cache lives
  as long as it does.
  """

  def __init__(self, api_client=None, discovery_cache=None):
    """Create the clients.

    Args:
      api_client: (Optional) kubernetes.client.ApiClient. Defaults to
        new_api_client().
      discovery_cache: (Optional) discovery.DiscoveryCache. Defaults to one
        reading from api_client.
    """
    self.api_client = api_client or new_api_client()
    self.discovery = discovery_cache or discovery.DiscoveryCache(
      discovery.ServerDiscovery(self.api_client))

  @staticmethod
  def from_kube_config(config_file=None, context=None):
    """Create clients using the ambient kubeconfig or in cluster credentials."""
    util.load_kube_credentials(config_file=config_file, context=context)
    logging.info("Loaded Kubernetes credentials")
    return Clients(api_client=new_api_client())

  def resolve(self, group_resource, options=None):
    """Return the served GroupVersionResource for group_resource."""
    return self.discovery.resolve(group_resource, options)

  def dynamic(self, gvr):
    """Return a dynamic.ResourceClient for the served coordinate gvr."""
    return dynamic.ResourceClient(self.api_client, gvr)
