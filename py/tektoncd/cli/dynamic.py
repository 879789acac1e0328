"""Schema agnostic access to Tekton custom resources.

Objects go in and come out as plain dictionaries mirroring the JSON sent on
the wire; nothing here looks inside spec or status.
"""
import collections
import logging

from kubernetes import client as k8s_client
from kubernetes import watch as k8s_watch
from kubernetes.client import rest
import urllib3

from tektoncd.cli import errors
from tektoncd.cli import util

ADDED = "ADDED"
MODIFIED = "MODIFIED"
DELETED = "DELETED"
BOOKMARK = "BOOKMARK"
ERROR = "ERROR"

WatchEvent = collections.namedtuple("WatchEvent", ("type", "object"))


class ResourceClient(k8s_client.CustomObjectsApi):
  """A wrapper around CustomObjectsApi bound to one served resource."""

  def __init__(self, client, gvr):
    """Create the client.

    Args:
      client: K8s client
      gvr: discovery.GroupVersionResource confirmed to be served.
    """
    super(ResourceClient, self).__init__(client)

    self.gvr = gvr
    self.group = gvr.group
    self.version = gvr.version
    self.plural = gvr.resource

  @property
  def api_version(self):
    return "{0}/{1}".format(self.group, self.version)

  def get_namespaced(self, namespace, name, options=None):
    return self._call("get", self.get_namespaced_custom_object, options,
                      self.group, self.version, namespace, self.plural, name)

  def list_namespaced(self, namespace, options=None):
    """List objects in a namespace.

    Returns:
      results: The list object; objects are in results["items"] and
        results["metadata"]["continue"] is set if there are more pages.
    """
    options = options or util.RequestOptions()
    kwargs = _drop_unset({
      "label_selector": options.label_selector,
      "field_selector": options.field_selector,
      "_continue": options.continue_token,
      "limit": options.page_size,
      "resource_version": options.resource_version,
    })
    return self._call("list", self.list_namespaced_custom_object, options,
                      self.group, self.version, namespace, self.plural,
                      **kwargs)

  def create_namespaced(self, namespace, body, options=None):
    options = options or util.RequestOptions()
    kwargs = _drop_unset({
      "dry_run": options.dry_run,
      "field_manager": options.field_manager,
    })
    return self._call("create", self.create_namespaced_custom_object,
                      options, self.group, self.version, namespace,
                      self.plural, body, **kwargs)

  def patch_namespaced(self, namespace, name, patch, options=None):
    """Apply a JSON patch to an object.

    Args:
      patch: A list of JSON patch operations. The APIClient sends list
        bodies with content type application/json-patch+json.
    """
    options = options or util.RequestOptions()
    kwargs = _drop_unset({
      "dry_run": options.dry_run,
      "field_manager": options.field_manager,
    })
    return self._call("patch", self.patch_namespaced_custom_object,
                      options, self.group, self.version, namespace,
                      self.plural, name, patch, **kwargs)

  def delete_namespaced(self, namespace, name, options=None):
    options = options or util.RequestOptions()
    body = k8s_client.V1DeleteOptions(
      propagation_policy=options.propagation_policy,
      dry_run=[options.dry_run] if options.dry_run else None)
    self._call("delete", self.delete_namespaced_custom_object, options,
               self.group, self.version, namespace, self.plural, name,
               body=body)

  def watch_namespaced(self, namespace, options=None):
    return EventStream(self, namespace, options)

  def _call(self, verb, fn, options, *args, **kwargs):
    options = options or util.RequestOptions()
    timeout = options.timeout or util.DEFAULT_TIMEOUT
    logging.debug("Sending %s request for %s", verb, self.gvr)
    try:
      thread = fn(*args, async_req=True,
                  _request_timeout=timeout.total_seconds(), **kwargs)
      return util.wait_for_result(thread, timeout, options.cancel)
    except rest.ApiException as e:
      raise errors.from_api_exception(e, creating=verb == "create")


class EventStream(object): # pylint: disable=useless-object-inheritance
  """Iterates over the events of a watch.

  Iteration ends when the server closes the connection, the caller calls
  stop() or sets options.cancel. An error reported by the server is yielded
  as a final ERROR event.

  stop() and options.cancel take effect when the next event arrives; set
  options.timeout_seconds to bound how long an idle watch blocks.
  """

  def __init__(self, resource_client, namespace, options=None):
    self._client = resource_client
    self._namespace = namespace
    self._options = options or util.RequestOptions()
    self._watch = k8s_watch.Watch()

  def stop(self):
    self._watch.stop()

  def __iter__(self):
    options = self._options
    kwargs = _drop_unset({
      "label_selector": options.label_selector,
      "field_selector": options.field_selector,
      "resource_version": options.resource_version,
    })
    # Passing timeout_seconds, even as None, stops Watch from reconnecting
    # once the server closes the stream.
    kwargs["timeout_seconds"] = options.timeout_seconds
    if options.timeout is not None:
      kwargs["_request_timeout"] = options.timeout.total_seconds()

    client = self._client
    if options.cancel is not None and options.cancel.is_set():
      logging.info("Watch on %s cancelled before it started", client.gvr)
      return

    try:
      for event in self._watch.stream(client.list_namespaced_custom_object,
                                      client.group, client.version,
                                      self._namespace, client.plural,
                                      **kwargs):
        yield WatchEvent(event["type"], event["object"])
        if options.cancel is not None and options.cancel.is_set():
          logging.info("Watch on %s cancelled", client.gvr)
          self.stop()
          return
    except rest.ApiException as e:
      status = errors.parse_status_body(e.body)
      yield WatchEvent(ERROR, {
        "kind": "Status",
        "apiVersion": "v1",
        "status": "Failure",
        "code": status.get("code") or e.status,
        "reason": status.get("reason") or e.reason,
        "message": status.get("message", ""),
      })
    except urllib3.exceptions.ProtocolError as e:
      logging.info("Watch on %s closed by the server: %s", client.gvr, e)


def _drop_unset(kwargs):
  return {k: v for k, v in kwargs.items() if v is not None}
