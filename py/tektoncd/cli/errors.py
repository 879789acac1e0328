"""Errors raised by the Tekton resource access layer.

Errors coming back from the Kubernetes APIServer are translated from
kubernetes.client.rest.ApiException into one of the classes below so callers
can react to them without parsing HTTP status codes.
"""
import http
import json
import logging


class Error(Exception):
  """Base class for all errors raised by tektoncd.cli."""


class NotServedError(Error):
  """No version of a group/resource is served by the cluster."""

  def __init__(self, group_resource):
    super(NotServedError, self).__init__(
      "the server doesn't have a resource type {0}.{1}".format(
        group_resource.resource, group_resource.group))
    self.group_resource = group_resource


class ApiError(Error):
  """An error returned by the APIServer.

  Attributes:
    code: The HTTP status code; None if the request never got a response.
    reason: The reason from the Kubernetes Status object.
  """

  def __init__(self, message, code=None, reason=None):
    super(ApiError, self).__init__(message)
    self.code = code
    self.reason = reason


class NotFoundError(ApiError):
  pass


class AlreadyExistsError(ApiError):
  pass


class InvalidError(ApiError):
  pass


class ConflictError(ApiError):
  pass


class ForbiddenError(ApiError):
  pass


class TransportError(ApiError):
  """The request failed or could not be completed."""


class DeadlineExceededError(TransportError):
  """The request did not complete before its deadline."""


class ShapeMismatchError(Error):
  """An unstructured object doesn't fit the typed shape we asked for."""


class CancelledError(Error):
  """The operation was cancelled by the caller."""


class PromptInterruptedError(Error):
  """The user interrupted an interactive prompt."""

  def __init__(self):
    super(PromptInterruptedError, self).__init__("interrupt")


def parse_status_body(body):
  """Parse the body of an ApiException into a dictionary.

  The body could be a JSON string or a dictionary depending on how the
  request was made.
  """
  if not body:
    return {}

  if isinstance(body, bytes):
    body = body.decode()

  if isinstance(body, str):
    try:
      body = json.loads(body)
    except ValueError as e:
      logging.debug("Error parsing ApiException body %s: %s", body, e)
      return {}

  if not isinstance(body, dict):
    return {}
  return body


def from_api_exception(exception, creating=False):
  """Translate a kubernetes ApiException into an Error.

  Args:
    exception: kubernetes.client.rest.ApiException
    creating: True if the failed request created an object; a 409 is then
      reported as AlreadyExistsError rather than ConflictError.

  Returns:
    error: An instance of ApiError.
  """
  body = parse_status_body(exception.body)
  code = body.get("code") or exception.status
  reason = body.get("reason") or exception.reason
  message = body.get("message") or "{0}: {1}".format(exception.status,
                                                     exception.reason)

  if code == http.HTTPStatus.NOT_FOUND:
    cls = NotFoundError
  elif code == http.HTTPStatus.CONFLICT:
    if creating or reason == "AlreadyExists":
      cls = AlreadyExistsError
    else:
      cls = ConflictError
  elif code in [http.HTTPStatus.BAD_REQUEST,
                http.HTTPStatus.UNPROCESSABLE_ENTITY]:
    cls = InvalidError
  elif code in [http.HTTPStatus.UNAUTHORIZED, http.HTTPStatus.FORBIDDEN]:
    cls = ForbiddenError
  else:
    cls = TransportError

  return cls(message, code=code, reason=reason)
