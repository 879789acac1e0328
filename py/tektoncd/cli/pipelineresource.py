"""Interactively create PipelineResources."""
import logging
import sys

from tektoncd.cli import convert
from tektoncd.cli import discovery
from tektoncd.cli import errors
from tektoncd.cli import prompt
from tektoncd.cli.apis import resource_v1alpha1

PIPELINERESOURCE_GROUP_RESOURCE = discovery.GroupResource(
  "tekton.dev", "pipelineresources")

STORAGE_TYPES = ["gcs", "build-gcs"]
ARTIFACT_TYPES = ["ZipArchive", "TarGzArchive", "Manifest"]

YES = "Yes"
NO = "No"


class ResourceCreator(object): # pylint: disable=useless-object-inheritance
  """Asks the user to describe a PipelineResource and then creates it."""

  def __init__(self, clients, namespace, prompt_driver=None, out=None):
    """Create the creator.

    Args:
      clients: clients.Clients
      namespace: Namespace to create the resource in.
      prompt_driver: (Optional) prompt.PromptDriver
      out: (Optional) Stream the confirmation is written to; stdout by
        default.
    """
    self.clients = clients
    self.namespace = namespace
    self.prompt = prompt_driver or prompt.PromptDriver()
    self.out = out or sys.stdout
    self.resource = resource_v1alpha1.PipelineResource()
    self.resource.metadata.namespace = namespace

  def create_interactive(self, options=None):
    """Ask all the questions and create the resource.

    Returns:
      created: The PipelineResource returned by the server.

    Raises:
      AlreadyExistsError: If a resource with the chosen name exists.
      PromptInterruptedError: If the user aborted a prompt.
    """
    self.ask_meta(options)
    self.ask_type()

    ask_params = {
      resource_v1alpha1.TYPE_GIT: self.ask_git_params,
      resource_v1alpha1.TYPE_IMAGE: self.ask_image_params,
      resource_v1alpha1.TYPE_PULL_REQUEST: self.ask_pull_request_params,
      resource_v1alpha1.TYPE_STORAGE: self.ask_storage_params,
    }
    ask_params[self.resource.spec.type]()

    gvr = self.clients.resolve(PIPELINERESOURCE_GROUP_RESOURCE, options)
    body = convert.to_unstructured(self.resource)
    logging.info("Creating PipelineResource %s.%s", self.namespace,
                 self.resource.metadata.name)
    obj = self.clients.dynamic(gvr).create_namespaced(self.namespace, body,
                                                      options)
    created = convert.from_unstructured(obj,
                                        resource_v1alpha1.PipelineResource)

    self.out.write("New {0} resource \"{1}\" has been created\n".format(
      created.spec.type, created.metadata.name))
    return created

  def ask_meta(self, options=None):
    name = self.prompt.ask_string("Enter a name for a pipeline resource :",
                                  required=True)
    self._validate(name, options)
    self.resource.metadata.name = name

  def ask_type(self):
    self.resource.spec.type = self.prompt.ask_select(
      "Select a resource type to create :", resource_v1alpha1.RESOURCE_TYPES)

  def ask_git_params(self):
    self._ask_param("url")
    self._ask_param("revision")

  def ask_image_params(self):
    self._ask_param("url")
    self._ask_param("digest")

  def ask_storage_params(self):
    storage_type = self.prompt.ask_select("Select a storage type",
                                          STORAGE_TYPES)
    self._add_param("type", storage_type)

    if storage_type == "gcs":
      self._ask_param("location")
      self._ask_param("dir")
    else:
      self._ask_param("location")
      artifact_type = self.prompt.ask_select("Select an artifact type",
                                             ARTIFACT_TYPES)
      self._add_param("artifactType", artifact_type)

    self._ask_secret("GOOGLE_APPLICATION_CREDENTIALS")

  def ask_pull_request_params(self):
    self._ask_param("url")

    answer = self.prompt.ask_select("Do you want to set secrets ?", [YES, NO])
    if answer == NO:
      return
    self._ask_secret("githubToken")

  def _validate(self, name, options):
    gvr = self.clients.resolve(PIPELINERESOURCE_GROUP_RESOURCE, options)
    try:
      self.clients.dynamic(gvr).get_namespaced(self.namespace, name, options)
    except errors.NotFoundError:
      return
    raise errors.AlreadyExistsError("resource already exist")

  def _ask_param(self, name):
    value = self.prompt.ask_string("Enter a value for {0} : ".format(name))
    # Params left empty are not set.
    if value:
      self._add_param(name, value)

  def _add_param(self, name, value):
    self.resource.spec.params.append(
      resource_v1alpha1.ResourceParam(name=name, value=value))

  def _ask_secret(self, field_name):
    secret_key, secret_name = self.prompt.ask_secret(field_name)
    secrets = self.resource.spec.secret_params or []
    secrets.append(resource_v1alpha1.SecretParam(
      field_name=field_name, secret_key=secret_key, secret_name=secret_name))
    self.resource.spec.secret_params = secrets
