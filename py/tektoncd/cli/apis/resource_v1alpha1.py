"""Typed view of tekton.dev/v1alpha1 PipelineResources."""
from typing import List, Optional

from pydantic import Field

from tektoncd.cli.apis import meta

API_VERSION = "tekton.dev/v1alpha1"
KIND = "PipelineResource"

TYPE_GIT = "git"
TYPE_IMAGE = "image"
TYPE_PULL_REQUEST = "pullRequest"
TYPE_STORAGE = "storage"

RESOURCE_TYPES = sorted([TYPE_GIT, TYPE_IMAGE, TYPE_PULL_REQUEST,
                         TYPE_STORAGE])


class ResourceParam(meta.TektonModel):
  name: str
  value: str


class SecretParam(meta.TektonModel):
  field_name: str
  secret_key: Optional[str] = None
  secret_name: Optional[str] = None


class PipelineResourceSpec(meta.TektonModel):
  type: Optional[str] = None
  description: Optional[str] = None
  params: List[ResourceParam] = Field(default_factory=list)
  secret_params: Optional[List[SecretParam]] = Field(default=None,
                                                     alias="secrets")


class PipelineResource(meta.TektonModel):
  api_version: str = API_VERSION
  kind: str = KIND
  metadata: meta.ObjectMeta = Field(default_factory=meta.ObjectMeta)
  spec: PipelineResourceSpec = Field(default_factory=PipelineResourceSpec)
