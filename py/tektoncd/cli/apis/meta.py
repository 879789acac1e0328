"""Types shared by all Tekton API versions."""
import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class TektonModel(BaseModel):
  """Base for typed views of Tekton objects.

  Attributes are snake_case in Python and camelCase on the wire. Fields the
  server sends that we don't model are ignored; fields it leaves out stay
  None.
  """
  model_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
  )


class ObjectMeta(TektonModel):
  """Object metadata.

  Empty labels and annotations are the same as none; the APIServer omits
  both from the objects it returns.
  """
  model_config = ConfigDict(validate_assignment=True)

  name: Optional[str] = None
  generate_name: Optional[str] = None
  namespace: Optional[str] = None
  uid: Optional[str] = None
  resource_version: Optional[str] = None
  generation: Optional[int] = None
  creation_timestamp: Optional[datetime.datetime] = None
  deletion_timestamp: Optional[datetime.datetime] = None
  labels: Optional[Dict[str, str]] = None
  annotations: Optional[Dict[str, str]] = None
  owner_references: Optional[List[Dict[str, Any]]] = None
  finalizers: Optional[List[str]] = None

  @field_validator("labels", "annotations")
  @classmethod
  def _empty_as_unset(cls, value):
    return value or None


class Condition(TektonModel):
  """A knative style condition; Tekton reports progress with type Succeeded."""
  type: Optional[str] = None
  status: Optional[str] = None
  severity: Optional[str] = None
  reason: Optional[str] = None
  message: Optional[str] = None
  last_transition_time: Optional[datetime.datetime] = None


class Param(TektonModel):
  name: Optional[str] = None
  # A string, a list of strings or an object.
  value: Any = None
