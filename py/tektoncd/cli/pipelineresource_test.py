import io
import logging

import pytest

from tektoncd.cli import errors
from tektoncd.cli import pipelineresource


class ScriptedPrompt(object): # pylint: disable=useless-object-inheritance
  """Answers questions from a script of (message, answer) pairs."""

  def __init__(self, script):
    self.script = list(script)

  def _answer(self, message):
    expected, answer = self.script.pop(0)
    assert message == expected
    if isinstance(answer, Exception):
      raise answer
    return answer

  def ask_string(self, message, required=False): # pylint: disable=unused-argument
    return self._answer(message)

  def ask_select(self, message, options):
    answer = self._answer(message)
    assert answer in options
    return answer

  def ask_secret(self, field_name):
    return (self._answer("Secret Key for {0} :".format(field_name)),
            self._answer("Secret Name for {0} :".format(field_name)))


def _create(cluster, clients_for, script):
  out = io.StringIO()
  driver = ScriptedPrompt(script)
  creator = pipelineresource.ResourceCreator(clients_for(cluster), "ci",
                                             prompt_driver=driver, out=out)
  created = creator.create_interactive()
  assert not driver.script
  return created, out.getvalue()


def _stored(cluster, name):
  return cluster.objects[("pipelineresources", "ci", name)]


def test_create_git(v1_cluster, clients_for):
  created, out = _create(v1_cluster, clients_for, [
    ("Enter a name for a pipeline resource :", "repo-git"),
    ("Select a resource type to create :", "git"),
    ("Enter a value for url : ", "https://github.com/tektoncd/cli"),
    ("Enter a value for revision : ", ""),
  ])

  assert out == "New git resource \"repo-git\" has been created\n"
  assert created.metadata.uid
  assert _stored(v1_cluster, "repo-git") == {
    "apiVersion": "tekton.dev/v1alpha1",
    "kind": "PipelineResource",
    "metadata": {"name": "repo-git", "namespace": "ci",
                 "resourceVersion": "1", "uid": created.metadata.uid,
                 "creationTimestamp": "2026-10-19T08:00:00Z"},
    "spec": {"type": "git",
             "params": [{"name": "url",
                         "value": "https://github.com/tektoncd/cli"}]},
  }


def test_create_image(v1_cluster, clients_for):
  _create(v1_cluster, clients_for, [
    ("Enter a name for a pipeline resource :", "app-image"),
    ("Select a resource type to create :", "image"),
    ("Enter a value for url : ", "gcr.io/ci/app"),
    ("Enter a value for digest : ", "sha256:abc"),
  ])

  assert _stored(v1_cluster, "app-image")["spec"]["params"] == [
    {"name": "url", "value": "gcr.io/ci/app"},
    {"name": "digest", "value": "sha256:abc"},
  ]


def test_create_gcs_storage(v1_cluster, clients_for):
  _create(v1_cluster, clients_for, [
    ("Enter a name for a pipeline resource :", "artifacts"),
    ("Select a resource type to create :", "storage"),
    ("Select a storage type", "gcs"),
    ("Enter a value for location : ", "gs://ci-artifacts"),
    ("Enter a value for dir : ", "y"),
    ("Secret Key for GOOGLE_APPLICATION_CREDENTIALS :", "key.json"),
    ("Secret Name for GOOGLE_APPLICATION_CREDENTIALS :", "gcs-creds"),
  ])

  spec = _stored(v1_cluster, "artifacts")["spec"]
  assert spec["params"] == [
    {"name": "type", "value": "gcs"},
    {"name": "location", "value": "gs://ci-artifacts"},
    {"name": "dir", "value": "y"},
  ]
  assert spec["secrets"] == [{"fieldName": "GOOGLE_APPLICATION_CREDENTIALS",
                              "secretKey": "key.json",
                              "secretName": "gcs-creds"}]


def test_create_build_gcs_storage(v1_cluster, clients_for):
  _create(v1_cluster, clients_for, [
    ("Enter a name for a pipeline resource :", "build-cache"),
    ("Select a resource type to create :", "storage"),
    ("Select a storage type", "build-gcs"),
    ("Enter a value for location : ", "gs://build-cache"),
    ("Select an artifact type", "TarGzArchive"),
    ("Secret Key for GOOGLE_APPLICATION_CREDENTIALS :", "key.json"),
    ("Secret Name for GOOGLE_APPLICATION_CREDENTIALS :", "gcs-creds"),
  ])

  assert _stored(v1_cluster, "build-cache")["spec"]["params"] == [
    {"name": "type", "value": "build-gcs"},
    {"name": "location", "value": "gs://build-cache"},
    {"name": "artifactType", "value": "TarGzArchive"},
  ]


def test_create_pull_request(v1_cluster, clients_for):
  _, out = _create(v1_cluster, clients_for, [
    ("Enter a name for a pipeline resource :", "pr"),
    ("Select a resource type to create :", "pullRequest"),
    ("Enter a value for url : ", "https://github.com/tektoncd/cli/pull/1"),
    ("Do you want to set secrets ?", "Yes"),
    ("Secret Key for githubToken :", "token"),
    ("Secret Name for githubToken :", "github-secrets"),
  ])

  assert out == "New pullRequest resource \"pr\" has been created\n"
  assert _stored(v1_cluster, "pr")["spec"]["secrets"] == [
    {"fieldName": "githubToken", "secretKey": "token",
     "secretName": "github-secrets"}]


def test_create_pull_request_without_secrets(v1_cluster, clients_for):
  _create(v1_cluster, clients_for, [
    ("Enter a name for a pipeline resource :", "pr"),
    ("Select a resource type to create :", "pullRequest"),
    ("Enter a value for url : ", "https://github.com/tektoncd/cli/pull/1"),
    ("Do you want to set secrets ?", "No"),
  ])

  assert "secrets" not in _stored(v1_cluster, "pr")["spec"]


def test_name_already_exists(v1_cluster, clients_for):
  v1_cluster.add("pipelineresources", {
    "apiVersion": "tekton.dev/v1alpha1",
    "kind": "PipelineResource",
    "metadata": {"name": "repo-git", "namespace": "ci"},
    "spec": {"type": "git"},
  })

  with pytest.raises(errors.AlreadyExistsError, match="resource already exist"):
    _create(v1_cluster, clients_for, [
      ("Enter a name for a pipeline resource :", "repo-git"),
    ])
  assert not v1_cluster.requests_for("create")


def test_interrupted(v1_cluster, clients_for):
  with pytest.raises(errors.PromptInterruptedError):
    _create(v1_cluster, clients_for, [
      ("Enter a name for a pipeline resource :", "repo-git"),
      ("Select a resource type to create :", errors.PromptInterruptedError()),
    ])
  assert not v1_cluster.requests_for("create")


if __name__ == "__main__":
  logging.basicConfig(
      level=logging.INFO,
      format=('%(levelname)s|%(asctime)s'
            '|%(pathname)s|%(lineno)d| %(message)s'),
    datefmt='%Y-%m-%dT%H:%M:%S',
    )
  logging.getLogger().setLevel(logging.INFO)
  pytest.main()
