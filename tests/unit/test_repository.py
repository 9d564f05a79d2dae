"""Tests for the Repository controller and converters."""

from __future__ import annotations

import copy
from unittest.mock import Mock

import pytest

from argocd_operator.builders.repository import (
    generate_repository,
    generate_repository_observation,
    repository_parameters_from_wire,
)
from argocd_operator.constants import ANNOTATION_EXTERNAL_NAME
from argocd_operator.controllers.repository import (
    RepositoryExternal,
    is_repository_up_to_date,
    late_initialize_repository,
)
from argocd_operator.errors import SecretKeyNotFoundError
from argocd_operator.managed.resource import ManagedResource

REPO_URL = "https://github.com/org/private.git"
PASSWORD_REF = {"namespace": "argocd", "name": "repo-creds", "key": "password"}


def remote_repository(**overrides):
    repo = {
        "repo": REPO_URL,
        "username": "git",
        "type": "git",
        "insecure": False,
        "enableLfs": False,
        "enableOCI": False,
        "inheritedCreds": False,
        "connectionState": {"status": "Successful", "message": "", "attemptedAt": "2024-01-01T00:00:00Z"},
    }
    repo.update(overrides)
    return repo


def make_secrets(versions=None, values=None):
    versions = versions or {}
    values = values or {}
    secrets = Mock()
    secrets.resource_version.side_effect = lambda ref: versions.get(ref["name"], "") if ref else ""
    secrets.resolve_string.side_effect = lambda ref: values.get(ref["key"]) if ref else None
    return secrets


def make_resource(params, external_name=REPO_URL, at_provider=None):
    annotations = {ANNOTATION_EXTERNAL_NAME: external_name} if external_name else {}
    return ManagedResource(
        kind="Repository",
        name="private",
        for_provider=params,
        at_provider=at_provider or {},
        annotations=annotations,
    )


class TestRepositoryConverters:
    """Test cases for the Repository payload converters."""

    def test_credentials_are_added_to_payload(self):
        """Test that resolved secrets are sent under their wire names."""
        payload = generate_repository({"repo": REPO_URL, "username": "git"}, {"password": "s3cret"})

        assert payload == {"repo": REPO_URL, "username": "git", "password": "s3cret"}

    def test_unset_fields_are_omitted(self):
        """Test that unset optional fields are not sent."""
        assert generate_repository({"repo": REPO_URL}) == {"repo": REPO_URL}

    def test_project_is_sent(self):
        """Test that a project scoped repository carries its project."""
        assert generate_repository({"repo": REPO_URL, "project": "team"})["project"] == "team"

    def test_from_wire_maps_empty_to_unset(self):
        """Test that empty strings and zero ids are unset parameters."""
        params = repository_parameters_from_wire(remote_repository(username="", githubAppID="0"))

        assert "username" not in params
        assert "githubAppID" not in params
        assert params["insecure"] is False

    def test_observation_records_secret_versions(self):
        """Test that secret resource versions are recorded and empty ones skipped."""
        observation = generate_repository_observation(remote_repository(), {"password": "17", "sshPrivateKey": ""})

        assert observation["connectionState"]["status"] == "Successful"
        assert "message" not in observation["connectionState"]
        assert observation["password"] == {"secret": {"resourceVersion": "17"}}
        assert "sshPrivateKey" not in observation


class TestRepositoryLateInit:
    """Test cases for late_initialize_repository."""

    def test_fills_unset_fields(self):
        """Test that strings, bools and ints are filled from the observed repository."""
        params = {"repo": REPO_URL}

        late_initialize_repository(params, remote_repository(githubAppID=12))

        assert params["username"] == "git"
        assert params["enableOCI"] is False
        assert params["githubAppID"] == 12

    def test_enable_oci_is_taken_from_its_own_field(self):
        """Test that enableOCI is late-initialized from enableOCI, not enableLfs."""
        params = {"repo": REPO_URL}

        late_initialize_repository(params, remote_repository(enableLfs=True, enableOCI=False))

        assert params["enableLfs"] is True
        assert params["enableOCI"] is False

    def test_empty_and_zero_values_are_not_copied(self):
        """Test that empty strings and zero ints leave parameters unset."""
        params = {"repo": REPO_URL}

        late_initialize_repository(params, remote_repository(username="", githubAppInstallationID=0))

        assert "username" not in params
        assert "githubAppInstallationID" not in params

    def test_project_is_not_late_initialized(self):
        """Test that the project of the observed repository is not copied."""
        params = {"repo": REPO_URL}

        late_initialize_repository(params, remote_repository(project="team"))

        assert "project" not in params

    def test_idempotent(self):
        """Test that a second pass changes nothing."""
        params = {"repo": REPO_URL}
        late_initialize_repository(params, remote_repository())
        snapshot = copy.deepcopy(params)

        late_initialize_repository(params, remote_repository())

        assert params == snapshot


class TestRepositoryUpToDate:
    """Test cases for is_repository_up_to_date."""

    def test_reflexive(self):
        """Test that late-initialized parameters match the repository they came from."""
        params = {"repo": REPO_URL}
        remote = remote_repository()
        late_initialize_repository(params, remote)

        assert is_repository_up_to_date(params, remote, {}, {})

    def test_unset_bool_matches_anything(self):
        """Test that an unset bool never causes drift."""
        assert is_repository_up_to_date({"repo": REPO_URL}, remote_repository(insecure=True), {}, {})

    def test_username_drift(self):
        """Test that a different username is drift."""
        assert not is_repository_up_to_date({"repo": REPO_URL, "username": "bot"}, remote_repository(), {}, {})

    def test_secret_rotation_is_drift(self):
        """Test that a new secret resourceVersion is drift."""
        previous = {"password": {"secret": {"resourceVersion": "1"}}}
        current = {"password": {"secret": {"resourceVersion": "2"}}}

        assert not is_repository_up_to_date({"repo": REPO_URL}, remote_repository(), current, previous)
        assert is_repository_up_to_date({"repo": REPO_URL}, remote_repository(), current, current)


class TestRepositoryExternal:
    """Test cases for RepositoryExternal."""

    def test_observe_records_secret_version(self):
        """Test that observe stores the password secret version in atProvider."""
        service = Mock()
        service.get.return_value = remote_repository()
        secrets = make_secrets(versions={"repo-creds": "5"})
        params = {"repo": REPO_URL, "passwordRef": PASSWORD_REF}
        mr = make_resource(params, at_provider={"password": {"secret": {"resourceVersion": "5"}}})

        observation = RepositoryExternal(service, secrets).observe(mr)

        assert mr.at_provider["password"] == {"secret": {"resourceVersion": "5"}}
        assert observation.resource_up_to_date is True

    def test_observe_passes_project(self):
        """Test that a project scoped repository is looked up within the project."""
        service = Mock()
        service.get.return_value = remote_repository(project="team")

        RepositoryExternal(service, make_secrets()).observe(make_resource({"repo": REPO_URL, "project": "team"}))

        service.get.assert_called_once_with(REPO_URL, app_project="team")

    def test_create_resolves_credentials_and_sets_external_name(self):
        """Test that create sends the password and names the resource by its URL."""
        service = Mock()
        secrets = make_secrets(values={"password": "s3cret"})
        mr = make_resource({"repo": REPO_URL, "passwordRef": PASSWORD_REF}, external_name="private")

        RepositoryExternal(service, secrets).create(mr)

        payload = service.create.call_args[0][0]
        assert payload["password"] == "s3cret"
        assert "passwordRef" not in payload
        assert service.create.call_args.kwargs == {"upsert": False, "creds_only": False}
        assert mr.external_name == REPO_URL

    def test_missing_secret_key_aborts_create(self):
        """Test that an unresolvable reference fails before the API is called."""
        service = Mock()
        secrets = Mock()
        secrets.resolve_string.side_effect = SecretKeyNotFoundError("argocd", "repo-creds", "password")
        mr = make_resource({"repo": REPO_URL, "passwordRef": PASSWORD_REF})

        with pytest.raises(SecretKeyNotFoundError):
            RepositoryExternal(service, secrets).create(mr)

        service.create.assert_not_called()

    def test_delete_passes_project(self):
        """Test that delete forwards the project."""
        service = Mock()

        RepositoryExternal(service, make_secrets()).delete(make_resource({"repo": REPO_URL, "project": "team"}))

        service.delete.assert_called_once_with(REPO_URL, app_project="team")
