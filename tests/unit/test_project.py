"""Tests for the Project controller and converters."""

from __future__ import annotations

import copy
from unittest.mock import Mock

from argocd_operator.builders.project import (
    generate_create_project_request,
    generate_project_observation,
    generate_project_spec,
    generate_update_project_request,
    project_parameters_from_spec,
)
from argocd_operator.constants import ANNOTATION_EXTERNAL_NAME
from argocd_operator.controllers.project import (
    ProjectExternal,
    is_equal_roles,
    is_equal_sync_windows,
    is_project_up_to_date,
    late_initialize_project,
)
from argocd_operator.managed.resource import ManagedResource


def project_params():
    return {
        "description": "team project",
        "sourceRepos": ["https://github.com/org/repo.git"],
        "destinations": [{"server": "https://kubernetes.default.svc", "namespace": "team"}],
        "roles": [
            {
                "name": "ci",
                "description": "ci role",
                "policies": ["p, proj:team:ci, applications, sync, team/*, allow"],
                "jwtTokens": [{"iat": 1700000000, "exp": 0, "id": "t1"}],
            }
        ],
        "syncWindows": [{"kind": "allow", "schedule": "10 1 * * *", "duration": "1h", "applications": ["*"]}],
        "orphanedResources": {"warn": True, "ignore": [{"group": "apps", "kind": "Deployment"}]},
        "signatureKeys": [{"keyID": "4AEE18F83AFDEB23"}],
    }


def remote_project(params):
    return {
        "metadata": {"name": "team", "resourceVersion": "42"},
        "spec": generate_project_spec(params),
        "status": {"jwtTokensByRole": {"ci": {"items": [{"iat": "1700000000", "id": "t1"}]}}},
    }


class TestProjectConverters:
    """Test cases for the Project payload converters."""

    def test_project_labels_only_in_create_metadata(self):
        """Test that projectLabels become metadata labels on create only."""
        params = {"projectLabels": {"team": "a"}, "sourceRepos": ["*"]}

        create = generate_create_project_request("team", params)
        update = generate_update_project_request(params, {"metadata": {"name": "team", "resourceVersion": "7"}})

        assert create["metadata"] == {"name": "team", "labels": {"team": "a"}}
        assert "projectLabels" not in create["spec"]
        assert update["metadata"] == {"name": "team", "resourceVersion": "7"}

    def test_converter_round_trip(self):
        """Test that parameters survive conversion to the wire and back."""
        params = project_params()
        back = project_parameters_from_spec(generate_project_spec(params))

        assert is_project_up_to_date(back, {"spec": generate_project_spec(params)})
        assert back["sourceRepos"] == params["sourceRepos"]
        assert back["roles"][0]["jwtTokens"] == [{"iat": 1700000000, "exp": 0, "id": "t1"}]

    def test_observation_normalizes_token_numbers(self):
        """Test that jwtTokensByRole is mapped with integer timestamps."""
        observation = generate_project_observation(remote_project(project_params()))

        assert observation == {"jwtTokensByRole": {"ci": {"items": [{"iat": 1700000000, "exp": 0, "id": "t1"}]}}}

    def test_observation_of_missing_project(self):
        """Test that no project maps to an empty observation."""
        assert generate_project_observation(None) == {}


class TestProjectUpToDate:
    """Test cases for is_project_up_to_date."""

    def test_reflexive(self):
        """Test that parameters compare equal to their own wire form."""
        params = project_params()
        assert is_project_up_to_date(params, remote_project(params))

    def test_project_labels_do_not_cause_drift(self):
        """Test that projectLabels never trigger an update."""
        params = project_params()
        remote = remote_project(params)
        params["projectLabels"] = {"team": "b"}

        assert is_project_up_to_date(params, remote)

    def test_description_drift(self):
        """Test that a changed description is drift."""
        params = project_params()
        remote = remote_project(params)
        params["description"] = "changed"

        assert not is_project_up_to_date(params, remote)

    def test_destination_drift_at_later_index(self):
        """Test that a difference in the third destination is detected."""
        params = project_params()
        params["destinations"] = [
            {"server": "https://a", "namespace": "a"},
            {"server": "https://b", "namespace": "b"},
            {"server": "https://c", "namespace": "c"},
        ]
        remote = remote_project(params)
        params["destinations"][2]["namespace"] = "other"

        assert not is_project_up_to_date(params, remote)

    def test_unset_destination_fields_match(self):
        """Test that unset destination fields match whatever is observed."""
        params = project_params()
        remote = remote_project(params)
        remote["spec"]["destinations"][0]["name"] = "in-cluster"

        assert is_project_up_to_date(params, remote)

    def test_source_namespaces_compared_only_when_set(self):
        """Test that sourceNamespaces is ignored unless set."""
        params = project_params()
        remote = remote_project(params)
        remote["spec"]["sourceNamespaces"] = ["apps"]

        assert is_project_up_to_date(params, remote)
        params["sourceNamespaces"] = ["other"]
        assert not is_project_up_to_date(params, remote)

    def test_orphaned_warn_compared_only_when_set(self):
        """Test that an unset warn flag matches any observed value."""
        params = project_params()
        remote = remote_project(params)
        params["orphanedResources"] = {"ignore": [{"group": "apps", "kind": "Deployment"}]}

        assert is_project_up_to_date(params, remote)

    def test_roles_without_tokens_match_empty_token_list(self):
        """Test that an empty jwtTokens list equals an absent one."""
        desired = [{"name": "ci", "jwtTokens": []}]
        observed = [{"name": "ci"}]

        assert is_equal_roles(desired, observed)

    def test_role_policy_drift(self):
        """Test that a changed role policy is drift."""
        desired = [{"name": "ci", "policies": ["p, a"]}]
        observed = [{"name": "ci", "policies": ["p, b"]}]

        assert not is_equal_roles(desired, observed)

    def test_empty_sync_windows_match_missing(self):
        """Test that an empty desired window list equals a missing observed list."""
        assert is_equal_sync_windows([], None)
        assert not is_equal_sync_windows([{"kind": "allow"}], None)


class TestProjectLateInit:
    """Test cases for late_initialize_project."""

    def test_fills_unset_fields(self):
        """Test that unset fields are copied from the observed spec."""
        observed = generate_project_spec(project_params())
        params = {}

        late_initialize_project(params, observed)

        assert params["sourceRepos"] == observed["sourceRepos"]
        assert params["description"] == "team project"
        assert params["roles"][0]["name"] == "ci"

    def test_keeps_set_fields(self):
        """Test that fields already set are not overwritten."""
        observed = generate_project_spec(project_params())
        params = {"description": "mine", "sourceRepos": ["*"]}

        late_initialize_project(params, observed)

        assert params["description"] == "mine"
        assert params["sourceRepos"] == ["*"]

    def test_idempotent(self):
        """Test that a second late-init pass changes nothing."""
        observed = generate_project_spec(project_params())
        params = {}
        late_initialize_project(params, observed)
        snapshot = copy.deepcopy(params)

        late_initialize_project(params, observed)

        assert params == snapshot

    def test_never_fills_labels_or_source_namespaces(self):
        """Test that projectLabels and sourceNamespaces stay unset."""
        observed = generate_project_spec({"sourceNamespaces": ["apps"]})
        params = {}

        late_initialize_project(params, observed)

        assert "sourceNamespaces" not in params
        assert "projectLabels" not in params


class TestProjectExternal:
    """Test cases for ProjectExternal."""

    def make_resource(self, params):
        return ManagedResource(
            kind="Project",
            name="team",
            for_provider=params,
            annotations={ANNOTATION_EXTERNAL_NAME: "team"},
        )

    def test_labels_only_change_is_up_to_date(self):
        """Test that observing a project whose labels alone changed does not request an update."""
        params = project_params()
        service = Mock()
        remote = remote_project(params)
        remote["metadata"]["labels"] = {"team": "old"}
        service.get.return_value = remote
        params = dict(params, projectLabels={"team": "new"})

        observation = ProjectExternal(service).observe(self.make_resource(params))

        assert observation.resource_exists is True
        assert observation.resource_up_to_date is True

    def test_update_sends_current_resource_version(self):
        """Test that update reads the project and sends its resourceVersion."""
        params = project_params()
        service = Mock()
        service.get.return_value = remote_project(params)

        ProjectExternal(service).update(self.make_resource(params))

        sent = service.update.call_args[0][0]
        assert sent["metadata"] == {"name": "team", "resourceVersion": "42"}

    def test_create_adopts_returned_name(self):
        """Test that create sets the external name to the created project name."""
        service = Mock()
        service.create.return_value = {"metadata": {"name": "team"}}
        mr = self.make_resource({"sourceRepos": ["*"]})

        ProjectExternal(service).create(mr)

        assert mr.external_name == "team"
        assert service.create.call_args.kwargs["upsert"] is False
