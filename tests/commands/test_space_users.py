"""Tests for add-space-users and remove-space-users."""

import pytest

from fakes import FakeK8sClient, master_user_record, nstemplate_tier, space, space_binding
from ksctl.commands.add_space_users import add_space_users, split_users
from ksctl.commands.remove_space_users import remove_space_users
from ksctl.crds import ToolchainCRDs
from ksctl.utils.errors import NotFoundError, PreconditionError
from ksctl.utils.labels import ToolchainLabels


@pytest.fixture(autouse=True)
def team_space(fake_client: FakeK8sClient) -> None:
    fake_client.add(ToolchainCRDs.SPACE, space("team", tier="base", creator="alice"))
    fake_client.add(ToolchainCRDs.NS_TEMPLATE_TIER, nstemplate_tier("base", roles=("admin", "viewer")))
    fake_client.add(ToolchainCRDs.MASTER_USER_RECORD, master_user_record("bob"))
    fake_client.add(ToolchainCRDs.MASTER_USER_RECORD, master_user_record("carol"))


class TestAddSpaceUsers:
    """Test creating SpaceBindings."""

    def test_add(self, make_ctx, output, fake_client: FakeK8sClient) -> None:
        ctx = make_ctx(answer=True)

        add_space_users(ctx, "team", "admin", ["bob", "carol"])

        bindings = fake_client.all_of(ToolchainCRDs.SPACE_BINDING)
        assert sorted(b["spec"]["masterUserRecord"] for b in bindings) == ["bob", "carol"]
        for binding in bindings:
            assert binding["spec"]["space"] == "team"
            assert binding["spec"]["spaceRole"] == "admin"
            labels = binding["metadata"]["labels"]
            assert labels[ToolchainLabels.SPACE_CREATOR] == "alice"
            assert labels[ToolchainLabels.SPACE_BINDING_SPACE] == "team"
            assert labels[ToolchainLabels.SPACE_BINDING_MUR] == binding["spec"]["masterUserRecord"]
        assert "SpaceBinding(s) successfully created" in output(ctx)

    def test_invalid_role(self, make_ctx, output, fake_client: FakeK8sClient) -> None:
        ctx = make_ctx(answer=True)

        with pytest.raises(PreconditionError) as exc_info:
            add_space_users(ctx, "team", "owner", ["bob"])

        assert "invalid role 'owner' for space 'team'" in str(exc_info.value)
        assert "admin\nviewer" in str(exc_info.value)
        assert fake_client.created == []

    def test_unknown_user(self, make_ctx, fake_client: FakeK8sClient) -> None:
        with pytest.raises(NotFoundError, match="dave"):
            add_space_users(make_ctx(answer=True), "team", "admin", ["bob", "dave"])

        assert fake_client.created == []

    def test_unknown_space(self, make_ctx) -> None:
        with pytest.raises(NotFoundError, match="Space"):
            add_space_users(make_ctx(answer=True), "nope", "admin", ["bob"])

    def test_declined(self, make_ctx, output, fake_client: FakeK8sClient) -> None:
        ctx = make_ctx(answer=False)

        add_space_users(ctx, "team", "admin", ["bob"])

        assert fake_client.all_of(ToolchainCRDs.SPACE_BINDING) == []
        assert "successfully created" not in output(ctx)

    def test_split_users(self) -> None:
        assert split_users("bob, carol,,dave") == ["bob", "carol", "dave"]


class TestRemoveSpaceUsers:
    """Test deleting SpaceBindings."""

    def test_remove(self, make_ctx, output, fake_client: FakeK8sClient) -> None:
        fake_client.add(ToolchainCRDs.SPACE_BINDING, space_binding("bob", "team"))
        fake_client.add(ToolchainCRDs.SPACE_BINDING, space_binding("carol", "team"))
        fake_client.add(ToolchainCRDs.SPACE_BINDING, space_binding("bob", "other"))
        ctx = make_ctx(answer=True)

        remove_space_users(ctx, "team", ["bob", "carol"])

        remaining = fake_client.all_of(ToolchainCRDs.SPACE_BINDING)
        assert [b["metadata"]["name"] for b in remaining] == ["bob-other"]
        assert "All SpaceBinding(s) successfully deleted" in output(ctx)

    def test_user_without_binding(self, make_ctx, output, fake_client: FakeK8sClient) -> None:
        fake_client.add(ToolchainCRDs.SPACE_BINDING, space_binding("bob", "team"))
        ctx = make_ctx(answer=True)

        with pytest.raises(
            PreconditionError,
            match="no SpaceBinding found for Space 'team' and MasterUserRecord 'carol'",
        ):
            remove_space_users(ctx, "team", ["bob", "carol"])

        assert fake_client.deleted == []
        assert "[y/n]" not in output(ctx)

    def test_declined(self, make_ctx, fake_client: FakeK8sClient) -> None:
        fake_client.add(ToolchainCRDs.SPACE_BINDING, space_binding("bob", "team"))

        remove_space_users(make_ctx(answer=False), "team", ["bob"])

        assert fake_client.deleted == []
