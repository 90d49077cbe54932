"""Tests for adm unregister-member."""

import pytest

from fakes import HOST_NAMESPACE, FakeClientFactory, FakeK8sClient, toolchain_cluster
from ksctl.commands.adm_unregister_member import unregister_member
from ksctl.crds import ToolchainCRDs
from ksctl.utils.errors import ClusterNotFoundError, NotFoundError, SubmissionError


class TestUnregisterMember:
    """Test removing a member cluster from the host."""

    def test_unregister(
        self, make_ctx, output, fake_client: FakeK8sClient, factory: FakeClientFactory
    ) -> None:
        fake_client.add(ToolchainCRDs.TOOLCHAIN_CLUSTER, toolchain_cluster("member-m1.devcluster"))
        ctx = make_ctx(answer=True)

        envelope = unregister_member(ctx, "member1")

        assert envelope.mutated
        assert fake_client.deleted == [
            ("toolchainclusters", HOST_NAMESPACE, "member-m1.devcluster", None)
        ]
        printed = output(ctx)
        assert "Toolchain Member cluster" in printed
        assert "Delete Member cluster stated above from the Host cluster?" in printed
        assert "has been triggered" in printed

        [kubectl] = factory.generic_clients
        assert kubectl.cluster.cluster_name == "host"
        kubectl.run.assert_called_once_with(
            "rollout",
            ["restart", "deployments", "--selector=olm.owner.namespace=toolchain-host-operator"],
        )

    def test_declined(
        self, make_ctx, output, fake_client: FakeK8sClient, factory: FakeClientFactory
    ) -> None:
        fake_client.add(ToolchainCRDs.TOOLCHAIN_CLUSTER, toolchain_cluster("member-m1.devcluster"))
        ctx = make_ctx(answer=False)

        envelope = unregister_member(ctx, "member1")

        assert not envelope.mutated
        assert fake_client.deleted == []
        assert factory.generic_clients == []
        assert "has been triggered" not in output(ctx)

    def test_unknown_member(self, make_ctx, fake_client: FakeK8sClient) -> None:
        with pytest.raises(ClusterNotFoundError):
            unregister_member(make_ctx(answer=True), "member-9")

        assert fake_client.deleted == []

    def test_not_registered(self, make_ctx, output) -> None:
        ctx = make_ctx(answer=True)

        with pytest.raises(NotFoundError, match="ToolchainCluster"):
            unregister_member(ctx, "member2")

        assert "[y/n]" not in output(ctx)

    def test_restart_failure(
        self, make_ctx, fake_client: FakeK8sClient, factory: FakeClientFactory
    ) -> None:
        fake_client.add(ToolchainCRDs.TOOLCHAIN_CLUSTER, toolchain_cluster("member-m1.devcluster"))
        factory.kubectl_exit_code = 1

        with pytest.raises(SubmissionError, match="unable to restart the host operator"):
            unregister_member(make_ctx(answer=True), "member1")

        assert len(fake_client.deleted) == 1
