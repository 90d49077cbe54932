"""Tests for the create-event command."""

import pytest

from fakes import FakeK8sClient, nstemplate_tier, user_tier
from ksctl.commands.create_event import ACTIVATION_CODE_CHARS, create_event, new_activation_code
from ksctl.crds import ToolchainCRDs
from ksctl.utils.errors import PreconditionError


@pytest.fixture
def tiers(fake_client: FakeK8sClient) -> None:
    fake_client.add(ToolchainCRDs.USER_TIER, user_tier("deactivate30"))
    fake_client.add(ToolchainCRDs.NS_TEMPLATE_TIER, nstemplate_tier("base"))


class TestCreateEvent:
    """Test creating SocialEvents."""

    def test_create(self, make_ctx, output, fake_client: FakeK8sClient, tiers) -> None:
        ctx = make_ctx(answer=True)

        envelope = create_event(
            ctx, "2026-10-20", "2026-10-22", 25, description="workshop", prefer_same_cluster=True
        )

        assert envelope.mutated
        [event] = fake_client.all_of(ToolchainCRDs.SOCIAL_EVENT)
        code = event["metadata"]["name"]
        assert len(code) == 5
        spec = event["spec"]
        assert spec["maxAttendees"] == 25
        assert spec["userTier"] == "deactivate30"
        assert spec["spaceTier"] == "base"
        assert spec["description"] == "workshop"
        assert spec["preferSameCluster"] is True
        assert spec["startTime"].endswith("Z")
        assert spec["startTime"] < spec["endTime"]
        text = output(ctx)
        assert "SocialEvent to be created" in text
        assert f"Social Event successfully created. Activation code is '{code}'" in text

    def test_single_day_event(self, make_ctx, fake_client: FakeK8sClient, tiers) -> None:
        create_event(make_ctx(answer=True), "2026-10-20", "2026-10-20", 1)

        assert len(fake_client.all_of(ToolchainCRDs.SOCIAL_EVENT)) == 1

    @pytest.mark.parametrize(
        ("start", "end", "message"),
        [
            ("20-10-2026", "2026-10-22", "start date is invalid"),
            ("2026-10-20", "tomorrow", "end date is invalid"),
            ("2026-10-22", "2026-10-20", "end date is not after start date"),
        ],
    )
    def test_invalid_dates(self, make_ctx, fake_client: FakeK8sClient, tiers, start, end, message) -> None:
        with pytest.raises(PreconditionError, match=message):
            create_event(make_ctx(answer=True), start, end, 10)

        assert fake_client.created == []

    def test_max_attendees_must_be_positive(self, make_ctx, tiers) -> None:
        with pytest.raises(PreconditionError, match="max-attendees"):
            create_event(make_ctx(answer=True), "2026-10-20", "2026-10-22", 0)

    def test_missing_user_tier(self, make_ctx, output, fake_client: FakeK8sClient, tiers) -> None:
        ctx = make_ctx(answer=True)

        with pytest.raises(PreconditionError, match="UserTier 'nosuchtier' does not exist"):
            create_event(ctx, "2026-10-20", "2026-10-22", 10, user_tier="nosuchtier")

        assert fake_client.created == []
        assert "[y/n]" not in output(ctx)

    def test_missing_space_tier(self, make_ctx, fake_client: FakeK8sClient, tiers) -> None:
        with pytest.raises(PreconditionError, match="NSTemplateTier 'nosuchtier' does not exist"):
            create_event(make_ctx(answer=True), "2026-10-20", "2026-10-22", 10, space_tier="nosuchtier")

    def test_declined(self, make_ctx, fake_client: FakeK8sClient, tiers) -> None:
        create_event(make_ctx(answer=False), "2026-10-20", "2026-10-22", 10)

        assert fake_client.all_of(ToolchainCRDs.SOCIAL_EVENT) == []


def test_activation_code() -> None:
    codes = {new_activation_code() for _ in range(20)}

    assert all(len(code) == 5 for code in codes)
    assert all(set(code) <= set(ACTIVATION_CODE_CHARS) for code in codes)
    assert len(codes) > 1
