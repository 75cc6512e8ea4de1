from datetime import datetime, timezone

import pytest

from autoflipper.types import (
    GROUP_VERSION,
    DeploymentInfo,
    Flipper,
    FlipperList,
    FlipperSpec,
    FlipperStatus,
    FlipPhase,
    GroupVersion,
    MatchFilter,
)


def _sample():
    return Flipper(
        name="test-flipper",
        namespace="default",
        spec=FlipperSpec(interval="15m", match=MatchFilter(labels={"app": "myapp"}, namespace="default")),
        status=FlipperStatus(
            phase=FlipPhase.FAILED,
            reason="Error in listing the deployments",
            failed_rollout_deployments=[DeploymentInfo(name="mydeployment", namespace="default")],
            last_scheduled_rollout_time=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        ),
    )


def test_group_version_api_version():
    assert GROUP_VERSION.api_version == "crd.ricktech.io/v1alpha1"
    assert GroupVersion("crd.ricktech.io", "v1alpha1") == GROUP_VERSION


@pytest.mark.parametrize(
    "phase,text",
    [(FlipPhase.PENDING, "Pending"), (FlipPhase.RUNNING, "Running"), (FlipPhase.FAILED, "Failed"), (FlipPhase.SUCCEEDED, "Succeeded")],
)
def test_phase_values(phase, text):
    assert FlipPhase(text) is phase


def test_round_trip_full():
    flipper = _sample()
    assert Flipper.from_dict(flipper.to_dict()) == flipper


def test_round_trip_empty():
    flipper = Flipper()
    assert Flipper.from_dict(flipper.to_dict()) == flipper


def test_to_dict_keys():
    data = _sample().to_dict()
    assert data["kind"] == "Flipper"
    assert data["apiVersion"] == GROUP_VERSION.api_version
    assert data["spec"]["match"]["labels"] == {"app": "myapp"}
    assert data["status"]["status"] == "Failed"
    assert data["status"]["failedRolloutDeployments"] == [{"name": "mydeployment", "namespace": "default"}]


def test_empty_fields_are_omitted():
    data = Flipper(name="x").to_dict()
    assert "interval" not in data["spec"]
    assert "labels" not in data["spec"]["match"]
    assert "reason" not in data["status"]
    assert "failedRolloutDeployments" not in data["status"]
    assert data["status"]["lastScheduleTime"] is None


def test_time_serialised_in_utc_and_parsed_back():
    flipper = _sample()
    text = flipper.to_dict()["status"]["lastScheduleTime"]
    assert text.endswith("Z")
    parsed = Flipper.from_dict(flipper.to_dict()).status.last_scheduled_rollout_time
    assert parsed == flipper.status.last_scheduled_rollout_time


def test_copy_is_independent():
    original = _sample()
    clone = original.copy()
    assert clone == original
    clone.spec.match.labels["tier"] = "web"
    clone.status.failed_rollout_deployments.clear()
    assert "tier" not in original.spec.match.labels
    assert len(original.status.failed_rollout_deployments) == 1


def test_flipper_list_iterates_items():
    items = [Flipper(name="a"), Flipper(name="b")]
    flippers = FlipperList(items=items)
    assert len(flippers) == 2
    assert [f.name for f in flippers] == ["a", "b"]