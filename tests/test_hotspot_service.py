import pytest

from stepwise.core.exceptions import ErrorKind
from stepwise.domain.schemas.demo import DemoCreate
from stepwise.domain.schemas.hotspot import HotspotCreate, HotspotUpdate
from stepwise.domain.schemas.step import StepCreate


@pytest.fixture
def steps(demo_service, step_service, alice):
    demo = demo_service.create_demo(DemoCreate(title="Product Tour"), alice[1]).data
    s1 = step_service.create_step(
        StepCreate(title="S", image_url="https://cdn/1.png", position=1), alice[1], demo.id
    ).data
    s2 = step_service.create_step(
        StepCreate(title="S2", image_url="https://cdn/2.png", position=2), alice[1], demo.id
    ).data
    return demo, s1, s2


def _hotspot(step_id, **overrides):
    fields = {"step_id": step_id, "x": 10, "y": 20, "width": 30, "height": 15, "color": "#3b82f6"}
    fields.update(overrides)
    return HotspotCreate(**fields)


def test_create_hotspot_with_target(hotspot_service, steps, alice):
    _, s1, s2 = steps

    result = hotspot_service.create_hotspot(_hotspot(s1.id, target_step_id=s2.id), alice[1])

    assert result.success
    assert result.data.target_step_id == s2.id
    assert result.data.border_radius == 0
    assert result.data.tooltip_text is None


def test_create_hotspot_with_missing_target_fails(hotspot_service, steps, alice):
    _, s1, _ = steps

    result = hotspot_service.create_hotspot(_hotspot(s1.id, target_step_id="nonexistent"), alice[1])

    assert result.success is False
    assert result.code == ErrorKind.NOT_FOUND
    assert result.error == "Target step not found"
    assert hotspot_service.list_by_step(s1.id, alice[1]).data == []


def test_target_must_belong_to_the_same_demo(
    hotspot_service, demo_service, step_service, steps, alice
):
    _, s1, _ = steps
    other = demo_service.create_demo(DemoCreate(title="Other"), alice[1]).data
    foreign = step_service.create_step(
        StepCreate(title="F", image_url="https://cdn/f.png"), alice[1], other.id
    ).data

    result = hotspot_service.create_hotspot(_hotspot(s1.id, target_step_id=foreign.id), alice[1])

    assert result.code == ErrorKind.VALIDATION
    assert result.error == "Target step must belong to the same demo"


def test_create_hotspot_validation(hotspot_service, steps, alice):
    _, s1, _ = steps

    assert hotspot_service.create_hotspot(_hotspot(None), alice[1]).error == "Step ID is required"
    assert hotspot_service.create_hotspot(_hotspot("missing"), alice[1]).error == "Step not found"
    missing = hotspot_service.create_hotspot(_hotspot(s1.id, color=None), alice[1])
    assert missing.error == "Position (x, y, width, height) and color are required"
    assert hotspot_service.create_hotspot(_hotspot(s1.id, x=120), alice[1]).code == ErrorKind.VALIDATION
    assert hotspot_service.create_hotspot(_hotspot(s1.id, width=0), alice[1]).code == ErrorKind.VALIDATION
    assert hotspot_service.create_hotspot(_hotspot(s1.id), None).code == ErrorKind.UNAUTHENTICATED


def test_geometry_accepts_numeric_strings(hotspot_service, steps, alice):
    _, s1, _ = steps

    result = hotspot_service.create_hotspot(_hotspot(s1.id, x="12.5", width="40"), alice[1])

    assert result.data.x == 12.5
    assert result.data.width == 40.0


def test_hotspot_mutations_are_owner_only(hotspot_service, demo_service, steps, alice, bob):
    demo, s1, _ = steps
    hotspot = hotspot_service.create_hotspot(_hotspot(s1.id), alice[1]).data

    assert hotspot_service.create_hotspot(_hotspot(s1.id), bob[1]).code == ErrorKind.NOT_FOUND
    demo_service.toggle_visibility(demo.id, alice[1])
    assert hotspot_service.create_hotspot(_hotspot(s1.id), bob[1]).code == ErrorKind.FORBIDDEN
    denied = hotspot_service.update_hotspot(hotspot.id, HotspotUpdate(color="#000"), bob[1])
    assert denied.code == ErrorKind.FORBIDDEN
    assert hotspot_service.delete_hotspot(hotspot.id, bob[1]).code == ErrorKind.FORBIDDEN
    assert len(hotspot_service.list_by_step(s1.id, bob[1]).data) == 1


def test_update_hotspot_changes_only_supplied_fields(hotspot_service, steps, alice):
    _, s1, s2 = steps
    hotspot = hotspot_service.create_hotspot(_hotspot(s1.id), alice[1]).data

    updated = hotspot_service.update_hotspot(
        hotspot.id, HotspotUpdate(tooltip_text="Next", target_step_id=s2.id), alice[1]
    ).data

    assert updated.tooltip_text == "Next"
    assert updated.target_step_id == s2.id
    assert (updated.x, updated.y, updated.color) == (10, 20, "#3b82f6")

    cleared = hotspot_service.update_hotspot(
        hotspot.id, HotspotUpdate(target_step_id=None), alice[1]
    ).data
    assert cleared.target_step_id is None


def test_update_hotspot_validation(hotspot_service, steps, alice):
    _, s1, _ = steps
    hotspot = hotspot_service.create_hotspot(_hotspot(s1.id), alice[1]).data

    def update(payload):
        return hotspot_service.update_hotspot(hotspot.id, payload, alice[1])

    assert update(HotspotUpdate()).error == "No fields to update"
    assert update(HotspotUpdate(x=95, width=10)).success
    assert update(HotspotUpdate(height=0)).code == ErrorKind.VALIDATION
    assert update(HotspotUpdate(target_step_id="nonexistent")).error == "Target step not found"
    assert hotspot_service.update_hotspot("missing", HotspotUpdate(x=1), alice[1]).error == "Hotspot not found"


def test_get_and_delete_hotspot(hotspot_service, steps, alice):
    _, s1, _ = steps
    hotspot = hotspot_service.create_hotspot(_hotspot(s1.id), alice[1]).data

    assert hotspot_service.get_hotspot(hotspot.id).data.id == hotspot.id
    assert hotspot_service.get_hotspot("").error == "Hotspot ID is required"

    deleted = hotspot_service.delete_hotspot(hotspot.id, alice[1])
    assert deleted.data.message == "Hotspot deleted successfully"
    assert hotspot_service.get_hotspot(hotspot.id).error == "Hotspot not found"


def test_delete_all_for_step_reports_count(hotspot_service, steps, alice):
    _, s1, s2 = steps
    for _ in range(3):
        hotspot_service.create_hotspot(_hotspot(s1.id), alice[1])
    kept = hotspot_service.create_hotspot(_hotspot(s2.id), alice[1]).data

    result = hotspot_service.delete_all_for_step(s1.id, alice[1]).data

    assert result.deleted_count == 3
    assert result.message == "3 hotspot(s) deleted successfully"
    assert hotspot_service.list_by_step(s1.id, alice[1]).data == []
    assert hotspot_service.get_hotspot(kept.id).success

    assert hotspot_service.delete_all_for_step(s1.id, alice[1]).data.deleted_count == 0
