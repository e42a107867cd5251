import pytest

from stepwise.core.exceptions import ErrorKind
from stepwise.domain.schemas.demo import DemoCreate, DemoFilter, DemoUpdate
from stepwise.domain.schemas.hotspot import HotspotCreate
from stepwise.domain.schemas.step import StepCreate


def _create(demo_service, token, title="Product Tour", **kwargs):
    result = demo_service.create_demo(DemoCreate(title=title, **kwargs), token)
    assert result.success, result.error
    return result.data


def _add_step(step_service, token, demo_id, title, image_url="https://cdn/img.png", position=None):
    result = step_service.create_step(
        StepCreate(title=title, image_url=image_url, position=position), token, demo_id
    )
    assert result.success, result.error
    return result.data


def test_create_demo_allocates_slug_and_is_private(demo_service, alice):
    demo = _create(demo_service, alice[1])

    assert demo.slug == "product-tour"
    assert demo.is_public is False
    assert demo.user_id == alice[0]


def test_same_title_gets_disambiguated_slug(demo_service, alice):
    first = _create(demo_service, alice[1])
    second = _create(demo_service, alice[1])

    assert first.slug == "product-tour"
    assert second.slug == "product-tour-1"
    assert demo_service.get_demo(second.slug, alice[1]).data.id == second.id


def test_create_demo_validation(demo_service, alice):
    assert demo_service.create_demo(DemoCreate(title="  "), alice[1]).error == "Title is required"

    anonymous = demo_service.create_demo(DemoCreate(title="Tour"), None)
    assert anonymous.code == ErrorKind.UNAUTHENTICATED

    bad_token = demo_service.create_demo(DemoCreate(title="Tour"), "garbage")
    assert bad_token.code == ErrorKind.INVALID_CREDENTIAL


def test_private_demo_is_hidden_from_others(demo_service, alice, bob):
    demo = _create(demo_service, alice[1])

    for token in (None, bob[1]):
        for key in (demo.id, demo.slug):
            result = demo_service.get_demo(key, token)
            assert result.success is False
            assert result.code == ErrorKind.NOT_FOUND
            assert result.error == "Demo not found"

    assert demo_service.get_demo(demo.id, alice[1]).data.id == demo.id


def test_public_demo_is_visible_to_everyone(demo_service, alice, bob):
    demo = _create(demo_service, alice[1])
    demo_service.toggle_visibility(demo.id, alice[1])

    assert demo_service.get_demo(demo.slug, bob[1]).data.id == demo.id
    assert demo_service.get_demo(demo.slug, None).data.id == demo.id


def test_slug_lookup_prefers_callers_own_demo(demo_service, alice, bob):
    public = _create(demo_service, alice[1], is_public=True)
    own = _create(demo_service, bob[1])

    assert own.slug == public.slug
    assert demo_service.get_demo(own.slug, bob[1]).data.id == own.id
    assert demo_service.get_demo(own.slug, None).data.id == public.id


def test_toggle_visibility_is_an_involution(demo_service, alice):
    demo = _create(demo_service, alice[1])

    once = demo_service.toggle_visibility(demo.id, alice[1]).data
    twice = demo_service.toggle_visibility(demo.id, alice[1]).data

    assert once.is_public is True
    assert twice.is_public is False


def test_mutations_are_owner_only(demo_service, alice, bob):
    private = _create(demo_service, alice[1], title="Private")
    public = _create(demo_service, alice[1], title="Public", is_public=True)

    hidden = demo_service.toggle_visibility(private.id, bob[1])
    assert hidden.code == ErrorKind.NOT_FOUND

    denied = demo_service.update_demo(public.id, DemoUpdate(title="Mine"), bob[1])
    assert denied.code == ErrorKind.FORBIDDEN
    assert demo_service.delete_demo(public.id, bob[1]).code == ErrorKind.FORBIDDEN


def test_update_demo(demo_service, alice):
    demo = _create(demo_service, alice[1])
    other = _create(demo_service, alice[1], title="Other")

    updated = demo_service.update_demo(
        demo.id, DemoUpdate(title="Renamed", slug="My Custom Slug"), alice[1]
    ).data
    assert updated.title == "Renamed"
    assert updated.slug == "my-custom-slug"

    assert demo_service.update_demo(demo.id, DemoUpdate(), alice[1]).error == "No fields to update"
    empty = demo_service.update_demo(demo.id, DemoUpdate(title=""), alice[1])
    assert empty.error == "Title cannot be empty"

    clash = demo_service.update_demo(demo.id, DemoUpdate(slug=other.slug), alice[1])
    assert clash.code == ErrorKind.CONFLICT


def test_public_is_never_handed_out_as_a_slug(demo_service, alice):
    demo = _create(demo_service, alice[1], title="Public")
    assert demo.slug == "public-1"
    assert demo_service.get_demo("public-1", alice[1]).data.id == demo.id

    reserved = demo_service.update_demo(demo.id, DemoUpdate(slug="Public"), alice[1])
    assert reserved.code == ErrorKind.VALIDATION
    assert reserved.error == "The slug 'public' is reserved"


def test_create_demo_for_unknown_owner_is_not_reported_as_slug_clash(demo_service, verifier):
    token = verifier.create_access_token({"sub": "deleted-user"})

    result = demo_service.create_demo(DemoCreate(title="Tour"), token)

    assert result.code == ErrorKind.CONFLICT
    assert result.error == "A conflicting record already exists"


def test_duplicate_demo_copies_steps_and_remaps_targets(
    demo_service, step_service, hotspot_service, alice, bob
):
    demo = _create(demo_service, alice[1], is_public=True)
    first = _add_step(step_service, alice[1], demo.id, "First")
    second = _add_step(step_service, alice[1], demo.id, "Second")
    hotspot_service.create_hotspot(
        HotspotCreate(step_id=first.id, x=10, y=10, width=20, height=5, color="#ff0000",
                      target_step_id=second.id),
        alice[1],
    )

    copy = demo_service.duplicate_demo(demo.id, bob[1]).data

    assert copy.title == "Product Tour (Copy)"
    assert copy.is_public is False
    assert copy.user_id == bob[0]
    assert copy.slug == "product-tour-copy"

    full = demo_service.get_demo_with_steps(copy.id, bob[1]).data
    assert [s.title for s in full.steps] == ["First", "Second"]
    assert {s.id for s in full.steps}.isdisjoint({first.id, second.id})
    hotspot = full.steps[0].hotspots[0]
    assert hotspot.target_step_id == full.steps[1].id
    assert full.steps[0].image_url == first.image_url


def test_duplicate_is_always_private_and_gets_fresh_slug(demo_service, alice):
    demo = _create(demo_service, alice[1], is_public=True)

    copy = demo_service.duplicate_demo(demo.id, alice[1]).data

    assert copy.is_public is False
    assert copy.slug == "product-tour-copy"
    again = demo_service.duplicate_demo(demo.id, alice[1]).data
    assert again.slug == "product-tour-copy-1"


def test_duplicate_requires_visibility(demo_service, alice, bob):
    demo = _create(demo_service, alice[1])

    assert demo_service.duplicate_demo(demo.id, bob[1]).code == ErrorKind.NOT_FOUND


def test_delete_demo_cascades_to_steps_and_images(
    demo_service, step_service, hotspot_service, storage, fake_storage, alice
):
    fake_storage.objects["steps/a.png"] = b"png"
    image_url = storage.public_url("steps/a.png")
    demo = _create(demo_service, alice[1])
    step = _add_step(step_service, alice[1], demo.id, "Only", image_url=image_url)
    hotspot = hotspot_service.create_hotspot(
        HotspotCreate(step_id=step.id, x=1, y=1, width=1, height=1, color="#000"), alice[1]
    ).data

    result = demo_service.delete_demo(demo.id, alice[1])

    assert result.data.message == "Demo deleted successfully"
    assert step_service.get_step(step.id).code == ErrorKind.NOT_FOUND
    assert hotspot_service.get_hotspot(hotspot.id).code == ErrorKind.NOT_FOUND
    assert demo_service.get_demo(demo.id, alice[1]).code == ErrorKind.NOT_FOUND
    assert "steps/a.png" not in fake_storage.objects


def test_delete_keeps_images_shared_with_a_copy(
    demo_service, step_service, storage, fake_storage, alice
):
    fake_storage.objects["steps/a.png"] = b"png"
    demo = _create(demo_service, alice[1])
    _add_step(step_service, alice[1], demo.id, "Only", image_url=storage.public_url("steps/a.png"))
    demo_service.duplicate_demo(demo.id, alice[1])

    demo_service.delete_demo(demo.id, alice[1])

    assert "steps/a.png" in fake_storage.objects


def test_steps_count_and_full_view(demo_service, step_service, alice):
    demo = _create(demo_service, alice[1])
    _add_step(step_service, alice[1], demo.id, "B", position=2)
    _add_step(step_service, alice[1], demo.id, "A", position=1)

    summary = demo_service.get_demo_with_steps_count(demo.slug, alice[1]).data
    assert summary.steps_count == 2

    full = demo_service.get_demo_with_steps(demo.slug, alice[1]).data
    assert [s.title for s in full.steps] == ["A", "B"]


def test_list_demos_filters_and_counts(demo_service, alice, bob):
    _create(demo_service, alice[1], title="Checkout flow", description="Pay with card")
    _create(demo_service, alice[1], title="Signup", is_public=True)
    _create(demo_service, alice[1], title="100% coverage")
    _create(demo_service, bob[1], title="Bob's checkout", is_public=True)

    own = demo_service.list_demos(alice[1]).data
    assert own.total == 3

    searched = demo_service.list_demos(alice[1], DemoFilter(search="CHECKOUT")).data
    assert [d.title for d in searched.demos] == ["Checkout flow"]

    by_description = demo_service.list_demos(alice[1], DemoFilter(search="card")).data
    assert by_description.total == 1

    wildcard = demo_service.list_demos(alice[1], DemoFilter(search="%")).data
    assert [d.title for d in wildcard.demos] == ["100% coverage"]

    public_only = demo_service.list_demos(alice[1], DemoFilter(is_public=True)).data
    assert [d.title for d in public_only.demos] == ["Signup"]

    public = demo_service.list_public_demos(DemoFilter(sort_by="title", sort_order="asc")).data
    assert [d.title for d in public.demos] == ["Bob's checkout", "Signup"]

    assert demo_service.list_demos(None).code == ErrorKind.UNAUTHENTICATED


@pytest.mark.parametrize("limit", [1, 3, 4, 7])
def test_pagination_reproduces_the_full_listing(demo_service, alice, limit):
    for i in range(7):
        _create(demo_service, alice[1], title=f"Tour {i % 3}")

    full = demo_service.list_demos(alice[1], DemoFilter(sort_by="title", limit=100)).data

    pages = []
    page = 1
    while True:
        result = demo_service.list_demos(
            alice[1], DemoFilter(sort_by="title", page=page, limit=limit)
        ).data
        assert result.total == 7
        assert result.total_pages == -(-7 // limit)
        if not result.demos:
            break
        pages.extend(result.demos)
        page += 1

    assert [d.id for d in pages] == [d.id for d in full.demos]
    assert len({d.id for d in pages}) == 7
