import pytest

from portfolio.schemas import EntityKind, PortfolioPayload, Project
from portfolio.services.blob_inventory import BlobInventory
from portfolio.services.media_repair import (
    repair_portfolio_media,
    repair_record,
    resolve_reference,
)
from portfolio.utils.media_normalizer import normalize_record

from .utils import blob_url


@pytest.fixture
def inventory() -> BlobInventory:
    inventory = BlobInventory("web-pics")
    for pathname in (
        "web-pics/intro-h4F9kLpQ2a.png",
        "web-pics/my photo-Ab12Cd34Ef.jpg",
        "web-pics/profile-Zx98Yw76Vu.png",
        "web-pics/cv-k3J9sLx0Qa.pdf",
    ):
        inventory.register(pathname)
    return inventory


def test_stale_suffix_is_rewritten_to_live_blob(inventory, namespace):
    value, changed = resolve_reference("web-pics/intro-OLDHASH99ab.png", inventory, namespace)

    assert changed is True
    assert value == blob_url("web-pics/intro-h4F9kLpQ2a.png")


def test_stale_absolute_url_is_rewritten(inventory, namespace):
    value, changed = resolve_reference(
        blob_url("web-pics/intro-OLDHASH99ab.png"), inventory, namespace
    )

    assert changed is True
    assert value == blob_url("web-pics/intro-h4F9kLpQ2a.png")


def test_percent_encoded_reference_matches_decoded_blob(inventory, namespace):
    value, changed = resolve_reference(
        blob_url("web-pics/my%20photo-OLDxx11yy22.jpg"), inventory, namespace
    )

    assert changed is True
    assert value == blob_url("web-pics/my photo-Ab12Cd34Ef.jpg")


@pytest.mark.parametrize(
    "value",
    [
        blob_url("web-pics/intro-h4F9kLpQ2a.png"),
        "web-pics/intro-h4F9kLpQ2a.png",
        "/web-pics/intro-h4F9kLpQ2a.png",
        blob_url("web-pics/my%20photo-Ab12Cd34Ef.jpg"),
    ],
)
def test_references_already_pointing_at_live_blob_are_untouched(value, inventory, namespace):
    assert resolve_reference(value, inventory, namespace) == (value, False)


@pytest.mark.parametrize(
    "value",
    [
        "web-pics/missing-Ab12Cd34Ef.png",
        "https://cdn.example.com/elsewhere.png",
        "/intro.png",
        "",
        None,
        42,
    ],
)
def test_unresolvable_references_are_untouched(value, inventory, namespace):
    assert resolve_reference(value, inventory, namespace) == (value, False)


def test_empty_inventory_changes_nothing(namespace):
    assert resolve_reference(
        "web-pics/intro-OLDHASH99ab.png", BlobInventory("web-pics"), namespace
    ) == ("web-pics/intro-OLDHASH99ab.png", False)


def test_plain_mapping_inventory_is_supported(namespace):
    value, changed = resolve_reference(
        "web-pics/intro-OLDHASH99ab.png",
        {"intro.png": "web-pics/intro-h4F9kLpQ2a.png"},
        namespace,
    )

    assert changed is True
    assert value == blob_url("web-pics/intro-h4F9kLpQ2a.png")


def test_repair_record_returns_copy_and_changes(inventory, namespace):
    project = Project.model_validate(
        {
            "title": "Intro",
            "imageUrl": "web-pics/intro-OLDHASH99ab.png",
            "fallbackImageUrl": "/intro.png",
        }
    )

    updated, changes = repair_record(project, inventory, namespace)

    assert updated is not project
    assert updated.image_url == blob_url("web-pics/intro-h4F9kLpQ2a.png")
    assert updated.fallback_image_url == "/intro.png"
    assert project.image_url == "web-pics/intro-OLDHASH99ab.png"
    assert changes == [
        ("image_url", "web-pics/intro-OLDHASH99ab.png", blob_url("web-pics/intro-h4F9kLpQ2a.png"))
    ]

    same, no_changes = repair_record(updated, inventory, namespace)
    assert same is updated
    assert no_changes == []


def _payload() -> PortfolioPayload:
    return PortfolioPayload.from_raw(
        personal={
            "profileImageUrl": "web-pics/profile-OLDxx11yy22.png",
            "cvLink": "web-pics/cv-k3J9sLx0Qa.pdf",
            "introText": "hello",
        },
        projects=[
            {"title": "Intro", "imageUrl": "web-pics/intro-OLDHASH99ab.png", "tags": ["a"]},
            {"title": "Static", "imageUrl": "/ecommerce.png"},
        ],
        experiences=[{"title": "Job", "icon": "FaCode"}],
        skills={"Cloud": ["Azure"]},
        achievements=[{"title": "Cert", "certificateUrl": "/azure.png"}],
        mentorship=[],
    )


def test_repair_portfolio_reports_changed_groups_and_rewrites(inventory, namespace):
    result = repair_portfolio_media(_payload(), inventory, namespace)

    assert result.changed is True
    assert result.changed_groups == [EntityKind.personal, EntityKind.projects]

    payload = result.payload.to_json()
    assert payload["personal"] == {
        "profileImageUrl": blob_url("web-pics/profile-Zx98Yw76Vu.png"),
        "cvLink": "web-pics/cv-k3J9sLx0Qa.pdf",
        "introText": "hello",
    }
    assert payload["projects"][0] == {
        "title": "Intro",
        "imageUrl": blob_url("web-pics/intro-h4F9kLpQ2a.png"),
        "tags": ["a"],
    }
    assert payload["projects"][1] == {"title": "Static", "imageUrl": "/ecommerce.png"}
    assert payload["experiences"] == [{"title": "Job", "icon": "FaCode"}]
    assert payload["skills"] == {"Cloud": ["Azure"]}

    assert [(r.group, r.label, r.field) for r in result.rewrites] == [
        (EntityKind.personal, "personal", "profileImageUrl"),
        (EntityKind.projects, "Intro", "imageUrl"),
    ]


def test_repair_is_idempotent(inventory, namespace):
    first = repair_portfolio_media(_payload(), inventory, namespace)
    second = repair_portfolio_media(first.payload, inventory, namespace)

    assert second.changed is False
    assert second.rewrites == []
    assert second.payload.to_json() == first.payload.to_json()


@pytest.mark.parametrize(
    "stored",
    [
        "web-pics/intro-h4F9kLpQ2a.png",
        blob_url("web-pics/intro-h4F9kLpQ2a.png"),
        blob_url("web-pics/my%20photo-Ab12Cd34Ef.jpg"),
        "web-pics/my%20photo-Ab12Cd34Ef.jpg",
    ],
)
def test_normalized_references_need_no_repair(stored, inventory, namespace):
    project = normalize_record(Project.model_validate({"imageUrl": stored}), namespace)

    _, changes = repair_record(project, inventory, namespace)

    assert changes == []


def test_missing_personal_is_not_a_change(inventory, namespace):
    result = repair_portfolio_media(PortfolioPayload(), inventory, namespace)

    assert result.personal.data is None
    assert result.changed is False


@pytest.mark.parametrize(
    "stored",
    [
        "web-pics/my photo-Ab12Cd34Ef.jpg",
        "/web-pics/my%20photo-Ab12Cd34Ef.jpg",
        blob_url("web-pics/my photo-Ab12Cd34Ef.jpg"),
        blob_url("web-pics/my%20photo-Ab12Cd34Ef.jpg"),
        "web-pics/my%20photo-OLDxx11yy22.jpg",
        blob_url("web-pics/my%20photo-OLDxx11yy22.jpg"),
        blob_url("web-pics/my photo-OLDxx11yy22.jpg") + "?v=2",
    ],
)
def test_every_reference_form_converges_to_one_url(stored, inventory, namespace):
    project = normalize_record(Project.model_validate({"imageUrl": stored}), namespace)

    repaired, _ = repair_record(project, inventory, namespace)
    again, changes = repair_record(repaired, inventory, namespace)

    assert repaired.image_url == blob_url("web-pics/my photo-Ab12Cd34Ef.jpg")
    assert again.image_url == repaired.image_url
    assert changes == []
