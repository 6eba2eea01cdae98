from portfolio.schemas import Achievement, Mentorship, Personal, Project
from portfolio.utils.media_fallbacks import infer_from_remote_url, project_fallback_image
from portfolio.utils.media_normalizer import (
    normalize_fallback,
    normalize_primary,
    normalize_record,
)
from portfolio.utils.media_paths import (
    MediaNamespace,
    MediaSourceType,
    media_source_description,
    media_source_type,
)

from .utils import blob_url


def test_bare_key_becomes_absolute_blob_url(namespace):
    assert normalize_primary("web-pics/intro-h4F9kLpQ2a.png", namespace) == blob_url(
        "web-pics/intro-h4F9kLpQ2a.png"
    )
    assert normalize_primary("/web-pics/intro.png", namespace) == blob_url("web-pics/intro.png")


def test_blob_url_is_rederived_without_redundant_encoding(namespace):
    value = blob_url("web-pics/my%20intro-h4F9kLpQ2a.png") + "?download=1"
    assert normalize_primary(value, namespace) == blob_url("web-pics/my intro-h4F9kLpQ2a.png")


def test_external_urls_and_local_paths_pass_through(namespace):
    assert normalize_primary("https://cdn.example.com/web-pics/a.png", namespace) == (
        "https://cdn.example.com/web-pics/a.png"
    )
    assert normalize_primary("/accenture.png", namespace) == "/accenture.png"
    assert normalize_primary("", namespace) == ""
    assert normalize_primary(None, namespace) is None


def test_bare_key_without_configured_base_stays_local():
    namespace = MediaNamespace(base_url=None, prefix="web-pics")
    assert normalize_primary("web-pics/a.png", namespace) == "/web-pics/a.png"


def test_normalize_fallback():
    assert normalize_fallback("accenture.png") == "/accenture.png"
    assert normalize_fallback("/accenture.png") == "/accenture.png"
    assert normalize_fallback("https://example.com/a.png") == "https://example.com/a.png"
    assert normalize_fallback(None) is None


def test_project_fallback_prefers_explicit_then_title_then_remote_name():
    assert project_fallback_image(fallback_candidate="x.png", title="E-commerce Store Development") == "/x.png"
    assert project_fallback_image(title="E-commerce Store Development") == "/ecommerce.png"
    assert (
        project_fallback_image(title="Unknown", remote_url=blob_url("web-pics/intro-h4F9kLpQ2a.PNG"))
        == "/intro.png"
    )
    assert project_fallback_image(title="Unknown", remote_url=blob_url("web-pics/cv.pdf")) is None
    assert project_fallback_image() is None


def test_infer_from_remote_url_handles_bare_names():
    assert infer_from_remote_url("intro.jpeg") == "/intro.jpeg"
    assert infer_from_remote_url("") is None
    assert infer_from_remote_url("https://example.com/") is None


def test_normalize_project_infers_fallback_and_keeps_opaque_fields(namespace):
    project = Project.model_validate(
        {
            "title": "Some Project",
            "imageUrl": "web-pics/intro-h4F9kLpQ2a.png",
            "tags": ["a", "b"],
            "experienceKey": 42,
        }
    )

    normalized = normalize_record(project, namespace).to_json()

    assert normalized == {
        "title": "Some Project",
        "imageUrl": blob_url("web-pics/intro-h4F9kLpQ2a.png"),
        "fallbackImageUrl": "/intro.png",
        "tags": ["a", "b"],
        "experienceKey": "42",
    }
    # the input record is left untouched
    assert project.image_url == "web-pics/intro-h4F9kLpQ2a.png"


def test_normalize_does_not_add_absent_fields(namespace):
    achievement = Achievement.model_validate({"title": "Cert", "certificateUrl": "web-pics/c.png"})
    assert normalize_record(achievement, namespace).to_json() == {
        "title": "Cert",
        "certificateUrl": blob_url("web-pics/c.png"),
    }


def test_normalize_mentorship_and_personal(namespace):
    mentorship = Mentorship.model_validate(
        {
            "imageUrl": "web-pics/m.png",
            "fallbackImageUrl": "m.png",
            "fallbackCertificateUrl": "cert.png",
        }
    )
    assert normalize_record(mentorship, namespace).to_json() == {
        "imageUrl": blob_url("web-pics/m.png"),
        "fallbackImageUrl": "/m.png",
        "fallbackCertificateUrl": "/cert.png",
    }

    personal = Personal.model_validate(
        {"profileImageUrl": "web-pics/me.png", "cvLink": "web-pics/cv.pdf"}
    )
    assert normalize_record(personal, namespace).to_json() == {
        "profileImageUrl": blob_url("web-pics/me.png"),
        "cvLink": "web-pics/cv.pdf",
    }


def test_media_source_type(namespace):
    assert media_source_type(blob_url("web-pics/a.png"), namespace) is MediaSourceType.blob
    assert media_source_type("https://other.public.blob.vercel-storage.com/a.png", namespace) is (
        MediaSourceType.blob
    )
    assert media_source_type("web-pics/a.png", namespace) is MediaSourceType.blob
    assert media_source_type("/a.png", namespace) is MediaSourceType.fallback
    assert media_source_type("a.png", namespace) is MediaSourceType.fallback
    assert media_source_type("https://example.com/a.png", namespace) is MediaSourceType.external
    assert media_source_type("data:image/png;base64,AAA", namespace) is MediaSourceType.external
    assert media_source_type("  ", namespace) is MediaSourceType.unknown
    assert media_source_description(MediaSourceType.fallback) == "Local Fallback"
