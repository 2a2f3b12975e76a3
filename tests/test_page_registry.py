import pytest

from backend.app.services.page_registry import NOT_FOUND_PAGE, Page, PageRegistry, default_registry, normalize_path


@pytest.fixture()
def registry() -> PageRegistry:
    return default_registry()


def test_registry_covers_both_portals(registry):
    patterns = {p.pattern for p in registry.pages}
    assert len([p for p in patterns if p.startswith("/candidate/")]) == 8
    assert len([p for p in patterns if p.startswith("/recruiter/")]) == 11
    assert {"/", "/auth"} <= patterns


def test_only_auth_page_is_public(registry):
    public = [p.pattern for p in registry.pages if not p.protected]
    assert public == ["/auth"]


def test_path_parameters_are_captured(registry):
    found = registry.match("/recruiter/job-postings/42/edit")
    assert found.page.name == "recruiter-edit-job-posting"
    assert found.params == {"id": "42"}


def test_literal_segment_beats_parameter():
    registry = PageRegistry([
        Page("/jobs/:id", "job", "Job"),
        Page("/jobs/new", "new-job", "New Job"),
    ])
    assert registry.match("/jobs/new").page.name == "new-job"
    assert registry.match("/jobs/9").page.name == "job"


def test_unknown_path_resolves_to_not_found(registry):
    assert registry.match("/recruiter/job-postings/42") is None
    found = registry.resolve("/nope")
    assert found.page is NOT_FOUND_PAGE
    assert found.page.protected is False


def test_duplicate_registration_rejected(registry):
    with pytest.raises(ValueError):
        registry.register(Page("/auth", "auth-again", "Again", protected=False))


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", "/"),
        ("/", "/"),
        ("candidate/profile", "/candidate/profile"),
        ("/candidate/profile/", "/candidate/profile"),
        ("/candidate/profile?tab=skills", "/candidate/profile"),
        ("///", "/"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected
