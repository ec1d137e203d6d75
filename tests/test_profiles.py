import pytest

from app.core.errors import ForbiddenError, NotFoundError
from app.modules.profiles.projection import IdentityProjection
from app.modules.profiles.schemas import ProfileUpdate
from app.modules.profiles.service import ProfileService


@pytest.fixture
def profiles(fake_supabase, gate):
    projection = IdentityProjection(fake_supabase, gate)
    for user_id, email in [("A1", "alice@x.com"), ("B1", "bob@x.com")]:
        fake_supabase.db.add_user(user_id, email)
        projection.on_principal_created(user_id, email)
    return ProfileService(fake_supabase, gate)


def test_any_principal_can_read_any_profile(profiles):
    assert profiles.get_profile("A1").email == "alice@x.com"
    assert profiles.get_profile("B1").email == "bob@x.com"


def test_lookup_by_email(profiles):
    assert profiles.get_profile_by_email("bob@x.com").id == "B1"
    with pytest.raises(NotFoundError):
        profiles.get_profile_by_email("carol@x.com")


def test_missing_profile_is_not_found(profiles):
    with pytest.raises(NotFoundError):
        profiles.get_profile("Z9")
    assert profiles.find_profile("Z9") is None


def test_owner_updates_display_name(profiles):
    updated = profiles.update_profile("A1", "A1", ProfileUpdate(display_name="Alice"))

    assert updated.display_name == "Alice"
    assert profiles.get_profile("A1").display_name == "Alice"


def test_other_principal_cannot_update(profiles):
    with pytest.raises(ForbiddenError):
        profiles.update_profile("B1", "A1", ProfileUpdate(display_name="Mallory"))
    assert profiles.get_profile("A1").display_name is None


def test_non_owner_gets_forbidden_even_for_missing_profile(profiles):
    with pytest.raises(ForbiddenError):
        profiles.update_profile("B1", "Z9", ProfileUpdate(display_name="x"))


def test_owner_without_profile_gets_not_found(fake_supabase, profiles):
    fake_supabase.db.add_user("C1", "carol@x.com")
    with pytest.raises(NotFoundError):
        profiles.update_profile("C1", "C1", ProfileUpdate(display_name="Carol"))


def test_explicit_null_clears_display_name(profiles):
    profiles.update_profile("A1", "A1", ProfileUpdate(display_name="Alice"))

    cleared = profiles.update_profile("A1", "A1", ProfileUpdate.model_validate({"display_name": None}))

    assert cleared.display_name is None


def test_empty_update_changes_nothing(profiles):
    profiles.update_profile("A1", "A1", ProfileUpdate(display_name="Alice"))

    unchanged = profiles.update_profile("A1", "A1", ProfileUpdate())

    assert unchanged.display_name == "Alice"


def test_update_keeps_created_at(profiles):
    before = profiles.get_profile("A1").created_at
    after = profiles.update_profile("A1", "A1", ProfileUpdate(display_name="Alice")).created_at
    assert before == after
