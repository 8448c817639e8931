from eduwise.api.v1.notifications.preferences import (
    TYPES,
    channel_enabled,
    default_preferences,
    merge_preferences,
)


def test_defaults_cover_every_type() -> None:
    prefs = default_preferences()
    assert set(prefs["types"]) == set(TYPES)
    assert prefs["email"] is True
    assert prefs["sms"] is False
    assert prefs["types"]["system"]["email"] is False
    assert prefs["types"]["grade"] == {"email": True, "sms": False, "in_app": True}


def test_global_channel_off_cascades_to_types() -> None:
    prefs = merge_preferences(None, {"email": False})
    assert prefs["email"] is False
    assert all(not t["email"] for t in prefs["types"].values())
    assert prefs["types"]["grade"]["in_app"] is True


def test_type_switch_cannot_override_disabled_channel() -> None:
    prefs = merge_preferences(None, {"sms": False, "types": {"attendance": {"sms": True}}})
    assert prefs["types"]["attendance"]["sms"] is False


def test_partial_update_keeps_other_settings() -> None:
    current = merge_preferences(None, {"types": {"event": {"in_app": False}}})
    updated = merge_preferences(current, {"types": {"grade": {"email": False}}})
    assert updated["types"]["event"]["in_app"] is False
    assert updated["types"]["grade"]["email"] is False
    assert updated["types"]["grade"]["in_app"] is True


def test_unknown_types_ignored() -> None:
    prefs = merge_preferences(None, {"types": {"payroll": {"email": True}}})
    assert "payroll" not in prefs["types"]


def test_channel_enabled() -> None:
    assert channel_enabled(None, "grade", "in_app") is True
    assert channel_enabled(None, "system", "email") is False
    muted = merge_preferences(None, {"in_app": False})
    assert channel_enabled(muted, "announcement", "in_app") is False
