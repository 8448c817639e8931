"""
Notification preference document stored on the user.

Shape: {email, sms, in_app, types: {<notification type>: {email, sms, in_app}}}.
A channel switched off globally is off for every type.
"""
import copy
from typing import Any, Dict, Optional

from eduwise.core.enums import NotificationChannel, NotificationType

CHANNELS = tuple(c.value for c in NotificationChannel)
TYPES = tuple(t.value for t in NotificationType)


def default_preferences() -> Dict[str, Any]:
    prefs: Dict[str, Any] = {"email": True, "sms": False, "in_app": True, "types": {}}
    for type_ in TYPES:
        prefs["types"][type_] = {"email": True, "sms": False, "in_app": True}
    prefs["types"]["system"]["email"] = False
    return prefs


def apply_channel_cascade(prefs: Dict[str, Any]) -> Dict[str, Any]:
    """Force every per-type switch off where its global channel is off."""
    for channel in CHANNELS:
        if not prefs[channel]:
            for type_prefs in prefs["types"].values():
                type_prefs[channel] = False
    return prefs


def merge_preferences(current: Optional[Dict[str, Any]], changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Overlay a partial update on the stored document (or defaults) and normalize it.
    Unknown types and channels are ignored.
    """
    merged = copy.deepcopy(current) if current else default_preferences()
    defaults = default_preferences()
    for type_ in TYPES:
        merged.setdefault("types", {}).setdefault(type_, dict(defaults["types"][type_]))
    for channel in CHANNELS:
        merged.setdefault(channel, defaults[channel])
        if changes.get(channel) is not None:
            merged[channel] = bool(changes[channel])
    for type_, type_changes in (changes.get("types") or {}).items():
        if type_ not in merged["types"] or not type_changes:
            continue
        for channel in CHANNELS:
            value = type_changes.get(channel)
            if value is not None:
                merged["types"][type_][channel] = bool(value)
    return apply_channel_cascade(merged)


def channel_enabled(prefs: Optional[Dict[str, Any]], type_: str, channel: str) -> bool:
    prefs = merge_preferences(prefs, {})
    return bool(prefs[channel]) and bool(prefs["types"].get(type_, {}).get(channel, False))
