from datetime import datetime, timezone
from typing import Dict, Any, Optional

SUPPORT_CHANNELS = ("Chat", "Email", "Phone", "Social", "Other")


def get_nested_value(data: Dict[str, Any], keys: list) -> Any:
    """Walks `data` through `keys`, returning None at the first missing key."""
    current = data
    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return None
    return current


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_int(value: Any) -> Optional[int]:
    """Integer value of `value` if it is an int or a numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def detect_support_channel(channel: Optional[str]) -> str:
    """
    Normalizes a Dixa channel name to the Voyado supportChannel enum.

    Returns:
        'Chat', 'Email', 'Phone', 'Social' or 'Other'
    """
    channel_lower = (channel or '').lower()

    if not channel_lower:
        return 'Other'
    elif any(kw in channel_lower for kw in ('facebook', 'messenger', 'instagram', 'whatsapp', 'twitter', 'social')):
        return 'Social'
    elif 'chat' in channel_lower:
        return 'Chat'
    elif 'mail' in channel_lower:
        return 'Email'
    elif any(kw in channel_lower for kw in ('voice', 'phone', 'call', 'sms')):
        return 'Phone'
    else:
        return 'Other'
