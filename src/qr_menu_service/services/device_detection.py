"""Coarse device and browser classification from User-Agent strings."""

import re
from dataclasses import dataclass

_MOBILE = re.compile(r"Mobile|Android|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.I)
_TABLET = re.compile(r"iPad|Tablet|PlayBook|Silk|Android(?!.*Mobile)", re.I)
_ANALYTICS_MOBILE = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.I)

# Checked in order; the first match wins
_ANDROID_VENDORS = [("Samsung", "Samsung"), ("LG", "LG"), ("HTC", "HTC"), ("Sony", "Sony")]
_BROWSERS = [
    (re.compile(r"Chrome", re.I), "Chrome"),
    (re.compile(r"Firefox", re.I), "Firefox"),
    (re.compile(r"Safari", re.I), "Safari"),
    (re.compile(r"Edge", re.I), "Edge"),
    (re.compile(r"Opera|OPR", re.I), "Opera"),
    (re.compile(r"MSIE|Trident", re.I), "Internet Explorer"),
]


@dataclass
class DeviceInfo:
    """Device classification for a single view.

    Attributes:
        device_type: mobile, tablet, desktop or unknown
        vendor: Device vendor (Apple, Samsung, Microsoft, ...) or unknown
        browser_name: Browser family or unknown
    """

    device_type: str = "unknown"
    vendor: str = "unknown"
    browser_name: str = "unknown"


def detect_device(user_agent: str) -> DeviceInfo:
    """Classify the device, vendor and browser behind a User-Agent.

    Browser detection is order sensitive: Chrome user agents also mention
    Safari, so Chrome is checked first.

    Args:
        user_agent: Raw User-Agent header

    Returns:
        DeviceInfo: Classification; every field falls back to 'unknown'
    """
    if not user_agent:
        return DeviceInfo()

    info = DeviceInfo()

    if _MOBILE.search(user_agent):
        info.device_type = "tablet" if _TABLET.search(user_agent) else "mobile"
    else:
        info.device_type = "desktop"

    if re.search(r"iPhone|iPad|iPod", user_agent, re.I):
        info.vendor = "Apple"
    elif re.search(r"Android", user_agent, re.I):
        info.vendor = "Android"
        for marker, vendor in _ANDROID_VENDORS:
            if re.search(marker, user_agent, re.I):
                info.vendor = vendor
                break
    elif re.search(r"Windows", user_agent, re.I):
        info.vendor = "Microsoft"
    elif re.search(r"Macintosh", user_agent, re.I):
        info.vendor = "Apple"
    elif re.search(r"Linux", user_agent, re.I):
        info.vendor = "Linux"

    for pattern, name in _BROWSERS:
        if pattern.search(user_agent):
            info.browser_name = name
            break

    return info


def classify_device_type(user_agent: str) -> str:
    """Device class used when aggregating analytics.

    Any mobile-family marker (including iPad) counts as mobile here.
    """
    if not user_agent:
        return "unknown"
    if _ANALYTICS_MOBILE.search(user_agent):
        return "mobile"
    if _TABLET.search(user_agent):
        return "tablet"
    return "desktop"
