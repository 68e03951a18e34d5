"""设备信息采集 -- 当前进程所在平台的快照"""

import locale
import platform

from .models import DeviceInfo

UNKNOWN = "Unknown"


def _os_version() -> str:
    system = platform.system()
    if system == "Darwin":
        mac_version = platform.mac_ver()[0]
        return f"macOS {mac_version}" if mac_version else "macOS"
    if system:
        return f"{system} {platform.release()}".strip()
    return UNKNOWN


def _locale_identifier() -> str:
    try:
        identifier = locale.getlocale()[0]
    except ValueError:
        identifier = None
    return identifier or UNKNOWN


def collect_device_info(
    app_version: str = UNKNOWN,
    build_number: str = UNKNOWN,
) -> DeviceInfo:
    """采集当前设备信息

    Args:
        app_version: 宿主应用版本号
        build_number: 宿主应用构建号
    """
    return DeviceInfo(
        model=platform.machine() or UNKNOWN,
        os_version=_os_version(),
        app_version=app_version,
        build_number=build_number,
        locale=_locale_identifier(),
    )
