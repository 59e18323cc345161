from __future__ import annotations


__copyright__ = "Copyright (C) 2026 cloffload contributors"

__license__ = """
Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
THE SOFTWARE.
"""

import logging

import pyopencl as cl

from cloffload.errors import NoDeviceAvailable


logger = logging.getLogger(__name__)


def describe_device(device: cl.Device) -> str:
    return "'{}' on '{}' ({})".format(
            device.name.strip(),
            device.platform.name.strip(),
            cl.device_type.to_string(device.type))


def find_platform(identifier: str | None = None) -> cl.Platform:
    """Return the platform with index or name/vendor substring *identifier*,
    or the first platform if *identifier* is *None*.
    """
    try:
        platforms = cl.get_platforms()
    except cl.Error as err:
        # With the cl_khr_icd extension, clGetPlatformIDs fails if no
        # platform is available.
        raise NoDeviceAvailable.from_cl_error(
                "no OpenCL platforms available to the ICD loader", err) from err

    if not platforms:
        raise NoDeviceAvailable("no OpenCL platforms found")

    if identifier is None:
        return platforms[0]

    try:
        num = int(identifier)
    except ValueError:
        pass
    else:
        if 0 <= num < len(platforms):
            return platforms[num]
        raise NoDeviceAvailable(
                f"platform index {num} out of range "
                f"({len(platforms)} platform(s) available)")

    for platform in platforms:
        if identifier.lower() in (platform.name + " " + platform.vendor).lower():
            return platform

    raise NoDeviceAvailable(f"platform '{identifier}' not found")


def _get_devices(platform: cl.Platform, dev_type: int) -> list[cl.Device]:
    type_name = cl.device_type.to_string(dev_type)
    try:
        devices = platform.get_devices(device_type=dev_type)
    except cl.Error as err:
        # most ICDs report DEVICE_NOT_FOUND instead of returning nothing
        logger.debug("enumerating %s devices on '%s' failed: %s",
                type_name, platform.name, err)
        return []

    logger.debug("found %d %s device(s) on '%s'",
            len(devices), type_name, platform.name)
    return devices


def select_device(platform: cl.Platform | str | None = None,
        preferred: int = cl.device_type.GPU,
        fallback: int = cl.device_type.CPU) -> cl.Device:
    """Pick one device, preferring the *preferred* device class.

    If no device of class *preferred* exists on *platform* (or enumerating
    them fails), the first device of class *fallback* is returned instead.
    The fallback is logged, not raised.

    :arg platform: a :class:`pyopencl.Platform`, or an identifier as
        understood by :func:`find_platform`.
    :raises NoDeviceAvailable: if neither class yields a device.
    """
    if platform is None or isinstance(platform, str):
        platform = find_platform(platform)

    devices = _get_devices(platform, preferred)
    if not devices:
        logger.info("no %s device on '%s', falling back to %s",
                cl.device_type.to_string(preferred), platform.name.strip(),
                cl.device_type.to_string(fallback))
        devices = _get_devices(platform, fallback)

    if not devices:
        raise NoDeviceAvailable(
                "no {} or {} device found on platform '{}'".format(
                    cl.device_type.to_string(preferred),
                    cl.device_type.to_string(fallback),
                    platform.name.strip()))

    device = devices[0]
    logger.info("selected device %s", describe_device(device))
    return device
