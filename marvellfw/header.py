# SPDX-License-Identifier: MIT
import re
from enum import Enum

VERSION_OFFSET = 0x120
BUILD_OFFSET   = 0x124
DEVICE_OFFSET  = 0x138

OUTPUT_PREFIX = 'marvell_fw'

class DeviceType(Enum):
    X3310 = 1
    E2010 = 3
    UNKNOWN = None

    @classmethod
    def decode(cls, code):
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self):
        return LABELS[self]

LABELS = {
    DeviceType.X3310: 'x3310',
    DeviceType.E2010: 'e2010',
    DeviceType.UNKNOWN: 'unknw',
}

class HeaderFields:
    """
    Metadata picked out of a payload header while it is being written.

    Offsets are relative to the payload start; `word` is the word as read,
    before it is reordered for output.
    """
    def __init__(self):
        self.version = (0, 0, 0, 0)
        self.build = 0
        self.device = DeviceType.UNKNOWN

    def update(self, offset, word):
        if offset == VERSION_OFFSET:
            self.version = (word >> 8 & 0xff, word & 0xff, word >> 24 & 0xff, word >> 16 & 0xff)
        elif offset == BUILD_OFFSET:
            self.build = (word & 0xff) << 8 | word >> 8 & 0xff
        elif offset == DEVICE_OFFSET:
            self.device = DeviceType.decode(word >> 8 & 0xff)

    def __str__(self):
        v = self.version
        return f'{v[0]}.{v[1]}.{v[2]}.{v[3]} {self.build:04d} {self.device.label}'

def provisional_name(n):
    return f'{OUTPUT_PREFIX}_{n:03d}.bin'

def artifact_name(device, version, build):
    v = version
    return f'{device.label}fw_{v[0]}_{v[1]}_{v[2]}_{v[3]}_{build:04d}.hdr.new'

NAME_RE = re.compile(r'^([a-z0-9]+)fw_(\d+)_(\d+)_(\d+)_(\d+)_(\d{4,})\.hdr\.new$')

def parse_artifact_name(name):
    m = NAME_RE.match(name)
    if not m:
        raise ValueError(f'not a firmware file name: {name!r}')
    label = m.group(1)
    device = next((t for t, l in LABELS.items() if l == label), None)
    if device is None:
        raise ValueError(f'unknown device label {label!r} in {name!r}')
    version = tuple(int(m.group(i)) for i in range(2, 6))
    return device, version, int(m.group(6))
