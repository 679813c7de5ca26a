#! /usr/bin/env python3
'''
RomHeader: shared pieces for reading cartridge ROM headers
'''

# standard imports
from collections import namedtuple
from os import environ
from struct import Struct
import sys
import re

# RomHeader constants
DEBUG_ENV_VAR = 'ROMID_DEBUG'
WHITESPACE_RUN = re.compile(r'\s{2,}')
TRAILING_PADDING = ' \t\n\r\x0b\x0c\x00'

# debugging is off unless the environment (or RomID --debug) turns it on
_debug = environ.get(DEBUG_ENV_VAR, '').strip() not in {'', '0'}

# base class for every failure while decoding a ROM
class RomError(Exception):
    pass

# file length doesn't match any known dump layout (e.g. bad copier header)
class MalformedFileLengthError(RomError):
    pass

# no candidate header location checked out
class HeaderNotFoundError(RomError):
    pass

# fewer bytes available than a header layout needs
class TruncatedBufferError(RomError):
    pass

# platform label or platform that we don't know how to decode
class UnsupportedPlatformError(RomError):
    pass

# print a log message
def print_log(message='', end='\n', file=sys.stderr):
    print(message, end=end, file=file); file.flush()

# turn debug messages on or off
def set_debug(enabled):
    global _debug
    _debug = bool(enabled)

# check whether debug messages are on
def debug_enabled():
    return _debug

# print a debug message (only if debugging is on)
def print_debug(message):
    if _debug:
        print_log("[debug] %s" % message, file=sys.stderr)

# storage sizes derived from a single value
StorageSize = namedtuple('StorageSize', ['bytes', 'kilobytes', 'kilobits'])

# header sizes are often stored in kilobytes, so "8" is 8 kB, or 8192 bytes
def kilobytes_to_storage(kilobytes):
    return StorageSize(bytes=kilobytes * 1024, kilobytes=kilobytes, kilobits=kilobytes * 8)

# same as kilobytes_to_storage, but from a byte count
def bytes_to_storage(num_bytes):
    return StorageSize(bytes=num_bytes, kilobytes=num_bytes // 1024, kilobits=num_bytes // 128)

# look up the description of a header code, or label it unknown
def lookup_description(code, table):
    if code in table:
        return table[code]
    if isinstance(code, int):
        return "Unknown (0x%02x)" % code
    return "Unknown ('%s')" % code

# decode SNES header text (EUC-JP, trailing spaces stripped)
def decode_snes_text(data):
    return data.decode('euc_jp', errors='ignore').rstrip()

# decode Genesis header text (Shift-JIS) without touching the spacing
def decode_genesis_raw(data):
    return data.decode('cp932', errors='ignore')

# decode Genesis header text (Shift-JIS); fields are space-padded, and some have internal padding too
def decode_genesis_text(data):
    return WHITESPACE_RUN.sub(' ', decode_genesis_raw(data).rstrip())

# decode NDS header text (ASCII, padded with spaces or zero bytes)
def decode_nds_text(data):
    return data.decode('ascii', errors='ignore').rstrip(TRAILING_PADDING)

# a fixed, big-endian header layout: fields is a list of (name, struct code, converter) tuples
class HeaderLayout:
    def __init__(self, name, fields):
        self.name = name
        self.fields = [(field_name, converter) for field_name, code, converter in fields if field_name is not None]
        self.struct = Struct('>' + ''.join(code for field_name, code, converter in fields))
        self.size = self.struct.size
        self.record = namedtuple(name, [field_name for field_name, converter in self.fields])

    # parse the header starting at `offset` in `buffer`
    def read(self, buffer, offset=0):
        available = len(buffer) - offset
        if offset < 0 or available < self.size:
            raise TruncatedBufferError("%s needs %d bytes at offset %d, but only %d available" % (self.name, self.size, offset, max(available, 0)))
        values = self.struct.unpack_from(buffer, offset)
        return self.record(*[value if converter is None else converter(value) for (field_name, converter), value in zip(self.fields, values)])

# total size of a byte source (bytes-like object or seekable binary file)
def source_size(source):
    if hasattr(source, 'read'):
        return source.seek(0, 2)
    return len(source)

# read up to `size` bytes at `offset` from a byte source (may come back short near the end)
def read_window(source, offset, size):
    if hasattr(source, 'read'):
        source.seek(offset)
        return source.read(size)
    return bytes(source[offset : offset + size])

# convert a decoded ROM (nested namedtuples / tuples) into plain dicts and lists
def as_record(value):
    if hasattr(value, '_asdict'):
        return {k: as_record(v) for k, v in value._asdict().items()}
    if isinstance(value, (list, tuple)):
        return [as_record(v) for v in value]
    return value
