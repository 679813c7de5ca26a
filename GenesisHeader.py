#! /usr/bin/env python3
'''
GenesisHeader: decode the header of a Sega Genesis / Mega Drive ROM
'''

# standard imports
from collections import namedtuple

# non-standard imports
from RomHeader import HeaderLayout
from RomHeader import as_record, decode_genesis_raw, decode_genesis_text, lookup_description, print_debug, read_window

# Genesis constants
GENESIS_PLATFORM = 'Genesis'
GENESIS_HEADER_START = 0x100
GENESIS_HEADER_BUFSIZE = 0x100
GENESIS_DEVICE_SUPPORT = {'J': '3-button controller', '6': '6-button controller', '0': 'Master System controller', 'A': 'Analog joystick', '4': 'Multitap', 'G': 'Lightgun', 'L': 'Activator', 'M': 'Mouse', 'B': 'Trackball', 'T': 'Tablet', 'V': 'Paddle', 'K': 'Keyboard', 'R': 'RS-232 (Serial)', 'P': 'Printer', 'C': 'CD-ROM (Sega CD)', 'F': 'Floppy drive', 'D': 'Download'}
GENESIS_REGIONS = ['Japan', 'Americas', 'Europe'] # output order
GENESIS_REGION_LETTERS = {'J': 'Japan', 'U': 'Americas', 'E': 'Europe'}
GENESIS_REGION_BITS = {'Japan': 0x01, 'Americas': 0x04, 'Europe': 0x08} # 0x02 is unused
GENESIS_EUROPE_ONLY = {' E ', 'E  '}
GENESIS_SOFTWARE_TYPES = {'GM': 'Game', 'AI': 'Aid', 'OS': 'Boot ROM (TMSS)', 'BR': 'Boot ROM (Sega CD)'}
MONTHS_3LET = ['JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN', 'JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC']
HEX_DIGITS = '0123456789ABCDEF'

# Genesis header layout: https://plutiedev.com/rom-header
GENESIS_HEADER_LAYOUT = HeaderLayout('GenesisRomHeader', [
    ('system_type',         '16s', decode_genesis_text),
    (None,                  '3x',  None),                # "(C)"
    ('publisher',           '4s',  decode_genesis_text),
    (None,                  '1x',  None),
    ('release_year',        '4s',  decode_genesis_text),
    (None,                  '1x',  None),
    ('release_month',       '3s',  decode_genesis_text),
    ('game_title_domestic', '48s', decode_genesis_text),
    ('game_title_overseas', '48s', decode_genesis_text),
    ('software_type',       '2s',  decode_genesis_text),
    (None,                  '1x',  None),
    ('serial_number',       '8s',  decode_genesis_text),
    (None,                  '1x',  None),                # "-"
    ('revision',            '2s',  decode_genesis_text),
    ('checksum',            'H',   None),
    ('supported_devices',   '16s', decode_genesis_text),
    ('rom_start_address',   'I',   None),
    ('rom_end_address',     'I',   None),
    ('ram_start_address',   'I',   None),
    ('ram_end_address',     'I',   None),
    ('extra_memory',        '12s', None),
    ('modem_support',       '12s', decode_genesis_text),
    (None,                  '40x', None),
    ('supported_regions',   '3s',  decode_genesis_raw),  # keep the spaces: they tell the old and new formats apart
])
GenesisRomHeader = GENESIS_HEADER_LAYOUT.record

# decoded Genesis ROM
SoftwareTitle = namedtuple('SoftwareTitle', ['domestic', 'overseas'])
ReleaseDate = namedtuple('ReleaseDate', ['year', 'month'])
class GenesisRom(namedtuple('GenesisRom', ['system_type', 'publisher', 'software_title', 'software_type', 'serial_number', 'revision', 'release_date', 'supported_devices', 'supported_regions', 'checksum', 'rom_range', 'ram_range'])):
    __slots__ = ()
    platform = GENESIS_PLATFORM

    def describe(self):
        return as_record(self)

# "old" region format: up to 3 chars in any order from J, U, E
def old_region_code(codes):
    found = {GENESIS_REGION_LETTERS[c] for c in codes if c in GENESIS_REGION_LETTERS}
    return tuple(region for region in GENESIS_REGIONS if region in found)

# "new" region format: a single hex digit used as a bitmask
def new_region_code(code):
    return tuple(region for region in GENESIS_REGIONS if code & GENESIS_REGION_BITS[region])

# list of regions supported by the ROM (either format)
def supported_regions(codes):
    # old Europe-only marker ("E  " would otherwise read as the bitmask 0xE)
    if codes in GENESIS_EUROPE_ONLY:
        return ('Europe',)
    if len(codes) != 0 and codes[0] in HEX_DIGITS:
        return new_region_code(HEX_DIGITS.index(codes[0]))
    return old_region_code(codes)

# list of devices supported by the ROM (unknown chars are filler)
def supported_devices(codes):
    return tuple(GENESIS_DEVICE_SUPPORT[c] for c in codes if c in GENESIS_DEVICE_SUPPORT)

# describe the software type
def software_type(code):
    return lookup_description(code, GENESIS_SOFTWARE_TYPES)

# release month as 1-12 (0 if unknown)
def release_month(month):
    if month in MONTHS_3LET:
        return MONTHS_3LET.index(month) + 1
    return 0

# release year (0 if unknown)
def release_year(year):
    if len(year) == 4 and year.isdigit():
        return int(year)
    return 0

# build the decoded ROM from a parsed header
def rom_from_header(header):
    return GenesisRom(
        system_type=header.system_type,
        publisher=header.publisher,
        software_title=SoftwareTitle(domestic=header.game_title_domestic, overseas=header.game_title_overseas),
        software_type=software_type(header.software_type),
        serial_number=header.serial_number,
        revision=header.revision,
        release_date=ReleaseDate(year=release_year(header.release_year), month=release_month(header.release_month)),
        supported_devices=supported_devices(header.supported_devices),
        supported_regions=supported_regions(header.supported_regions),
        checksum='0x%04x' % header.checksum,
        rom_range='0x%08x-0x%08x' % (header.rom_start_address, header.rom_end_address),
        ram_range='0x%08x-0x%08x' % (header.ram_start_address, header.ram_end_address),
    )

# decode a Genesis ROM from bytes or a seekable binary file (the size isn't stored in the header)
def decode_rom(source, size=None):
    buffer = read_window(source, GENESIS_HEADER_START, GENESIS_HEADER_BUFSIZE)
    print_debug("Read header bytes: %s" % buffer.hex())
    header = GENESIS_HEADER_LAYOUT.read(buffer)
    print_debug("Read ROM header: %s" % (header,))
    return rom_from_header(header)
