#! /usr/bin/env python3
'''
SNESHeader: find and decode the internal header of a SNES / Super Famicom ROM
'''

# standard imports
from collections import namedtuple

# non-standard imports
from RomHeader import HeaderLayout, HeaderNotFoundError, MalformedFileLengthError, TruncatedBufferError
from RomHeader import as_record, decode_snes_text, kilobytes_to_storage, lookup_description, print_debug, read_window, source_size

# SNES constants
SNES_PLATFORM = 'SNES'
SNES_COPIER_BLOCK_SIZE = 1024
SNES_COPIER_HEADER_SIZE = 512
SNES_LOROM_HEADER_START = 0x7FB0
SNES_HIROM_HEADER_START = 0xFFB0
SNES_HEADER_TYPES = [('LoROM', SNES_LOROM_HEADER_START), ('HiROM', SNES_HIROM_HEADER_START)] # list instead of dict to try in order
SNES_FIXED_VALUE = bytes(7)
SNES_MAP_MODES = {0x20: '2.68MHz LoROM', 0x21: '2.68MHz HiROM', 0x23: 'SA-1', 0x25: '2.68MHz ExHiROM', 0x30: '3.58MHz LoROM', 0x31: '3.58MHz HiROM', 0x35: '3.58MHz ExHiROM'}
SNES_CARTRIDGE_TYPES = {0x00: 'ROM only', 0x01: 'ROM and RAM', 0x02: 'ROM, RAM and battery', 0x33: 'ROM and SA-1', 0x34: 'ROM, SA-1 and RAM', 0x35: 'ROM, SA-1, RAM and battery'}
SNES_DESTINATION_CODES = {0x00: 'Japan', 0x01: 'North America', 0x02: 'Europe', 0x03: 'Nordic', 0x04: 'Finland', 0x05: 'Denmark', 0x06: 'France', 0x07: 'Netherlands', 0x08: 'Spain', 0x09: 'Germany', 0x0A: 'Italy', 0x0B: 'China', 0x0C: 'Indonesia', 0x0D: 'Korea', 0x0F: 'Canada', 0x10: 'Brazil', 0x11: 'Australia'}

# SNES header layout: https://snes.nesdev.org/wiki/ROM_header
SNES_HEADER_LAYOUT = HeaderLayout('SNESRomHeader', [
    ('maker_code',         '2s',  None),
    ('game_code',          '4s',  None),
    ('fixed_value',        '7s',  None), # should be all 0x00
    ('expansion_ram_size', 'B',   None),
    ('special_version',    'B',   None),
    ('cartridge_subtype',  'B',   None),
    ('title',              '21s', decode_snes_text),
    ('map_mode',           'B',   None),
    ('cartridge_type',     'B',   None),
    ('rom_size',           'B',   None), # 2^n kilobytes
    ('sram_size',          'B',   None), # 2^n kilobytes
    ('destination_code',   'B',   None),
    ('fixed_value_2',      'B',   None), # should be 0x33
    ('version',            'B',   None),
    ('complement_check',   'H',   None),
    ('checksum',           'H',   None),
])
SNES_HEADER_SIZE = SNES_HEADER_LAYOUT.size
SNESRomHeader = SNES_HEADER_LAYOUT.record

# decoded SNES ROM
class SNESRom(namedtuple('SNESRom', ['title', 'map_mode', 'cartridge_type', 'target_market', 'header_type', 'has_copier_header', 'version', 'checksum_ok', 'rom_size', 'sram_size'])):
    __slots__ = ()
    platform = SNES_PLATFORM

    def describe(self):
        return as_record(self)

# copier tools (SMC/SWC) prepend a 512-byte block: https://snes.nesdev.org/wiki/ROM_file_formats#Detecting_Headered_ROM
def copier_header_offset(size):
    remainder = size % SNES_COPIER_BLOCK_SIZE
    if remainder == 0:
        print_debug("No copier header present")
        return 0
    elif remainder == SNES_COPIER_HEADER_SIZE:
        print_debug("Copier header present")
        return SNES_COPIER_HEADER_SIZE
    raise MalformedFileLengthError("Invalid SNES ROM size %d (size mod %d is %d)" % (size, SNES_COPIER_BLOCK_SIZE, remainder))

# Determines if the parsed header appears legitimate. The fixed run of zero bytes only rules out
# the wrong spot most of the time, so the ROM size stored in the header must also match the real size.
def header_checks_out(header, real_size):
    if header.fixed_value != SNES_FIXED_VALUE:
        print_debug("fixed value was %s" % header.fixed_value.hex())
        return False
    calculated_size = 2 ** header.rom_size * 1024
    if calculated_size != real_size:
        print_debug("calculated size of %d does not match real size %d" % (calculated_size, real_size))
        return False
    return True

# find the ROM header; read both candidate spots at once to avoid reading the file twice
def find_rom_header(source, size, offset):
    real_size = size - offset
    window = read_window(source, offset + SNES_LOROM_HEADER_START, SNES_HIROM_HEADER_START - SNES_LOROM_HEADER_START + SNES_HEADER_SIZE)
    num_read = 0
    for header_type, header_start in SNES_HEADER_TYPES:
        try:
            header = SNES_HEADER_LAYOUT.read(window, header_start - SNES_LOROM_HEADER_START)
        except TruncatedBufferError as e:
            print_debug("Not enough data for a %s header: %s" % (header_type, e))
            continue
        num_read += 1
        if header_checks_out(header, real_size):
            return header, header_type
        print_debug("Does not appear to be a %s: %s" % (header_type, header))
    if num_read == 0:
        raise TruncatedBufferError("SNES ROM too small to contain a header (%d bytes)" % real_size)
    raise HeaderNotFoundError("Could not detect a valid header. This may not be a valid SNES ROM.")

# build the decoded ROM from a validated header
def rom_from_header(header, header_type, has_copier_header):
    return SNESRom(
        title=header.title,
        map_mode=lookup_description(header.map_mode, SNES_MAP_MODES),
        cartridge_type=lookup_description(header.cartridge_type, SNES_CARTRIDGE_TYPES),
        target_market=lookup_description(header.destination_code, SNES_DESTINATION_CODES),
        header_type=header_type,
        has_copier_header=has_copier_header,
        version=header.version,
        checksum_ok=(header.checksum ^ header.complement_check) == 0xFFFF,
        rom_size=kilobytes_to_storage(2 ** header.rom_size),
        sram_size=kilobytes_to_storage(2 ** header.sram_size),
    )

# decode a SNES ROM from bytes or a seekable binary file
def decode_rom(source, size=None):
    if size is None:
        size = source_size(source)
    offset = copier_header_offset(size)
    header, header_type = find_rom_header(source, size, offset)
    return rom_from_header(header, header_type, offset != 0)
