#! /usr/bin/env python3
'''
NDSHeader: decode the header of a Nintendo DS ROM
'''

# standard imports
from collections import namedtuple

# non-standard imports
from RomHeader import HeaderLayout
from RomHeader import as_record, bytes_to_storage, decode_nds_text, lookup_description, print_debug, read_window

# NDS constants
NDS_PLATFORM = 'NDS'
NDS_HEADER_START = 0x000
NDS_HEADER_BUFSIZE = 0x200
NDS_UNIT_DSI = 3
NDS_UNIT_DS_DSI = 2
NDS_REGIONS = {0x00: 'Normal', 0x40: 'Korea', 0x80: 'China'}

# NDS header layout: http://problemkaputt.de/gbatek-ds-cartridge-header.htm
NDS_HEADER_LAYOUT = HeaderLayout('NDSRomHeader', [
    ('game_title',      '12s', decode_nds_text),
    ('game_code',       '4s',  decode_nds_text),
    ('maker_code',      '2s',  decode_nds_text),
    ('unit_code',       'B',   None),
    ('seed_select',     'B',   None),
    ('card_size',       'B',   None), # 2^(20 + n) bytes
    ('reserved',        '8s',  None),
    ('region',          'B',   None),
    ('version',         'B',   None),
    ('autostart',       'B',   None),
])
NDSRomHeader = NDS_HEADER_LAYOUT.record

# decoded NDS ROM
class NDSRom(namedtuple('NDSRom', ['software_title', 'game_code', 'maker_code', 'supported_devices', 'region', 'version', 'card_size'])):
    __slots__ = ()
    platform = NDS_PLATFORM

    def describe(self):
        return as_record(self)

# devices that can run the ROM, from the unit code
def supported_devices(unit_code):
    if unit_code == NDS_UNIT_DSI:
        return ('DSi',)
    if unit_code == NDS_UNIT_DS_DSI:
        return ('DS', 'DSi')
    return ('DS',)

# build the decoded ROM from a parsed header
def rom_from_header(header):
    return NDSRom(
        software_title=header.game_title,
        game_code=header.game_code,
        maker_code=header.maker_code,
        supported_devices=supported_devices(header.unit_code),
        region=lookup_description(header.region, NDS_REGIONS),
        version=header.version,
        card_size=bytes_to_storage(2 ** (20 + header.card_size)),
    )

# decode an NDS ROM from bytes or a seekable binary file
def decode_rom(source, size=None):
    buffer = read_window(source, NDS_HEADER_START, NDS_HEADER_BUFSIZE)
    print_debug("Read header bytes: %s" % buffer.hex())
    header = NDS_HEADER_LAYOUT.read(buffer)
    print_debug("Read ROM header: %s" % (header,))
    return rom_from_header(header)
