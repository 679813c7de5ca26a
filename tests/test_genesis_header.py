import io
import struct

import pytest

import GenesisHeader
from GenesisHeader import ReleaseDate, SoftwareTitle
from RomHeader import TruncatedBufferError


def _field(value, size):
    if isinstance(value, str):
        value = value.encode('cp932')
    return value.ljust(size, b' ')


def _image(
    system_type='SEGA GENESIS',
    publisher='SEGA',
    year='1991',
    month='JUN',
    domestic='SONIC THE               HEDGEHOG',
    overseas='SONIC THE HEDGEHOG',
    software_type='GM',
    serial='00001009',
    revision='00',
    checksum=0x264A,
    devices='J',
    regions='JUE',
):
    header = (
        _field(system_type, 16)
        + b'(C)'
        + _field(publisher, 4)
        + b' '
        + _field(year, 4)
        + b'.'
        + _field(month, 3)
        + _field(domestic, 48)
        + _field(overseas, 48)
        + _field(software_type, 2)
        + b' '
        + _field(serial, 8)
        + b'-'
        + _field(revision, 2)
        + struct.pack('>H', checksum)
        + _field(devices, 16)
        + struct.pack('>IIII', 0x000000, 0x07FFFF, 0xFF0000, 0xFFFFFF)
        + b' ' * 12
        + b' ' * 12
        + b' ' * 40
        + _field(regions, 3)
    )
    assert len(header) == GenesisHeader.GENESIS_HEADER_LAYOUT.size
    return b'\x00' * 0x100 + header + b' ' * 13


def test_header_layout_is_243_bytes():
    assert GenesisHeader.GENESIS_HEADER_LAYOUT.size == 243


def test_decode_genesis_rom():
    rom = GenesisHeader.decode_rom(_image())
    assert rom.system_type == 'SEGA GENESIS'
    assert rom.publisher == 'SEGA'
    assert rom.software_title == SoftwareTitle(domestic='SONIC THE HEDGEHOG', overseas='SONIC THE HEDGEHOG')
    assert rom.software_type == 'Game'
    assert rom.serial_number == '00001009'
    assert rom.revision == '00'
    assert rom.release_date == ReleaseDate(year=1991, month=6)
    assert rom.supported_devices == ('3-button controller',)
    assert rom.supported_regions == ('Japan', 'Americas', 'Europe')
    assert rom.checksum == '0x264a'
    assert rom.rom_range == '0x00000000-0x0007ffff'
    assert rom.ram_range == '0x00ff0000-0x00ffffff'


@pytest.mark.parametrize('codes, expected', [
    ('JUE', ('Japan', 'Americas', 'Europe')),
    ('UJE', ('Japan', 'Americas', 'Europe')),
    ('EJU', ('Americas', 'Europe')),
    ('UU ', ('Americas',)),
    ('J  ', ('Japan',)),
    ('4  ', ('Americas',)),
    ('1  ', ('Japan',)),
    ('F  ', ('Japan', 'Americas', 'Europe')),
    ('2  ', ()),
    ('A  ', ('Europe',)),
    ('C  ', ('Americas', 'Europe')),
    (' E ', ('Europe',)),
    ('E  ', ('Europe',)),
    ('   ', ()),
    ('', ()),
])
def test_supported_regions(codes, expected):
    assert GenesisHeader.supported_regions(codes) == expected


def test_regions_keep_spacing_from_header():
    rom = GenesisHeader.decode_rom(_image(regions=' E '))
    assert rom.supported_regions == ('Europe',)


def test_hex_region_code_from_header():
    rom = GenesisHeader.decode_rom(_image(regions='4'))
    assert rom.supported_regions == ('Americas',)


def test_supported_devices_skip_filler():
    assert GenesisHeader.supported_devices('J6  X?M') == ('3-button controller', '6-button controller', 'Mouse')


def test_unknown_software_type_keeps_code():
    rom = GenesisHeader.decode_rom(_image(software_type='XX'))
    assert rom.software_type == "Unknown ('XX')"


@pytest.mark.parametrize('month, expected', [('JAN', 1), ('JUN', 6), ('DEC', 12), ('XYZ', 0), ('', 0)])
def test_release_month(month, expected):
    assert GenesisHeader.release_month(month) == expected


@pytest.mark.parametrize('year, expected', [('1991', 1991), ('19A1', 0), ('', 0)])
def test_release_year(year, expected):
    assert GenesisHeader.release_year(year) == expected


def test_shift_jis_title():
    rom = GenesisHeader.decode_rom(_image(domestic='ソニック'))
    assert rom.software_title.domestic == 'ソニック'


def test_truncated_header():
    with pytest.raises(TruncatedBufferError):
        GenesisHeader.decode_rom(_image()[:0x100 + 200])


def test_decode_from_file_object():
    image = _image()
    assert GenesisHeader.decode_rom(io.BytesIO(image)) == GenesisHeader.decode_rom(image)


def test_describe_nests_title_and_date():
    record = GenesisHeader.decode_rom(_image()).describe()
    assert record['software_title'] == {'domestic': 'SONIC THE HEDGEHOG', 'overseas': 'SONIC THE HEDGEHOG'}
    assert record['release_date'] == {'year': 1991, 'month': 6}
    assert record['supported_regions'] == ['Japan', 'Americas', 'Europe']
