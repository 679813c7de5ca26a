import pytest

import NDSHeader
from RomHeader import StorageSize, TruncatedBufferError


def _image(title=b'POKEMON D', game_code=b'ADAE', maker_code=b'01', unit_code=0, capacity=9, region=0x00, version=5, autostart=0):
    image = bytearray(0x200)
    image[0x00 : 0x0C] = title.ljust(12, b'\x00')
    image[0x0C : 0x10] = game_code
    image[0x10 : 0x12] = maker_code
    image[0x12] = unit_code
    image[0x14] = capacity
    image[0x1D] = region
    image[0x1E] = version
    image[0x1F] = autostart
    return bytes(image)


def test_header_layout_is_32_bytes():
    assert NDSHeader.NDS_HEADER_LAYOUT.size == 32


def test_region_version_and_autostart_offsets():
    header = NDSHeader.NDS_HEADER_LAYOUT.read(_image(region=0x80, version=5, autostart=0x04))
    assert header.reserved == b'\x00' * 8
    assert header.region == 0x80
    assert header.version == 5
    assert header.autostart == 0x04


def test_china_region_and_version_from_header():
    rom = NDSHeader.decode_rom(_image(region=0x80, version=5))
    assert rom.region == 'China'
    assert rom.version == 5


def test_decode_nds_rom():
    rom = NDSHeader.decode_rom(_image())
    assert rom.software_title == 'POKEMON D'
    assert rom.game_code == 'ADAE'
    assert rom.maker_code == '01'
    assert rom.supported_devices == ('DS',)
    assert rom.region == 'Normal'
    assert rom.version == 5
    assert rom.card_size == StorageSize(bytes=2 ** 29, kilobytes=2 ** 19, kilobits=2 ** 22)


@pytest.mark.parametrize('unit_code, expected', [
    (0, ('DS',)),
    (1, ('DS',)),
    (2, ('DS', 'DSi')),
    (3, ('DSi',)),
    (7, ('DS',)),
])
def test_supported_devices(unit_code, expected):
    assert NDSHeader.decode_rom(_image(unit_code=unit_code)).supported_devices == expected


def test_region_codes():
    assert NDSHeader.decode_rom(_image(region=0x80)).region == 'China'
    assert NDSHeader.decode_rom(_image(region=0x40)).region == 'Korea'
    assert NDSHeader.decode_rom(_image(region=0x12)).region == 'Unknown (0x12)'


def test_title_with_space_padding():
    rom = NDSHeader.decode_rom(_image(title=b'MARIO   '))
    assert rom.software_title == 'MARIO'


def test_only_header_bytes_are_needed():
    rom = NDSHeader.decode_rom(_image()[:NDSHeader.NDS_HEADER_LAYOUT.size])
    assert rom.game_code == 'ADAE'


def test_truncated_header():
    with pytest.raises(TruncatedBufferError):
        NDSHeader.decode_rom(_image()[:20])


def test_decoding_twice_gives_equal_records():
    image = _image(unit_code=2)
    assert NDSHeader.decode_rom(image) == NDSHeader.decode_rom(image)
    assert NDSHeader.decode_rom(image).describe()['supported_devices'] == ['DS', 'DSi']
