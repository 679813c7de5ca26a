#! /usr/bin/env python3
'''
PlatformID: Identify the platform of a cartridge ROM
'''

# standard imports
from os.path import abspath, expanduser
import argparse

# non-standard imports
from RomID import EXT2PLATFORM, check_exists, check_not_exists, error, get_extension, open_file
from GenesisHeader import GENESIS_HEADER_START

# PlatformID constants
HEADER_SIZE = 0x200 # how many bytes to read when attempting to manually detect the platform from raw data
GENESIS_MAGIC_WORDS = [bytes(ord(c) for c in w) for w in ["SEGA GENESIS", "SEGA MEGA DRIVE", "SEGA 32X", "SEGA EVERDRIVE", "SEGA SSF", "SEGA MEGAWIFI", "SEGA PICO", "SEGA TERA68K", "SEGA TERA286"]]

# parse user arguments
def parse_args(argv=None):
    # run argparse
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument('-i', '--input', required=True, type=str, help="Input ROM File")
    parser.add_argument('-o', '--output', required=False, type=str, default='stdout', help="Output File")
    args = parser.parse_args(argv)

    # check input ROM file
    args.input = abspath(expanduser(args.input))
    check_exists(args.input)

    # check output file
    if args.output != 'stdout':
        check_not_exists(args.output)

    # all good, so return args
    return args

# check raw data from the beginning of a ROM for the Genesis system type
def is_genesis(header):
    for magic_word in GENESIS_MAGIC_WORDS:
        for i in range(GENESIS_HEADER_START, GENESIS_HEADER_START + 0x10): # system type can be preceded by a space
            if header[i : i + len(magic_word)] == magic_word:
                return True
    return False

# main logic to identify a platform
def identify(fn):
    # first try to identify platform by file extension
    platform = EXT2PLATFORM.get(get_extension(fn))

    # next try to identify based on raw data from beginning of file
    if platform is None:
        with open_file(fn, mode='rb') as f:
            header = f.read(HEADER_SIZE)
        if is_genesis(header):
            platform = 'Genesis'

    # None if we failed to identify the platform
    return platform

# main program logic
def main():
    args = parse_args()
    platform = identify(args.input)
    if platform is None:
        error("Unable to identify platform: %s" % args.input)
    f_out = open_file(args.output, 'wt'); print(platform, file=f_out)
    if args.output != 'stdout':
        f_out.close()

# run program
if __name__ == "__main__":
    main()
