#! /usr/bin/env python3
'''
RomID: Decode the internal header of a cartridge ROM
'''

# standard imports
from gzip import open as gopen
from json import dumps as jdumps
from os.path import abspath, expanduser, isfile
from zipfile import BadZipFile, ZipFile
import sys
import argparse

# non-standard imports
from RomHeader import RomError, UnsupportedPlatformError, print_log, set_debug
import GenesisHeader
import NDSHeader
import SNESHeader
import yaml

# RomID constants
VERSION = '1.0.0'
DEFAULT_BUFSIZE = 1000000
FILE_MODES_GZ = {'rb', 'wb', 'rt', 'wt'}
STRIP_EXT = ['gz'] # list instead of set to iterate in order (just in case)
OUTPUT_FORMATS = ['tsv', 'json', 'yaml']
PLATFORM_EXTS = { # https://emulation.gametechwiki.com/index.php/List_of_filetypes
    'Genesis': {'gen', 'md', 'smd'},                          # Sega Genesis / Mega Drive
    'NDS':     {'nds'},                                       # Nintendo DS
    'SNES':    {'sfc', 'smc', 'swc'},                         # Super Nintendo Entertainment System
}
EXT2PLATFORM = {ext:platform for platform in PLATFORM_EXTS for ext in PLATFORM_EXTS[platform]}
PLATFORM_LABELS = {'snes': 'SNES', 'sfc': 'SNES', 'genesis': 'Genesis', 'megadrive': 'Genesis', 'md': 'Genesis', 'nds': 'NDS', 'ds': 'NDS'}
AUTO_LABEL = 'auto'

# dictionary storing all decode functions
DECODE = {
    'Genesis': GenesisHeader.decode_rom,
    'NDS':     NDSHeader.decode_rom,
    'SNES':    SNESHeader.decode_rom,
}
ROMID_PLATFORMS = sorted(DECODE.keys())

# print an error message and exit
def error(message, exitcode=1):
    print(message, file=sys.stderr); sys.exit(exitcode)

# check if a file exists and throw an error if it doesn't
def check_exists(fn):
    if not isfile(fn) and not fn.lower().startswith('/dev/'):
        error("File not found: %s" % fn)

# check if a file doesn't exist and throw an error if it does
def check_not_exists(fn):
    if isfile(fn):
        error("File exists: %s" % fn)

# open a file (automatically handle gzip and single-file zip)
def open_file(fn, mode='rt', bufsize=DEFAULT_BUFSIZE):
    ext = fn.split('.')[-1].strip().lower()

    # standard output/input
    if fn == 'stdout':
        from sys import stdout as f
    elif fn == 'stdin':
        from sys import stdin as f

    # GZIP files
    elif ext == 'gz':
        if mode not in FILE_MODES_GZ:
            error("Invalid gzip file mode: %s" % mode)
        elif 'r' in mode:
            f = gopen(fn, mode)
        else:
            f = gopen(fn, mode, compresslevel=9)

    # ZIP files
    elif ext == 'zip':
        if 'r' not in mode or 'w' in mode:
            error("Only read mode is supported for zip files")
        z = ZipFile(fn, 'r'); names = z.namelist()
        if len(names) != 1:
            error("More than 1 file in zip: %s" % fn)
        return z.open(names[0])

    # Regular files
    else:
        f = open(fn, mode, buffering=bufsize)
    return f

# get the (lower-case) extension of a filename
def get_extension(fn):
    fn = fn.strip().lower()
    for ext in STRIP_EXT:
        if fn.endswith('.%s' % ext):
            fn = fn[:-len(ext)-1]
    return fn.split('.')[-1].strip()

# map a platform label (e.g. "sfc", "genesis") to a platform name
def parse_platform_label(label):
    label = label.strip().lower()
    if label not in PLATFORM_LABELS:
        raise UnsupportedPlatformError("Unrecognised platform label '%s' (options: %s)" % (label, ', '.join(sorted(PLATFORM_LABELS))))
    return PLATFORM_LABELS[label]

# guess the platform from the file extension (None if unknown)
def platform_from_path(fn):
    return EXT2PLATFORM.get(get_extension(fn))

# get args from user interactively
def get_args_interactive(argv):
    # set things up
    print_log("=== RomID v%s ===" % VERSION)
    arg_input = None; arg_platform = None

    # get ROM filename (--input)
    while arg_input is None:
        print_log("Enter ROM filename (no quotes): ", end='')
        arg_input = input().strip()
        if not isfile(arg_input) and not arg_input.lower().startswith('/dev/'):
            print_log("ERROR: File not found: %s\n" % arg_input); arg_input = None
    argv += ['--input', arg_input]

    # get platform (--platform)
    while arg_platform is None:
        print_log("Enter platform (options: %s): " % ', '.join([AUTO_LABEL] + sorted(PLATFORM_LABELS)), end='')
        arg_platform = input().replace('"','').replace("'",'').strip().lower()
        if arg_platform != AUTO_LABEL and arg_platform not in PLATFORM_LABELS:
            print_log("ERROR: Invalid platform: %s\n" % arg_platform); arg_platform = None
    argv += ['--platform', arg_platform]

# parse user arguments
def parse_args(argv=None):
    # if --version, just print version and exit
    if '--version' in (sys.argv if argv is None else argv):
        print("RomID v%s" % VERSION); sys.exit()

    # run argparse
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument('-i', '--input', required=True, type=str, help="Input ROM File")
    parser.add_argument('-p', '--platform', required=False, type=str, default=AUTO_LABEL, help="Platform (options: %s)" % ', '.join([AUTO_LABEL] + sorted(PLATFORM_LABELS)))
    parser.add_argument('-o', '--output', required=False, type=str, default='stdout', help="Output File")
    parser.add_argument('-f', '--format', required=False, type=str, default='tsv', help="Output Format (options: %s)" % ', '.join(OUTPUT_FORMATS))
    parser.add_argument('--delimiter', required=False, type=str, default='\t', help="Delimiter (TSV output)")
    parser.add_argument('--debug', action="store_true", help="Print Debug Messages")
    parser.add_argument('--version', action="store_true", help="Print RomID Version (%s)" % VERSION)
    args = parser.parse_args(argv)

    # check input ROM file
    args.input = abspath(expanduser(args.input))
    check_exists(args.input)

    # check output file
    if args.output != 'stdout':
        check_not_exists(args.output)

    # check output format
    args.format = args.format.strip().lower()
    if args.format not in OUTPUT_FORMATS:
        error("Invalid output format: %s\nOptions: %s" % (args.format, ', '.join(OUTPUT_FORMATS)))

    # all good, so return args
    return args

# pick the platform to decode as (explicit label or from the file extension)
def select_platform(fn, label=AUTO_LABEL):
    if label.strip().lower() != AUTO_LABEL:
        return parse_platform_label(label)
    platform = platform_from_path(fn)
    if platform is None:
        raise UnsupportedPlatformError("Could not automatically determine the platform. Use the '-p' flag to specify a platform explicitly")
    return platform

# decode the ROM header of a file
def identify(fn, platform):
    if platform not in DECODE:
        raise UnsupportedPlatformError("Unsupported platform: %s" % platform)
    with open_file(fn, mode='rb') as f:
        return DECODE[platform](f)

# flatten a decoded record into (key, value) rows
def flatten_record(record, prefix=''):
    rows = list()
    for k, v in record.items():
        key = '%s%s' % (prefix, k)
        if isinstance(v, dict):
            rows += flatten_record(v, prefix='%s.' % key)
        elif isinstance(v, list):
            rows.append((key, ' / '.join(str(x) for x in v)))
        else:
            rows.append((key, v))
    return rows

# render a decoded ROM as key/value lines
def render_tsv(rom, delimiter='\t'):
    rows = [('platform', rom.platform)] + flatten_record(rom.describe())
    for i, (k, v) in enumerate(rows): # replace empty string values with 'None'
        if isinstance(v, str) and len(v.strip()) == 0:
            rows[i] = (k, 'None')
    return '\n'.join('%s%s%s' % (k, delimiter, v) for k, v in rows)

# render a decoded ROM as JSON
def render_json(rom):
    return jdumps({'platform': rom.platform, rom.platform: rom.describe()}, indent=2, ensure_ascii=False)

# render a decoded ROM as YAML
def render_yaml(rom):
    return yaml.safe_dump({'platform': rom.platform, rom.platform: rom.describe()}, sort_keys=False, allow_unicode=True).rstrip('\n')

# main program logic
def main():
    if len(sys.argv) == 1:
        get_args_interactive(sys.argv)
    args = parse_args()
    if args.debug:
        set_debug(True)
    try:
        platform = select_platform(args.input, args.platform)
        rom = identify(args.input, platform)
    except (RomError, OSError, EOFError, BadZipFile) as e: # decode errors, unreadable gzip or zip
        error(str(e))
    if args.format == 'json':
        out = render_json(rom)
    elif args.format == 'yaml':
        out = render_yaml(rom)
    else:
        out = render_tsv(rom, delimiter=args.delimiter)
    f_out = open_file(args.output, 'wt'); print(out, file=f_out)
    if args.output != 'stdout':
        f_out.close()

# run program
if __name__ == "__main__":
    main()
