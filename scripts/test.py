#! /usr/bin/env python3
'''
Test PlatformID.py and RomID.py on a series of test files
'''

# imports
from glob import glob
from os.path import abspath, expanduser, isdir, isfile
from subprocess import CalledProcessError, check_output
import argparse
import sys

# constants
SELF_PATH = abspath(expanduser(__file__))
DEFAULT_PLATFORMID_PATH = SELF_PATH.replace('/scripts/test.py', '/PlatformID.py')
DEFAULT_ROMID_PATH = SELF_PATH.replace('/scripts/test.py', '/RomID.py')
DEFAULT_TEST_FILES_PATH = SELF_PATH.replace('/scripts/test.py', '/example')

# parse user args
def parse_args():
    # run argparse
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument('-p', '--platformid_path', required=False, type=str, default=DEFAULT_PLATFORMID_PATH, help="Path to PlatformID.py script")
    parser.add_argument('-r', '--romid_path', required=False, type=str, default=DEFAULT_ROMID_PATH, help="Path to RomID.py script")
    parser.add_argument('-t', '--test_files_path', required=False, type=str, default=DEFAULT_TEST_FILES_PATH, help="Path to folder containing test files (one subfolder per platform)")
    parser.add_argument('-q', '--quiet', action="store_true", help="Suppress messages")
    args = parser.parse_args()

    # check args and return
    for fn in [args.platformid_path, args.romid_path]:
        if not isfile(fn):
            print("File not found: %s" % fn); sys.exit(1)
    args.test_files_path = args.test_files_path.rstrip('/')
    if not isdir(args.test_files_path):
        print("Directory not found: %s" % args.test_files_path); sys.exit(1)
    return args

# run tests
def run_tests(platformid_path, romid_path, test_files_path, quiet=False):
    # import RomID platform list
    sys.path.append('/'.join(romid_path.split('/')[:-1]))
    from RomID import ROMID_PLATFORMS
    sys.path.pop()

    # run tests
    num_pass = 0; num_fail = 0
    for platform in ROMID_PLATFORMS:
        for fn in sorted(glob('%s/%s/*' % (test_files_path, platform))):
            platformid_pass = True; romid_pass = True

            # first check PlatformID
            try:
                platformid_out = check_output([sys.executable, platformid_path, '-i', fn]).decode().strip()
                if platformid_out.upper() != platform.upper():
                    platformid_pass = False
            except CalledProcessError:
                platformid_pass = False
            if (platformid_pass == False) and (not quiet):
                print("PlatformID failed: %s" % fn)

            # then check RomID
            try:
                check_output([sys.executable, romid_path, '-p', platform, '-i', fn])
            except CalledProcessError:
                romid_pass = False
            if (romid_pass == False) and (not quiet):
                print("RomID failed: %s" % fn)

            # update global test results
            if platformid_pass and romid_pass:
                num_pass += 1
            else:
                num_fail += 1
    return num_pass, num_fail

# main program
if __name__ == "__main__":
    args = parse_args()
    num_pass, num_fail = run_tests(args.platformid_path, args.romid_path, args.test_files_path, quiet=args.quiet)
    if not args.quiet:
        print("Pass: %d" % num_pass)
        print("Fail: %d" % num_fail)
    sys.exit(num_fail)
