#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
import argparse, os

from .extract import SinkOpenFailure, SourceOpenFailure, WriteFailure, error, extract

def run(args):
    print(f'Searching Marvell network phy firmware in windows driver file "{args.driver}"...')
    try:
        os.makedirs(args.output, exist_ok=True)
    except OSError as e:
        error(f'cannot create output directory {args.output}, err="{e.strerror or e}"')
        return 1

    try:
        result = extract(args.driver, args.output)
    except (SourceOpenFailure, SinkOpenFailure) as e:
        error(str(e))
        return 1
    except WriteFailure as e:
        error(str(e))
        return 2

    print(f'Extracted {len(result.artifacts)} firmware files.')
    for a in result.artifacts:
        print(f'  {a.provisional} -> {a.name}')
    for f in result.failures:
        error(f'{f.name}: {f.kind.value}: {f.message}')
    return 0 if result.ok else 1

def main(argv=None):
    parser = argparse.ArgumentParser(description='Extract the firmware for Marvell X3310 and E2010 phys '
                                                 'from the Windows driver TN40xxmp_64.sys or TN40xxmp_32.sys')
    parser.add_argument('driver', help='Windows driver file')
    parser.add_argument('--output', '-o', help='output directory', default='.')
    args = parser.parse_args(argv)
    return run(args)

if __name__ == '__main__':
    raise SystemExit(main())
