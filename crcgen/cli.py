import argparse
import logging
import os
import sys

from .table import WIDTHS, Catalog, generate
from .emit import FORMATS, EmitConfig, emit, default_filename, write_output


__all__ = ["main_parser", "main"]


logger = logging.getLogger(__name__)


def _int(value):
    return int(value, 0)


def main_parser(parser=None):
    if parser is None:
        parser = argparse.ArgumentParser(
            prog="crcgen",
            description="Generate a lookup table for a table-driven CRC-8 or CRC-16.",
            epilog="See https://en.wikipedia.org/wiki/Cyclic_redundancy_check"
                   "#Standards_and_common_use for more information about CRC"
                   " polynomials.")

    p_table = parser.add_argument_group("table")
    p_table.add_argument("-s", "--size",
        metavar="BITS", type=int, choices=WIDTHS,
        help="CRC size in bits (8 or 16)")
    p_table.add_argument("-p", "--poly",
        metavar="POLYNOMIAL", type=_int,
        help="CRC polynomial, without the leading term (e.g. 0x1021)")
    p_table.add_argument("-a", "--algorithm",
        metavar="NAME",
        help="take size and polynomial from a predefined algorithm (e.g. CRC16_XMODEM)")
    p_table.add_argument("--list-algorithms",
        action="store_true",
        help="list predefined algorithms and exit")

    p_output = parser.add_argument_group("output")
    p_output.add_argument("-f", "--format",
        choices=sorted(FORMATS), default="go",
        help="output language (default: %(default)s)")
    p_output.add_argument("-o", "--output",
        metavar="FILE",
        help="output filename, or '-' for standard output"
             " (default: crc<size>_table.<ext>)")
    p_output.add_argument("--package",
        metavar="NAME", default=os.environ.get("GOPACKAGE"),
        help="package of the generated code, required for Go output"
             " (default: $GOPACKAGE)")

    parser.add_argument("-v", "--verbose",
        action="store_true",
        help="log debugging information")

    return parser


def _list_algorithms():
    for name in Catalog.names():
        print(f"{name:<20} {getattr(Catalog, name)!r}")


def _resolve(parser, args):
    if args.algorithm is not None:
        if args.size is not None or args.poly is not None:
            parser.error("--algorithm cannot be combined with --size or --poly")
        try:
            predefined = Catalog.lookup(args.algorithm)
        except KeyError:
            parser.error(f"unknown algorithm {args.algorithm!r}"
                         " (use --list-algorithms to see them all)")
        return predefined.crc_width, predefined.polynomial

    if args.size is None:
        parser.error("CRC size must be 8 or 16 bits")
    if not args.poly:
        parser.error("a nonzero polynomial must be specified")
    return args.size, args.poly


def main(argv=None):
    parser = main_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s: %(message)s")

    if args.list_algorithms:
        _list_algorithms()
        return 0

    crc_width, polynomial = _resolve(parser, args)

    if argv is None:
        argv = sys.argv[1:]
    try:
        config = EmitConfig(args.format, args.package,
                            command=" ".join([parser.prog, *argv]))
        table = generate(crc_width, polynomial)
    except ValueError as e:
        parser.error(str(e))

    filename = args.output or default_filename(crc_width, args.format)
    try:
        write_output(emit(table, config), filename)
    except OSError as e:
        logger.error("cannot write %s: %s", filename, e)
        return 1
    return 0
