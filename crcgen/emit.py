"""
Serialization of CRC lookup tables into source code for other languages.

Every output starts with a "Code generated ...; DO NOT EDIT." header naming
the command that produced it, states the polynomial in a comment and lists
the table eight entries per line as zero-padded hexadecimal literals.
"""

import logging
import os
import stat
import sys
import tempfile

from amaranth.back import rtlil, verilog

from .rom import TableROM


__all__ = ["FORMATS", "EmitConfig", "emit", "default_filename", "write_output"]


logger = logging.getLogger(__name__)


class EmitConfig:
    """
    Output settings for a generated table.

    Parameters
    ----------
    format : str
        One of the keys of ``FORMATS``.
    package : str or None
        Package the generated code belongs to. Required for Go output,
        ignored by other formats.
    command : str
        Command line recorded in the generated header.
    """
    def __init__(self, format="go", package=None, command="crcgen"):
        if format not in FORMATS:
            raise ValueError(f"Unknown output format {format!r}")
        if FORMATS[format].needs_package and not package:
            raise ValueError(f"A package name is required for {format} output")
        self.format = format
        self.package = package
        self.command = command

    def __repr__(self):
        return f"EmitConfig(format={self.format!r}, package={self.package!r}," \
               f" command={self.command!r})"


def _hex(value, crc_width):
    return f"0x{value:0{crc_width//4}X}"


def _rows(table, indent):
    for start in range(0, len(table), 8):
        yield indent + " ".join(_hex(value, table.crc_width) + ","
                                for value in table[start:start + 8])


def _description(table):
    return f"Lookup table for CRC-{table.crc_width} calculation" \
           f" with polynomial {_hex(table.polynomial, table.crc_width)}."


def _header(config):
    return f"Code generated by \"{config.command}\"; DO NOT EDIT."


def emit_go(table, config):
    lines = [
        f"// {_header(config)}",
        "",
        f"package {config.package}",
        "",
        f"// {_description(table)}",
        f"var crc{table.crc_width}Table = []uint{table.crc_width}{{",
        *_rows(table, "\t"),
        "}",
    ]
    return "\n".join(lines) + "\n"


def emit_c(table, config):
    guard = f"CRC{table.crc_width}_TABLE_H"
    lines = [
        f"/* {_header(config)} */",
        "",
        f"#ifndef {guard}",
        f"#define {guard}",
        "",
        "#include <stdint.h>",
        "",
        f"/* {_description(table)} */",
        f"static const uint{table.crc_width}_t crc{table.crc_width}_table[256] = {{",
        *_rows(table, "    "),
        "};",
        "",
        f"#endif /* {guard} */",
    ]
    return "\n".join(lines) + "\n"


def emit_python(table, config):
    lines = [
        f"# {_header(config)}",
        "",
        f"# {_description(table)}",
        f"CRC{table.crc_width}_TABLE = (",
        *_rows(table, "    "),
        ")",
    ]
    return "\n".join(lines) + "\n"


def _convert_rom(backend, comment, table, config):
    rom = TableROM(table)
    text = backend.convert(rom, name=f"crc{table.crc_width}_table",
                           ports=[rom.addr, rom.data], emit_src=False)
    # The table itself lives in the memory initializer; repeat it in the
    # comment block so the output can be reviewed like the other formats.
    lines = [
        f"{comment} {_header(config)}",
        f"{comment}",
        f"{comment} {_description(table)}",
        *(f"{comment}{row}" for row in _rows(table, "   ")),
        "",
    ]
    return "\n".join(lines) + text


def emit_rtlil(table, config):
    return _convert_rom(rtlil, "#", table, config)


def emit_verilog(table, config):
    return _convert_rom(verilog, "//", table, config)


class _Format:
    def __init__(self, emitter, extension, needs_package=False):
        self.emitter = emitter
        self.extension = extension
        self.needs_package = needs_package


#: Supported output formats, by name.
FORMATS = {
    "go":      _Format(emit_go, "go", needs_package=True),
    "c":       _Format(emit_c, "h"),
    "python":  _Format(emit_python, "py"),
    "rtlil":   _Format(emit_rtlil, "il"),
    "verilog": _Format(emit_verilog, "v"),
}


def emit(table, config):
    """
    Returns the source code for ``table`` in the format selected by
    ``config``.
    """
    return FORMATS[config.format].emitter(table, config)


def default_filename(crc_width, format="go"):
    """
    Returns the conventional output file name, ``crc<width>_table.<ext>``.
    """
    return f"crc{crc_width}_table.{FORMATS[format].extension}"


def _file_mode(filename):
    # mkstemp creates files readable by the owner only; use the mode an
    # existing destination has, or the one a new file would get.
    try:
        return stat.S_IMODE(os.stat(filename).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_output(text, filename):
    """
    Writes ``text`` to ``filename``, or to standard output if ``filename``
    is ``-``.

    The file is written under a temporary name in the same directory and
    renamed into place once complete, so a failed write never leaves a
    truncated table behind. Raises ``OSError`` on failure.
    """
    if filename == "-":
        sys.stdout.write(text)
        return

    directory = os.path.dirname(os.path.abspath(filename))
    fd, temp_name = tempfile.mkstemp(
        dir=directory, prefix=f".{os.path.basename(filename)}.", suffix=".tmp")
    os.close(fd)
    try:
        with open(temp_name, "w") as f:
            f.write(text)
        os.chmod(temp_name, _file_mode(filename))
        os.replace(temp_name, filename)
    except BaseException:
        os.unlink(temp_name)
        raise
    logger.info("wrote %s", filename)
