"""Read and edit legacy INI files in place, keeping their casing and encoding."""

from .config import Settings
from .diagnostics import Diagnostic, Diagnostics, Kind
from .encoding import detect_bytes, detect_encoding, encode_text
from .files import file_exists, iter_lines, write_atomically
from .formatting import format_entry, format_value, needs_quotes
from .parser import SectionParser, load_file, loads, parse_file, parse_lines
from .rewriter import Rewriter, rewrite_lines, set_value

__version__ = "0.1.0"
