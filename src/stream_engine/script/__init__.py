"""Script parsing and compilation."""

from .addresses import parse_address
from .commands import Instruction, LoopBlock, parse_commands, parse_instructions
from .compiler import assemble, compile_file, compile_script, resolve_deferred
from .reader import FileReader, ScriptPosition, ScriptReader, StringReader
from .regex_scanner import scan_regex

__all__ = [
    "parse_address",
    "Instruction",
    "LoopBlock",
    "parse_commands",
    "parse_instructions",
    "assemble",
    "compile_file",
    "compile_script",
    "resolve_deferred",
    "FileReader",
    "ScriptPosition",
    "ScriptReader",
    "StringReader",
    "scan_regex",
]
