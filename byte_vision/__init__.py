"""
byte_vision - A Textual TUI for configuring local llama.cpp engines

Edits the llama-cli and llama-embedding settings together with the
application paths they depend on, keeps model and log file paths in step,
and compares past inference runs side by side.
"""

__version__ = "0.1.0"
