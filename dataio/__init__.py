"""This module exposes all high level APIs for dataio."""

import lazy_loader as lazy

# Version is lightweight, keep it eager
from dataio.version import __version__

# Lazy load everything else using lazy_loader
__getattr__, __dir__, __all__ = lazy.attach(
    __name__,
    submodules=["codecs", "io", "model"],
    submod_attrs={
        # High-level API from dataio.io.main
        "io.main": [
            "Dispatcher",
            "create_registry",
            "decode",
            "encode",
            "load_file",
            "save_file",
        ],
        "io.registry": ["FormatRegistry"],
        "io.base": [
            "AllCodecsFailed",
            "Capability",
            "Codec",
            "DecodeError",
            "EncodeError",
            "NoCodecFound",
            "SerializationError",
            "SerializationIOError",
        ],
        # Built-in codecs
        "io.csv": ["CsvCodec"],
        "io.ini": ["IniCodec"],
        "io.json": ["JsonCodec"],
        "io.lua": ["LuaCodec"],
        "io.plain_text": ["PlainTextCodec"],
        "io.spreadsheet": ["SpreadsheetCodec"],
        "io.urlencoded": ["UrlEncodedCodec"],
        "io.yaml": ["YamlCodec"],
        # Model classes from dataio.model.*
        "model.media_type": ["MediaType"],
        "model.table": ["HeadingMode", "Table"],
    },
)

# Add __version__ to __all__ (it's not in lazy_loader's __all__)
__all__ = ["__version__"] + __all__
