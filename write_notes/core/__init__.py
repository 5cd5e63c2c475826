from .content import decode, encode, parse_title
from .errors import BackendError
from .filenames import parse_file_number, slugify

__all__ = ["decode",
           "encode",
           "parse_title",
           "BackendError",
           "parse_file_number",
           "slugify"
           ]
