from .precise import ParseError, format_units, to_int_by_precise, to_string_by_precise

__all__ = ["ParseError", "format_units", "to_int_by_precise", "to_string_by_precise"]
