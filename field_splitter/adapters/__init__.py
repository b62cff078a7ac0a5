from . import emit_records, emit_trace, io_records

__all__ = ["emit_records", "emit_trace", "io_records"]
