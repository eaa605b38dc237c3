from .jsonl import append_jsonl_line, jsonl_dumps, read_jsonl

__all__ = ["append_jsonl_line", "jsonl_dumps", "read_jsonl"]
