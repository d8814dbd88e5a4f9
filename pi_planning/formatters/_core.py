"""Core output dispatchers."""

import json


def pretty_print(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def output(data, formatter=None, fmt="json", csv_formatter=None):
    """Print *data* as json (default), a table via *formatter*, or csv."""
    if fmt == "csv" and csv_formatter:
        print(csv_formatter(data), end="")
    elif fmt == "table" and formatter:
        print(formatter(data))
    else:
        pretty_print(data)
