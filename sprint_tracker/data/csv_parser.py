"""
Tokenizer and table parser for spreadsheet CSV exports.

**Conceptual**: The spreadsheet's CSV export is turned into header-keyed rows
in two steps:
  1. parse_csv_line: one line of text -> list of cell strings.
  2. parse_csv: full table text -> list of RawRow dicts (header -> cell).

**Grammar** (deliberately small):
  - Comma-delimited, one record per "\\n"-separated line.
  - A double quote toggles "in quotes" mode; commas inside quotes are literal.
  - Cells are trimmed; the first line holds the headers.
  - Doubled-quote escaping ("" inside a quoted field, RFC 4180) is NOT
    supported: both quotes just toggle the mode. Known limitation.

Header spelling and casing are left untouched; normalizers resolve their own
header aliases.
"""

import logging

logger = logging.getLogger(__name__)

RawRow = dict[str, str]


def parse_csv_line(line: str) -> list[str]:
    """
    Split one line of CSV text into trimmed cell values.

    **Functionally**:
      - Scans left to right; '"' toggles in-quotes mode and is not copied.
      - ',' outside quotes closes the current field.
      - Every field is trimmed; one leading and one trailing '"' are stripped.
      - The final field is always emitted, so "" -> [""] and "a," -> ["a", ""].
      - An unmatched quote swallows the rest of the line into one field.

    Args:
        line: A single line of text (no embedded newline).

    Returns:
        List of cell strings.

    Example:
        >>> parse_csv_line('a,"b,c",d')
        ['a', 'b,c', 'd']
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return [_strip_surrounding_quotes(value) for value in fields]


def _strip_surrounding_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def parse_csv(text: str) -> list[RawRow]:
    """
    Parse a full CSV table into header-keyed rows.

    **Functionally**:
      - Splits on "\\n" and discards lines that are blank after trimming.
      - Tokenizes the first remaining line as headers.
      - Zips each following line onto the headers; missing trailing cells
        become "" and surplus cells are ignored.
      - Drops data rows in which every cell is empty.

    Args:
        text: Raw CSV export of one logical table.

    Returns:
        List of RawRow dicts in sheet order (empty list for empty input).

    Example:
        >>> parse_csv("id,name\\navi,Avi Gupta\\n,\\n")
        [{'id': 'avi', 'name': 'Avi Gupta'}]
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return []

    headers = parse_csv_line(lines[0])
    rows = []

    for line in lines[1:]:
        values = parse_csv_line(line)
        if not any(values):
            continue

        row = {}
        for index, header in enumerate(headers):
            row[header] = values[index] if index < len(values) else ""
        rows.append(row)

    logger.debug("Parsed %d rows with headers %s", len(rows), headers)
    return rows
