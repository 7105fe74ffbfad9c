"""
Placeholder style conversion for DB-API drivers.

Query builders always render qmark placeholders (?). DB-API drivers declare
their own ``paramstyle`` at module level, so statements are converted just
before execution:

- qmark:    WHERE a = ?          (sqlite3, pyodbc)
- numeric:  WHERE a = :1
- named:    WHERE a = :p1
- format:   WHERE a = %s         (pymysql)
- pyformat: WHERE a = %(p1)s     (psycopg2)
"""

import re
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..exceptions import ConfigurationError

DEFAULT_PARAMSTYLE = "qmark"

SUPPORTED_PARAMSTYLES = ("qmark", "numeric", "named", "format", "pyformat")

# Placeholders inside quoted literals, quoted identifiers and comments are not rewritten.
_TOKEN_PATTERN = re.compile(
    r"""
    '(?:[^']|'')*'
    | "(?:[^"]|"")*"
    | --[^\n]*
    | /\*.*?\*/
    | \?
    | %
    """,
    re.VERBOSE | re.DOTALL,
)


def detect_paramstyle(connection) -> str:
    """
    Detect the parameter style of a DB-API connection from its driver module.

    Args:
        connection: Open DB-API connection

    Returns:
        The driver's declared paramstyle, or qmark when it cannot be determined
    """
    module_name = type(connection).__module__ or ""
    driver = sys.modules.get(module_name.split(".")[0])
    style = getattr(driver, "paramstyle", None)
    if isinstance(style, str) and style in SUPPORTED_PARAMSTYLES:
        return style
    return DEFAULT_PARAMSTYLE


def convert_placeholders(
    sql: str, params: Sequence[Any], paramstyle: Optional[str] = None
) -> Tuple[str, Union[List[Any], Dict[str, Any]]]:
    """
    Convert a qmark statement and its positional parameters to another style.

    Args:
        sql: Statement using ? placeholders
        params: Positional parameter values
        paramstyle: Target DB-API paramstyle (default: qmark)

    Returns:
        Tuple of (converted_sql, converted_params)

    Raises:
        ConfigurationError: If the paramstyle is not supported
    """
    paramstyle = paramstyle or DEFAULT_PARAMSTYLE
    if paramstyle not in SUPPORTED_PARAMSTYLES:
        raise ConfigurationError(
            f"Unsupported paramstyle: {paramstyle}. Supported: {', '.join(SUPPORTED_PARAMSTYLES)}"
        )

    params = list(params)
    if paramstyle == "qmark":
        return sql, params

    escape_percent = paramstyle in ("format", "pyformat")
    counter = 0

    def replace(match: "re.Match[str]") -> str:
        nonlocal counter
        token = match.group(0)
        if token == "?":
            counter += 1
            if paramstyle == "numeric":
                return f":{counter}"
            if paramstyle == "named":
                return f":p{counter}"
            if paramstyle == "format":
                return "%s"
            return f"%(p{counter})s"
        # format/pyformat drivers interpolate the whole statement, literals included
        return token.replace("%", "%%") if escape_percent else token

    converted_sql = _TOKEN_PATTERN.sub(replace, sql)

    if paramstyle in ("named", "pyformat"):
        return converted_sql, {f"p{i}": value for i, value in enumerate(params, 1)}
    return converted_sql, params
