from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

# RFC3339 estricto: YYYY-MM-DDTHH:MM:SS(.frac)?(Z|±HH:MM)
_RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(value: str | None) -> Optional[datetime]:
    """Parsea un timestamp RFC3339 a datetime UTC.

    Retorna None si el valor no cumple RFC3339 (offset obligatorio, separador
    T, segundos presentes) o si la fecha/hora no es válida. La fracción de
    segundos se trunca a microsegundos.
    """
    if not value or not isinstance(value, str):
        return None

    match = _RFC3339_RE.match(value.strip())
    if match is None:
        return None

    date_part, time_part, fraction, offset = match.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    # fromisoformat de 3.10 solo acepta 3 o 6 dígitos de fracción
    micros = f".{(fraction or '')[:6].ljust(6, '0')}" if fraction else ""

    try:
        parsed = datetime.fromisoformat(f"{date_part}T{time_part}{micros}{offset}")
    except ValueError:
        return None

    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
