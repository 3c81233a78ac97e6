"""
Number Format Module
====================
Renders a cell value the way a spreadsheet application displays it, driven
by the cell's number format code (``General``, ``#,##0.00``, ``0%``,
``yyyy-mm-dd``, ``[h]:mm:ss``, ``0.00E+00``, ``# ?/?``, ``@`` ...).

Format codes are parsed once and cached. Codes that cannot be interpreted
raise ``NumberFormatError``; callers decide how to fall back.
"""

import datetime
import math
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from functools import lru_cache

from openpyxl.utils.datetime import WINDOWS_EPOCH, to_excel

from .errors import NumberFormatError

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
]
DAY_NAMES = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
    "Sunday",
]

DATE_LETTERS = "ymdhse"
DIGIT_PLACEHOLDERS = "0#?"
COMPARATORS = ("<=", ">=", "<>", "<", ">", "=")

# Excel's General format shows at most this many characters of a number
GENERAL_WIDTH = 11

# built-in date codes 14 and 22 display in the system short date form (en-US)
SHORT_DATE_FORMATS = {
    "mm-dd-yy": "m/d/yyyy",
    "m/d/yy": "m/d/yyyy",
    "m/d/yy h:mm": "m/d/yyyy h:mm",
}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class Section:
    """One ``;``-separated part of a format code."""

    def __init__(self, tokens: tuple, condition: tuple | None = None):
        self.tokens = tokens
        self.condition = condition
        kinds = {kind for kind, _ in tokens}
        if "general" in kinds:
            self.kind = "general"
        elif kinds & {"date", "ampm", "elapsed"}:
            self.kind = "date"
        elif "digit" in kinds:
            self.kind = "number"
        elif "text" in kinds:
            self.kind = "text"
        else:
            self.kind = "literal"

    def accepts(self, number) -> bool:
        op, limit = self.condition
        return {
            "<": number < limit,
            ">": number > limit,
            "=": number == limit,
            "<=": number <= limit,
            ">=": number >= limit,
            "<>": number != limit,
        }[op]

    def __repr__(self):
        return f"Section(kind={self.kind}, tokens={self.tokens}, condition={self.condition})"


def _split_sections(code: str) -> list[str]:
    """Split *code* on ``;`` outside quotes, brackets and escapes."""
    sections = []
    current = []
    i = 0
    while i < len(code):
        c = code[i]
        if c == '"':
            end = code.find('"', i + 1)
            if end < 0:
                raise NumberFormatError(f"Unterminated quoted text in format '{code}'")
            current.append(code[i:end + 1])
            i = end + 1
            continue
        if c == "[":
            end = code.find("]", i + 1)
            if end < 0:
                raise NumberFormatError(f"Unterminated bracket in format '{code}'")
            current.append(code[i:end + 1])
            i = end + 1
            continue
        if c in "\\_*":
            current.append(code[i:i + 2])
            i += 2
            continue
        if c == ";":
            sections.append("".join(current))
            current = []
        else:
            current.append(c)
        i += 1
    sections.append("".join(current))
    return sections


def _parse_condition(body: str, code: str) -> tuple:
    for op in COMPARATORS:
        if body.startswith(op):
            try:
                return op, float(body[len(op):])
            except ValueError:
                break
    raise NumberFormatError(f"Bad condition [{body}] in format '{code}'")


def _bracket_token(body: str, code: str):
    """Interpret a ``[...]`` token. Returns a token, a condition or None."""
    if body.startswith("$"):
        symbol = body[1:].split("-", 1)[0]
        return ("lit", symbol) if symbol else None
    lowered = body.lower()
    if lowered and lowered[0] in "hms" and lowered == lowered[0] * len(lowered):
        return ("elapsed", lowered)
    if body[:1] in "<>=":
        return _parse_condition(body, code)
    # colors, [Color10], [DBNum1] and other display hints
    return None


def _tokenize(section: str, code: str) -> Section:
    tokens = []
    condition = None
    i = 0
    n = len(section)
    while i < n:
        c = section[i]
        lower = c.lower()
        if c == '"':
            end = section.find('"', i + 1)
            tokens.append(("lit", section[i + 1:end]))
            i = end + 1
        elif c == "\\":
            if i + 1 >= n:
                raise NumberFormatError(f"Dangling escape in format '{code}'")
            tokens.append(("lit", section[i + 1]))
            i += 2
        elif c == "_":
            tokens.append(("lit", " "))
            i += 2
        elif c == "*":
            i += 2
        elif c == "[":
            end = section.find("]", i + 1)
            token = _bracket_token(section[i + 1:end], code)
            if token is not None and token[0] in COMPARATORS:
                condition = token
            elif token is not None:
                tokens.append(token)
            i = end + 1
        elif section[i:i + 7].lower() == "general":
            tokens.append(("general", section[i:i + 7]))
            i += 7
        elif section[i:i + 5].upper() == "AM/PM":
            tokens.append(("ampm", section[i:i + 5]))
            i += 5
        elif section[i:i + 3].upper() == "A/P":
            tokens.append(("ampm", section[i:i + 3]))
            i += 3
        elif lower == "e" and section[i + 1:i + 2] in ("+", "-"):
            tokens.append(("exp", "E" + section[i + 1]))
            i += 2
        elif lower in DATE_LETTERS:
            j = i
            while j < n and section[j].lower() == lower:
                j += 1
            text = section[i:j].lower()
            if lower == "e":
                text = "yyyy"
            tokens.append(("date", text))
            i = j
        elif lower in "gb":
            i += 1
        elif c in DIGIT_PLACEHOLDERS:
            tokens.append(("digit", c))
            i += 1
        elif c == ".":
            tokens.append(("point", c))
            i += 1
        elif c == ",":
            tokens.append(("comma", c))
            i += 1
        elif c == "%":
            tokens.append(("percent", c))
            i += 1
        elif c == "/":
            tokens.append(("slash", c))
            i += 1
        elif c == "@":
            tokens.append(("text", c))
            i += 1
        else:
            tokens.append(("lit", c))
            i += 1
    return Section(tuple(tokens), condition)


@lru_cache(maxsize=512)
def parse_format(code: str) -> tuple[Section, ...]:
    """Parse a format code into its sections (at most four)."""
    parts = _split_sections(code)
    if len(parts) > 4:
        raise NumberFormatError(f"Too many sections in format '{code}'")
    return tuple(_tokenize(part, code) for part in parts)


# ---------------------------------------------------------------------------
# Section selection
# ---------------------------------------------------------------------------

def _select_section(sections, number):
    """Pick the section for *number*; returns (section, number_to_render)."""
    numeric = list(sections[:3])
    if any(s.condition for s in numeric):
        for s in numeric:
            if s.condition and s.accepts(number):
                return s, abs(number) if s is not numeric[0] else number
        rest = [s for s in numeric if not s.condition]
        if rest:
            return rest[0], abs(number)
        return numeric[0], number
    if number < 0 and len(numeric) >= 2:
        return numeric[1], -number
    if number == 0 and len(numeric) >= 3:
        return numeric[2], number
    return numeric[0], number


# ---------------------------------------------------------------------------
# General
# ---------------------------------------------------------------------------

def _strip_zeros(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_general(number) -> str:
    """Render *number* the way the General format does."""
    if isinstance(number, int) and abs(number) < 10 ** GENERAL_WIDTH:
        return str(number)
    number = float(number)
    if number == 0:
        return "0"
    magnitude = abs(number)
    if magnitude >= 10 ** GENERAL_WIDTH or magnitude < 1e-9:
        return _general_scientific(number)
    if number.is_integer():
        return str(int(number))
    int_digits = len(str(int(magnitude))) if magnitude >= 1 else 1
    decimals = max(0, GENERAL_WIDTH - 1 - int_digits)
    text = _strip_zeros(_fixed(magnitude, decimals))
    scientific = _general_scientific(magnitude)
    # leading zeros of small numbers leave room for fewer digits than E notation
    if _significant_digits(text) < _significant_digits(scientific.split("E")[0]):
        text = scientific
    return "-" + text if number < 0 else text


def _general_scientific(number) -> str:
    mantissa, exponent = f"{number:.5E}".split("E")
    return f"{_strip_zeros(mantissa)}E{exponent}"


def _significant_digits(text: str) -> int:
    return len("".join(c for c in text if c.isdigit()).lstrip("0"))


def _to_decimal(number) -> Decimal:
    if isinstance(number, Decimal):
        return number
    if isinstance(number, int):
        return Decimal(number)
    return Decimal(repr(float(number)))


def _fixed(number, decimals: int) -> str:
    """Round half-up to *decimals* places and return plain digits."""
    quantum = Decimal(1).scaleb(-decimals)
    return format(_to_decimal(number).quantize(quantum, rounding=ROUND_HALF_UP), "f")


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def _group_thousands(digits: str) -> str:
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i:i + 3] for i in range(head, len(digits), 3)]
    return ",".join(groups)


def _fill_integer(placeholders: list[str], digits: str, grouping: bool) -> list[str]:
    """Distribute *digits* over integer placeholders, right to left."""
    if digits == "0":
        digits = ""
    if grouping:
        required = sum(1 for p in placeholders if p == "0")
        padded = digits.rjust(required, "0")
        text = _group_thousands(padded) if padded else ""
        return [text] + [""] * (len(placeholders) - 1)
    out = [""] * len(placeholders)
    remaining = digits
    for idx in range(len(placeholders) - 1, -1, -1):
        if remaining:
            if idx == 0:
                out[idx] = remaining
                remaining = ""
            else:
                out[idx] = remaining[-1]
                remaining = remaining[:-1]
        elif placeholders[idx] == "0":
            out[idx] = "0"
        elif placeholders[idx] == "?":
            out[idx] = " "
    return out


def _fill_fraction(placeholders: list[str], digits: str) -> list[str]:
    """Place decimal *digits*, trimming optional trailing zeros."""
    out = list(digits)
    for idx in range(len(placeholders) - 1, -1, -1):
        if out[idx] != "0" or placeholders[idx] == "0":
            break
        out[idx] = " " if placeholders[idx] == "?" else ""
    return out


def _layout(tokens):
    """Return (integer digit indexes, fraction digit indexes, comma roles)."""
    end = len(tokens)
    for idx, (kind, _) in enumerate(tokens):
        if kind == "exp":
            end = idx
            break
    point = next((idx for idx, (kind, _) in enumerate(tokens[:end]) if kind == "point"), end)
    int_idx = [i for i in range(point) if tokens[i][0] == "digit"]
    frac_idx = [i for i in range(point, end) if tokens[i][0] == "digit"]

    # commas between integer placeholders group thousands; commas right
    # after the last placeholder divide by 1000 each
    roles = {}
    if int_idx:
        for i in range(int_idx[0], int_idx[-1]):
            if tokens[i][0] == "comma":
                roles[i] = "group"
    if int_idx or frac_idx:
        i = max(int_idx + frac_idx) + 1
        while i < end and tokens[i][0] == "comma":
            roles[i] = "scale"
            i += 1
    return int_idx, frac_idx, roles


def _render(tokens, fills, roles, negative, exponent_text=None, lead=""):
    """Join tokens, substituting *fills* for digit placeholders.

    *lead* holds integer digits that have no placeholder of their own; they
    are written in front of the decimal point.
    """
    parts = ["-"] if negative else []
    for idx, (kind, text) in enumerate(tokens):
        if idx in fills:
            parts.append(fills[idx])
        elif kind == "digit":
            continue
        elif kind == "comma":
            if idx not in roles:
                parts.append(",")
        elif kind == "point":
            parts.append(lead + ".")
            lead = ""
        elif kind == "percent":
            parts.append("%")
        elif kind == "exp":
            parts.append(exponent_text)
            break
        elif kind in ("lit", "slash"):
            parts.append(text)
    return "".join(parts)


def _format_number(section: Section, number) -> str:
    tokens = section.tokens
    if any(kind == "slash" for kind, _ in tokens):
        return _format_fraction(section, number)

    negative = number < 0
    value = abs(_to_decimal(number))
    value *= Decimal(100) ** sum(1 for kind, _ in tokens if kind == "percent")

    int_idx, frac_idx, roles = _layout(tokens)
    scale = sum(1 for role in roles.values() if role == "scale")
    value /= Decimal(1000) ** scale
    grouping = "group" in roles.values()

    exp_pos = next((i for i, (kind, _) in enumerate(tokens) if kind == "exp"), None)
    exponent_text = None
    if exp_pos is not None:
        value, exponent_text = _scientific(tokens, exp_pos, value, len(int_idx), len(frac_idx))
        tokens = tokens[:exp_pos + 1]

    text = _fixed(value, len(frac_idx))
    int_digits, _, frac_digits = text.partition(".")

    fills = {}
    fills.update(zip(int_idx, _fill_integer([tokens[i][1] for i in int_idx], int_digits, grouping)))
    fills.update(zip(frac_idx, _fill_fraction([tokens[i][1] for i in frac_idx], frac_digits)))
    lead = "" if int_idx or int_digits == "0" else int_digits
    return _render(tokens, fills, roles, negative, exponent_text, lead)


def _scientific(tokens, exp_pos, value: Decimal, int_places: int, frac_places: int):
    """Split *value* into mantissa and exponent text for ``0.00E+00`` codes."""
    step = int_places if int_places > 1 else 1
    exponent = 0
    if value != 0:
        exponent = math.floor(value.log10())
        exponent -= exponent % step
    mantissa = value.scaleb(-exponent)
    rounded = Decimal(_fixed(mantissa, frac_places))
    if rounded >= Decimal(10) ** max(step, 1):
        exponent += step
        mantissa = value.scaleb(-exponent)
    exp_digits = [text for kind, text in tokens[exp_pos + 1:] if kind == "digit"]
    sign = "-" if exponent < 0 else ("+" if tokens[exp_pos][1] == "E+" else "")
    exponent_text = "E" + sign + str(abs(exponent)).rjust(len(exp_digits), "0")
    return mantissa, exponent_text


def _format_fraction(section: Section, number) -> str:
    tokens = section.tokens
    slash = next(i for i, (kind, _) in enumerate(tokens) if kind == "slash")

    num_start = slash
    while num_start > 0 and tokens[num_start - 1][0] == "digit":
        num_start -= 1
    whole_idx = [i for i in range(num_start) if tokens[i][0] == "digit"]

    den_end = slash + 1
    while den_end < len(tokens) and tokens[den_end][0] in ("digit", "lit") and (
            tokens[den_end][0] == "digit" or tokens[den_end][1].isdigit()):
        den_end += 1
    den_tokens = tokens[slash + 1:den_end]
    if not den_tokens:
        raise NumberFormatError("Fraction format without denominator")

    negative = number < 0
    value = abs(float(number))
    whole = int(value) if whole_idx else 0
    remainder = value - whole

    if all(kind == "lit" for kind, _ in den_tokens):
        denominator = int("".join(text for _, text in den_tokens))
        numerator = int(_fixed(remainder * denominator, 0))
    else:
        fraction = Fraction(remainder).limit_denominator(10 ** len(den_tokens) - 1)
        numerator, denominator = fraction.numerator, fraction.denominator
    if denominator and numerator == denominator and whole_idx:
        whole, numerator = whole + 1, 0

    prefix = _render(tokens[:whole_idx[0] if whole_idx else num_start], {}, {}, negative)
    suffix = _render(tokens[den_end:], {}, {}, False)
    if numerator == 0:
        return prefix + str(whole) + suffix
    body = f"{numerator}/{denominator}"
    if whole_idx:
        gap = _render(tokens[whole_idx[-1] + 1:num_start], {}, {}, False)
        body = (str(whole) + gap if whole else "") + body
    return prefix + body + suffix


# ---------------------------------------------------------------------------
# Dates and times
# ---------------------------------------------------------------------------

def _serial_to_date(days: int, epoch: datetime.datetime) -> datetime.date:
    if epoch == WINDOWS_EPOCH and 0 < days < 61:
        # serials before 1900-03-01 count the non-existent 1900-02-29
        days += 1
    return (epoch + datetime.timedelta(days=days)).date()


def _is_minute(tokens, idx) -> bool:
    """Decide whether an ``m``/``mm`` token means minutes."""
    if len(tokens[idx][1]) > 2:
        return False
    for kind, text in reversed(tokens[:idx]):
        if kind in ("date", "elapsed"):
            if text[0] == "h":
                return True
            break
    for kind, text in tokens[idx + 1:]:
        if kind in ("date", "elapsed"):
            return text[0] == "s"
    return False


def _format_date(section: Section, serial, epoch) -> str:
    serial = float(serial)
    if serial < 0:
        raise NumberFormatError("Negative date or time value")
    tokens = list(section.tokens)

    precision = 0
    subsecond = {}
    for idx, (kind, _) in enumerate(tokens):
        if kind == "point" and idx + 1 < len(tokens) and tokens[idx + 1] == ("digit", "0"):
            width = 0
            while idx + 1 + width < len(tokens) and tokens[idx + 1 + width] == ("digit", "0"):
                width += 1
            subsecond[idx] = width
            precision = max(precision, width)

    total = Decimal(repr(serial)) * 86400
    total = total.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    days = int(total // 86400)
    seconds = total - days * 86400
    whole_seconds = int(seconds)
    fraction = seconds - whole_seconds
    hour, rest = divmod(whole_seconds, 3600)
    minute, second = divmod(rest, 60)
    date = _serial_to_date(days, epoch)
    twelve_hour = any(kind == "ampm" for kind, _ in tokens)

    parts = []
    skip = 0
    for idx, (kind, text) in enumerate(tokens):
        if skip:
            skip -= 1
            continue
        if kind == "date":
            letter = text[0]
            if letter == "y":
                parts.append(str(date.year)[-2:] if len(text) <= 2 else f"{date.year:04d}")
            elif letter == "m" and _is_minute(tokens, idx):
                parts.append(f"{minute:02d}" if len(text) == 2 else str(minute))
            elif letter == "m":
                parts.append({
                    1: str(date.month),
                    2: f"{date.month:02d}",
                    3: MONTH_NAMES[date.month - 1][:3],
                    5: MONTH_NAMES[date.month - 1][0],
                }.get(len(text), MONTH_NAMES[date.month - 1]))
            elif letter == "d":
                parts.append({
                    1: str(date.day),
                    2: f"{date.day:02d}",
                    3: DAY_NAMES[date.weekday()][:3],
                }.get(len(text), DAY_NAMES[date.weekday()]))
            elif letter == "h":
                shown = (hour % 12 or 12) if twelve_hour else hour
                parts.append(f"{shown:02d}" if len(text) >= 2 else str(shown))
            elif letter == "s":
                parts.append(f"{second:02d}" if len(text) >= 2 else str(second))
        elif kind == "elapsed":
            letter = text[0]
            amount = {
                "h": int(total // 3600),
                "m": int(total // 60),
                "s": int(total),
            }[letter]
            parts.append(str(amount).rjust(len(text), "0"))
        elif kind == "ampm":
            morning = hour < 12
            label = ("AM" if morning else "PM") if len(text) == 5 else ("A" if morning else "P")
            parts.append(label if text[0].isupper() else label.lower())
        elif idx in subsecond:
            width = subsecond[idx]
            digits = format(fraction.quantize(Decimal(1).scaleb(-width)), "f")[2:]
            parts.append("." + digits.ljust(width, "0"))
            skip = width
        elif kind in ("lit", "slash", "comma", "point", "percent"):
            parts.append(text)
        elif kind == "digit":
            parts.append(text)
    return "".join(parts)


# ---------------------------------------------------------------------------
# Text and entry point
# ---------------------------------------------------------------------------

def _format_text(sections, text: str) -> str:
    if len(sections) >= 4:
        section = sections[3]
    elif len(sections) == 1 and sections[0].kind == "text":
        section = sections[0]
    else:
        return text
    parts = []
    for kind, token_text in section.tokens:
        if kind == "text":
            parts.append(text)
        elif kind == "lit":
            parts.append(token_text)
    return "".join(parts)


def format_value(value, number_format: str = "General", epoch=WINDOWS_EPOCH) -> str:
    """Return the display text of *value* under *number_format*."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    code = number_format or "General"
    sections = parse_format(SHORT_DATE_FORMATS.get(code.lower(), code))
    if isinstance(value, str):
        return _format_text(sections, value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time, datetime.timedelta)):
        value = to_excel(value, epoch)
    if not isinstance(value, (int, float, Decimal)):
        raise NumberFormatError(f"Cannot format value of type {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise NumberFormatError(f"Cannot format non-finite number {value}")

    section, number = _select_section(sections, value)
    if section.kind == "general":
        return _render_general(section, number)
    if section.kind == "date":
        return _format_date(section, number, epoch)
    if section.kind == "number":
        return _format_number(section, number)
    if section.kind == "text":
        return format_general(number)
    return "".join(text for kind, text in section.tokens if kind == "lit")


def _render_general(section: Section, number) -> str:
    parts = []
    for kind, text in section.tokens:
        if kind == "general":
            parts.append(format_general(number))
        elif kind == "lit":
            parts.append(text)
    return "".join(parts)
