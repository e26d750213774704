import calendar
import re
from datetime import date


IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif"}

SHOW_ABBREVIATIONS = {
    "llnm": "Louisville Loves Nu-Metal",
    "lle": "Louisville Loves Emo",
    "llp": "LLP Events",
}

# "llnm1", "llnm1-janelle", "lle2-photos"
SHOW_PATTERN = re.compile(r"^(llnm|lle|llp)(\d+)?(?:-(.+))?", re.IGNORECASE)


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _parse_date(year: str, month: str, day: str) -> date | None:
    if not (year.isdigit() and month.isdigit() and day.isdigit()):
        return None
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def format_long_date(value: date) -> str:
    """Format a date the en-US long way, e.g. 'March 15, 2024'"""
    return f"{calendar.month_name[value.month]} {value.day}, {value.year}"


def format_show_name(slug: str) -> str:
    """Turn a storage folder name into a readable show title

    Examples:
        "emo-2024-03-15" -> "Emo - March 15, 2024"
        "llnm1-janelle"  -> "Louisville Loves Nu-Metal 1 - Janelle"
        "lle2-photos"    -> "Louisville Loves Emo 2"
        "random-name"    -> "Random Name"
    """
    parts = slug.split("-")

    if len(parts) >= 4:
        show_type, year, month, day = parts[:4]
        show_date = _parse_date(year, month, day)
        if show_date is not None:
            return f"{_capitalize(show_type)} - {format_long_date(show_date)}"

    match = SHOW_PATTERN.match(slug)
    if match:
        show_name = SHOW_ABBREVIATIONS.get(match.group(1).lower())
        if show_name:
            edition, descriptor = match.group(2), match.group(3)
            if edition:
                show_name += f" {edition}"
            if descriptor and descriptor != "photos":
                show_name += f" - {_capitalize(descriptor)}"
            return show_name

    return " ".join(_capitalize(word) for word in parts)


def is_image_file(pathname: str) -> bool:
    """True for image objects, False for folder markers and other files"""
    if pathname.endswith("/"):
        return False
    if "." not in pathname:
        return False
    return "." + pathname.rsplit(".", 1)[1].lower() in IMAGE_EXTENSIONS
