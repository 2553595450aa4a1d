from pathlib import Path

from fastapi.templating import Jinja2Templates

from .distance import parse_feet_inches

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def signed(v):
    # to-par display: E, +3, -2
    if v is None:
        return "—"
    if v == 0:
        return "E"
    return f"+{v}" if v > 0 else str(v)


templates.env.filters["signed"] = signed
templates.env.globals["parse_feet_inches"] = parse_feet_inches
